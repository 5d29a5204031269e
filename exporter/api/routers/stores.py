"""
exporter/api/routers/stores.py

Configured store listing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from exporter.api.dependencies import get_orchestrator
from exporter.schemas import StoreListResponse, StoreResponse
from exporter.services import Orchestrator

router = APIRouter(tags=["stores"])


@router.get("/stores", response_model=StoreListResponse)
def list_stores(orchestrator: Orchestrator = Depends(get_orchestrator)) -> StoreListResponse:
    """
    List every configured store without credentials.
    """

    active = set(orchestrator.active_store_ids)
    stores = [
        StoreResponse(
            id=store.id,
            name=store.display_name,
            enabled=store.enabled,
            currency=store.currency_code,
            scrape_interval_ms=store.scrape_interval_ms,
            url=store.public_url,
            initialized=store.id in active,
        )
        for store in orchestrator.stores
    ]
    return StoreListResponse(
        stores=stores,
        total=len(stores),
        enabled=sum(1 for store in stores if store.enabled),
    )
