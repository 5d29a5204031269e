"""
exporter/api/routers/collection.py

Manual collection triggers and store connection tests.

These endpoints serve operators, so failures carry the triggering error's
message back to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from exporter.api.dependencies import get_orchestrator
from exporter.domain import CycleResult
from exporter.errors import StoreNotFoundError
from exporter.schemas import CollectionResponse, ConnectionTestResponse, CycleResultResponse
from exporter.services import Orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["collection"])


@router.post("/collect", response_model=CollectionResponse)
def collect_all(orchestrator: Orchestrator = Depends(get_orchestrator)) -> CollectionResponse:
    """
    Run one collection cycle for every active store.
    """

    logger.info("Manual collection triggered for all stores")
    try:
        results = orchestrator.run_cycle()
    except Exception as exc:
        logger.error("Manual collection failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Collection failed: {exc}",
        ) from exc

    return _collection_response("Metrics collection completed for all stores", results)


@router.post("/collect/{store_id}", response_model=CollectionResponse)
def collect_store(
    store_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> CollectionResponse:
    """
    Run one collection cycle for a single store.
    """

    logger.info("Manual collection triggered store=%s", store_id)
    try:
        results = orchestrator.run_cycle(target_store_id=store_id)
    except StoreNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Manual collection failed store=%s error=%s", store_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Collection failed: {exc}",
        ) from exc

    return _collection_response(f"Metrics collection completed for store: {store_id}", results)


@router.post("/test/{store_id}", response_model=ConnectionTestResponse)
def test_connection(
    store_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> ConnectionTestResponse:
    """
    Probe one store's API.
    """

    try:
        connected = orchestrator.probe(store_id)
    except StoreNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return ConnectionTestResponse(
        store_id=store_id,
        connected=connected,
        timestamp=datetime.now(timezone.utc),
    )


def _collection_response(message: str, results: list[CycleResult]) -> CollectionResponse:
    return CollectionResponse(
        message=message,
        timestamp=datetime.now(timezone.utc),
        results=[
            CycleResultResponse(
                store_id=result.store_id,
                success=result.success,
                duration_seconds=result.duration_seconds,
                error_kind=result.error_kind,
                error=result.error,
            )
            for result in results
        ],
    )
