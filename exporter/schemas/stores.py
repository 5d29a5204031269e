"""
exporter/schemas/stores.py

Response schemas for store listing and service health.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class StoreResponse(BaseModel):
    """
    Credential-free view of one configured store.
    """

    id: str
    name: str
    enabled: bool
    currency: str
    scrape_interval_ms: int = Field(..., ge=0)
    url: str
    initialized: bool


class StoreListResponse(BaseModel):
    stores: list[StoreResponse]
    total: int = Field(..., ge=0)
    enabled: int = Field(..., ge=0)


class StoreTotals(BaseModel):
    total: int = Field(..., ge=0)
    enabled: int = Field(..., ge=0)
    initialized: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    """
    API response model for the health endpoint.
    """

    status: str
    timestamp: datetime
    state: str
    stores: StoreTotals
    last_collection: datetime | None = None
    failed_stores: list[str] = Field(default_factory=list)
    next_collection: str
