"""
exporter/schemas/collection.py

Response schemas for collection and connection-test operations.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CycleResultResponse(BaseModel):
    """
    API response model for one store's collection outcome.
    """

    store_id: str
    success: bool
    duration_seconds: float = Field(..., ge=0)
    error_kind: str | None = None
    error: str | None = None


class CollectionResponse(BaseModel):
    """
    API response model for a manual collection trigger.
    """

    message: str
    timestamp: datetime
    results: list[CycleResultResponse]


class ConnectionTestResponse(BaseModel):
    """
    API response model for a store connectivity probe.
    """

    store_id: str
    connected: bool
    timestamp: datetime
