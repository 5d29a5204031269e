"""
exporter/schemas package marker.
"""

from exporter.schemas.collection import (
    CollectionResponse,
    ConnectionTestResponse,
    CycleResultResponse,
)
from exporter.schemas.stores import HealthResponse, StoreListResponse, StoreResponse, StoreTotals

__all__ = [
    "CollectionResponse",
    "ConnectionTestResponse",
    "CycleResultResponse",
    "HealthResponse",
    "StoreListResponse",
    "StoreResponse",
    "StoreTotals",
]
