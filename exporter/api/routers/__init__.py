"""
exporter/api/routers package marker.
"""

from exporter.api.routers.collection import router as collection_router
from exporter.api.routers.metrics import router as metrics_router
from exporter.api.routers.stores import router as stores_router

__all__ = [
    "collection_router",
    "metrics_router",
    "stores_router",
]
