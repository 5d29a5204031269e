"""
exporter/connectors package marker.
"""

from exporter.connectors.base import BaseConnector, ConnectorRequestError
from exporter.connectors.woocommerce import MAX_PAGES, PAGE_SIZE, StoreClient

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "MAX_PAGES",
    "PAGE_SIZE",
    "StoreClient",
]
