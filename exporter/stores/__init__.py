"""
Store configuration helpers.
"""

from exporter.stores.loader import enabled_stores, load_store_configs, parse_store_configs
from exporter.stores.models import StoreDescriptor

__all__ = [
    "StoreDescriptor",
    "enabled_stores",
    "load_store_configs",
    "parse_store_configs",
]
