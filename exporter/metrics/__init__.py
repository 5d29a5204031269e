"""
exporter/metrics package marker.
"""

from exporter.metrics import catalog
from exporter.metrics.catalog import COUNTER, DEFAULT_SERIES, GAUGE, SeriesSpec
from exporter.metrics.registry import MetricRegistry

__all__ = [
    "COUNTER",
    "DEFAULT_SERIES",
    "GAUGE",
    "MetricRegistry",
    "SeriesSpec",
    "catalog",
]
