"""
exporter/services package marker.
"""

from exporter.services.aggregator import Aggregator
from exporter.services.orchestrator import LifecycleState, Orchestrator

__all__ = ["Aggregator", "LifecycleState", "Orchestrator"]
