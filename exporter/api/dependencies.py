"""
exporter/api/dependencies.py

Shared FastAPI dependencies resolving the exporter's runtime objects.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from exporter.config import ExporterSettings
from exporter.metrics import MetricRegistry
from exporter.services import Orchestrator


def get_registry(request: Request) -> MetricRegistry:
    return request.app.state.registry


def get_settings(request: Request) -> ExporterSettings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> Orchestrator:
    """
    Return the orchestrator once the lifespan has built it.
    """

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Exporter is still initializing.",
        )
    return orchestrator
