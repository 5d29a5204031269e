"""
exporter/api/routers/metrics.py

Prometheus scrape endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from exporter.api.dependencies import get_registry, get_settings
from exporter.config import ExporterSettings
from exporter.metrics import MetricRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
def scrape_metrics(
    registry: MetricRegistry = Depends(get_registry),
    settings: ExporterSettings = Depends(get_settings),
) -> Response:
    """
    Render every metric series in the Prometheus text format.
    """

    try:
        body = registry.render()
    except Exception as exc:
        logger.exception("Error serving metrics: %s", exc)
        payload = {"error": "Failed to generate metrics"}
        if settings.is_development:
            payload["message"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)

    return PlainTextResponse(content=body, media_type=registry.content_type)
