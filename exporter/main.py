from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, Request

from exporter import __version__
from exporter.config import ExporterSettings, get_exporter_settings
from exporter.logging_utils import configure_logging
from exporter.metrics import MetricRegistry
from exporter.schemas import HealthResponse, StoreTotals
from exporter.services import LifecycleState, Orchestrator
from exporter.stores import enabled_stores, load_store_configs

logger = logging.getLogger(__name__)


def _build_orchestrator(settings: ExporterSettings, registry: MetricRegistry) -> Orchestrator:
    """
    Load the store configuration and bring up one client per enabled store.

    Raises ConfigurationError when the configuration is invalid or no store
    could be initialized, which aborts startup.
    """

    stores = load_store_configs(config_path=settings.stores_config_path)
    logger.info("Loaded %d store configurations from %s", len(stores), settings.stores_config_path)

    orchestrator = Orchestrator(registry=registry)
    orchestrator.initialize(stores)
    return orchestrator


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Initialize stores and start the scheduler on boot; drain and stop on exit."""
    settings: ExporterSettings = application.state.settings
    if getattr(application.state, "orchestrator", None) is None:
        application.state.orchestrator = _build_orchestrator(settings, application.state.registry)
    orchestrator: Orchestrator = application.state.orchestrator

    from exporter.scheduler import build_scheduler

    scheduler = build_scheduler(
        orchestrator=orchestrator,
        schedule=settings.scrape_schedule,
        collect_on_startup=settings.collect_on_startup,
    )
    scheduler.start()
    application.state.scheduler = scheduler
    logger.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")
        orchestrator.shutdown(timeout=settings.shutdown_drain_seconds)


def _next_collection(application: FastAPI) -> str:
    from exporter.scheduler import COLLECT_JOB_ID

    scheduler = getattr(application.state, "scheduler", None)
    if scheduler is None:
        return "not scheduled"
    job = scheduler.get_job(COLLECT_JOB_ID)
    next_run = getattr(job, "next_run_time", None) if job is not None else None
    if next_run is None:
        return "not scheduled"
    return next_run.isoformat()


def create_app(
    settings: ExporterSettings | None = None,
    *,
    registry: MetricRegistry | None = None,
    orchestrator: Orchestrator | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Store loading happens in the lifespan, so building the app never touches
    the store configuration. Passing a ready ``orchestrator`` skips that step.
    """

    settings = settings or get_exporter_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title="WooCommerce Prometheus Exporter",
        version=__version__,
        lifespan=_lifespan,
    )
    application.state.settings = settings
    application.state.registry = registry or MetricRegistry()
    application.state.orchestrator = orchestrator
    application.state.scheduler = None

    from exporter.api.routers import collection_router, metrics_router, stores_router

    application.include_router(metrics_router)
    application.include_router(stores_router)
    application.include_router(collection_router)

    @application.get("/")
    def index() -> dict[str, Any]:
        return {
            "name": application.title,
            "version": __version__,
            "endpoints": {
                "metrics": "/metrics",
                "health": "/health",
                "stores": "/stores",
                "collect": "POST /collect",
                "collect_store": "POST /collect/{store_id}",
                "test_store": "POST /test/{store_id}",
            },
        }

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(request: Request) -> HealthResponse:
        current: Orchestrator | None = request.app.state.orchestrator
        if current is None:
            return HealthResponse(
                status="starting",
                timestamp=datetime.now(timezone.utc),
                state=LifecycleState.IDLE.value,
                stores=StoreTotals(total=0, enabled=0, initialized=0),
                next_collection=_next_collection(request.app),
            )

        healthy = current.state is LifecycleState.STEADY_STATE
        return HealthResponse(
            status="healthy" if healthy else "unavailable",
            timestamp=datetime.now(timezone.utc),
            state=current.state.value,
            stores=StoreTotals(
                total=len(current.stores),
                enabled=len(enabled_stores(current.stores)),
                initialized=len(current.active_store_ids),
            ),
            last_collection=current.last_cycle_at,
            failed_stores=[
                result.store_id for result in current.last_results if not result.success
            ],
            next_collection=_next_collection(request.app),
        )

    return application


def main() -> None:
    settings = get_exporter_settings()
    uvicorn.run(
        "exporter.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


app = create_app()


if __name__ == "__main__":
    main()
