"""
exporter/scheduler/jobs.py

APScheduler-based scheduler for periodic store collection.

Schedule
--------
  collect_all_stores : crontab expression from ``SCRAPE_SCHEDULE`` (UTC)
  initial_collection : once, immediately after the scheduler starts

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down with ``wait=True`` on app shutdown so a
running cycle can finish.  The scheduler is wired into FastAPI via the
``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from exporter.errors import ConfigurationError
from exporter.services.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

COLLECT_JOB_ID = "collect_all_stores"
INITIAL_JOB_ID = "initial_collection"


def parse_schedule(expression: str) -> CronTrigger:
    """
    Build a UTC cron trigger from a five-field crontab expression.
    """

    try:
        return CronTrigger.from_crontab(expression, timezone="UTC")
    except ValueError as exc:
        raise ConfigurationError(f"Invalid scrape schedule '{expression}': {exc}") from exc


def run_scheduled_cycle(orchestrator: Orchestrator) -> None:
    """
    Scheduled entry point; a failing cycle is logged and the schedule keeps running.
    """

    try:
        orchestrator.run_cycle()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scheduled metrics collection failed: %s", exc)


def build_scheduler(
    *,
    orchestrator: Orchestrator,
    schedule: str,
    collect_on_startup: bool = True,
) -> BackgroundScheduler:
    """
    Build and register the collection jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """

    trigger = parse_schedule(schedule)
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_scheduled_cycle,
        trigger=trigger,
        args=[orchestrator],
        id=COLLECT_JOB_ID,
        name="Collect metrics for all stores",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    if collect_on_startup:
        scheduler.add_job(
            run_scheduled_cycle,
            trigger="date",
            run_date=datetime.now(timezone.utc),
            args=[orchestrator],
            id=INITIAL_JOB_ID,
            name="Initial metrics collection",
            replace_existing=True,
            misfire_grace_time=None,
        )

    logger.info("Collection scheduled with crontab %r", schedule)
    return scheduler
