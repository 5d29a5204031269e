"""
tests/test_scheduler.py

Scheduler wiring: crontab parsing and job registration.
"""

from __future__ import annotations

import pytest
from apscheduler.triggers.cron import CronTrigger

from exporter.errors import ConfigurationError
from exporter.scheduler import (
    COLLECT_JOB_ID,
    INITIAL_JOB_ID,
    build_scheduler,
    parse_schedule,
    run_scheduled_cycle,
)


class _Orchestrator:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    def run_cycle(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return []


def test_parse_schedule_accepts_crontab() -> None:
    assert isinstance(parse_schedule("*/5 * * * *"), CronTrigger)


@pytest.mark.parametrize("expression", ["every five minutes", "* * *", "99 * * * *"])
def test_parse_schedule_rejects_invalid_crontab(expression: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_schedule(expression)


def test_build_scheduler_registers_cron_and_startup_jobs() -> None:
    scheduler = build_scheduler(orchestrator=_Orchestrator(), schedule="*/5 * * * *")

    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {COLLECT_JOB_ID, INITIAL_JOB_ID}
    assert jobs[COLLECT_JOB_ID].max_instances == 1
    assert jobs[COLLECT_JOB_ID].coalesce is True


def test_build_scheduler_without_startup_collection() -> None:
    scheduler = build_scheduler(
        orchestrator=_Orchestrator(),
        schedule="0 * * * *",
        collect_on_startup=False,
    )
    assert [job.id for job in scheduler.get_jobs()] == [COLLECT_JOB_ID]


def test_scheduled_cycle_swallows_failures() -> None:
    orchestrator = _Orchestrator(error=RuntimeError("boom"))
    run_scheduled_cycle(orchestrator)
    assert orchestrator.calls == 1
