"""
exporter/scheduler package marker.
"""

from exporter.scheduler.jobs import (
    COLLECT_JOB_ID,
    INITIAL_JOB_ID,
    build_scheduler,
    parse_schedule,
    run_scheduled_cycle,
)

__all__ = [
    "COLLECT_JOB_ID",
    "INITIAL_JOB_ID",
    "build_scheduler",
    "parse_schedule",
    "run_scheduled_cycle",
]
