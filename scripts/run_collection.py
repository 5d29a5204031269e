"""
Run one metrics collection cycle from the CLI.
"""

from __future__ import annotations

import argparse
import json

from exporter.config import get_exporter_settings
from exporter.logging_utils import configure_logging
from exporter.metrics import MetricRegistry
from exporter.services import Orchestrator
from exporter.stores import load_store_configs


def main() -> int:
    parser = argparse.ArgumentParser(description="Collect WooCommerce store metrics once.")
    parser.add_argument(
        "--store",
        dest="store",
        default=None,
        help="Optional store id from the stores config file.",
    )
    parser.add_argument(
        "--config",
        dest="config",
        default=None,
        help="Stores config path; defaults to STORES_CONFIG_PATH.",
    )
    parser.add_argument(
        "--print-metrics",
        dest="print_metrics",
        action="store_true",
        help="Print the rendered Prometheus metrics after the results.",
    )
    args = parser.parse_args()

    settings = get_exporter_settings()
    configure_logging(settings.log_level)

    registry = MetricRegistry()
    orchestrator = Orchestrator(registry=registry)
    orchestrator.initialize(load_store_configs(config_path=args.config or settings.stores_config_path))
    try:
        results = orchestrator.run_cycle(target_store_id=args.store)
    finally:
        orchestrator.shutdown(timeout=settings.shutdown_drain_seconds)

    payload = [
        {
            "store_id": result.store_id,
            "success": result.success,
            "duration_seconds": round(result.duration_seconds, 3),
            "error_kind": result.error_kind,
            "error": result.error,
        }
        for result in results
    ]
    print(json.dumps(payload, indent=2))
    if args.print_metrics:
        print(registry.render())
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
