"""
exporter/metrics/registry.py

Metric registry holding the current value of every series label set.

Series are declared once when the registry is built.  Writers go through
``set`` (gauge, overwrite) or ``increment`` (accumulate); both validate the
label set against the declared label names and treat any drift as a
``RegistrySchemaError``.  Values live in a private prometheus_client
``CollectorRegistry`` whose children are individually locked, so ``render``
can run while writers are active and never sees a half-written value.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from exporter.errors import RegistrySchemaError
from exporter.metrics.catalog import COUNTER, DEFAULT_SERIES, GAUGE, SeriesSpec

logger = logging.getLogger(__name__)

LabelValues = Mapping[str, Any]

_METRIC_FACTORIES = {GAUGE: Gauge, COUNTER: Counter}


class MetricRegistry:
    """
    Named metric series keyed by label set.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, series: Iterable[SeriesSpec] = DEFAULT_SERIES) -> None:
        self._series = tuple(series)
        self._lock = threading.RLock()
        self._install()
        logger.info("Metric registry initialized with %d series", len(self._specs))

    def declare(
        self,
        series_name: str,
        kind: str,
        label_names: Sequence[str],
        help_text: str,
    ) -> None:
        """
        Declare one series. Only allowed while the registry is being built.
        """

        if self._sealed:
            raise RegistrySchemaError(
                f"Series '{series_name}' declared after registry construction."
            )
        if series_name in self._specs:
            raise RegistrySchemaError(f"Series '{series_name}' declared twice.")
        factory = _METRIC_FACTORIES.get(kind)
        if factory is None:
            raise RegistrySchemaError(f"Series '{series_name}' has unsupported kind '{kind}'.")

        spec = SeriesSpec(
            name=series_name,
            kind=kind,
            label_names=tuple(label_names),
            help=help_text,
        )
        self._specs[series_name] = spec
        self._metrics[series_name] = factory(
            series_name,
            help_text,
            labelnames=spec.label_names,
            registry=self._registry,
        )
        self._written[series_name] = set()

    def set(self, series_name: str, label_values: LabelValues, value: float) -> None:
        """
        Overwrite the value of one gauge label set.
        """

        spec = self._spec(series_name)
        if spec.kind != GAUGE:
            raise RegistrySchemaError(f"Series '{series_name}' is a {spec.kind}; set() needs a gauge.")
        key = self._label_key(spec, label_values)
        with self._lock:
            self._metrics[series_name].labels(*key).set(value)
            self._written[series_name].add(key)

    def increment(self, series_name: str, label_values: LabelValues, delta: float = 1.0) -> None:
        """
        Add ``delta`` to one label set. Concurrent increments are never lost.
        """

        spec = self._spec(series_name)
        if spec.kind == COUNTER and delta < 0:
            raise RegistrySchemaError(f"Counter '{series_name}' cannot be decremented.")
        key = self._label_key(spec, label_values)
        with self._lock:
            self._metrics[series_name].labels(*key).inc(delta)
            self._written[series_name].add(key)

    def replace(
        self,
        series_name: str,
        match: LabelValues,
        rows: Sequence[tuple[LabelValues, float]],
    ) -> None:
        """
        Replace every gauge label set matching ``match`` with ``rows``.

        Label sets written earlier that match but are absent from ``rows`` are
        removed, so a ranking never keeps entries from an older cycle.
        """

        spec = self._spec(series_name)
        if spec.kind != GAUGE:
            raise RegistrySchemaError(
                f"Series '{series_name}' is a {spec.kind}; replace() needs a gauge."
            )
        unknown = set(match) - set(spec.label_names)
        if unknown:
            raise RegistrySchemaError(
                f"Series '{series_name}' has no labels {sorted(unknown)} to match on."
            )
        positions = {name: spec.label_names.index(name) for name in match}
        wanted = {name: str(value) for name, value in match.items()}
        new_rows = [(self._label_key(spec, labels), value) for labels, value in rows]
        for key, _ in new_rows:
            if any(key[positions[name]] != wanted[name] for name in wanted):
                raise RegistrySchemaError(
                    f"Series '{series_name}' row {key} does not match {wanted}."
                )

        with self._lock:
            metric = self._metrics[series_name]
            written = self._written[series_name]
            keep = {key for key, _ in new_rows}
            stale = [
                key
                for key in written
                if key not in keep and all(key[positions[name]] == wanted[name] for name in wanted)
            ]
            for key in stale:
                metric.remove(*key)
                written.discard(key)
            for key, value in new_rows:
                metric.labels(*key).set(value)
                written.add(key)

    def get(self, series_name: str, label_values: LabelValues) -> float | None:
        """
        Current value of one label set, or None if it was never written.
        """

        spec = self._spec(series_name)
        key = self._label_key(spec, label_values)
        sample_name = series_name
        if spec.kind == COUNTER and not series_name.endswith("_total"):
            sample_name = f"{series_name}_total"
        return self._registry.get_sample_value(sample_name, dict(zip(spec.label_names, key)))

    def label_sets(self, series_name: str) -> list[dict[str, str]]:
        """
        Every label set currently holding a value in one series.
        """

        spec = self._spec(series_name)
        with self._lock:
            keys = sorted(self._written[series_name])
        return [dict(zip(spec.label_names, key)) for key in keys]

    def render(self) -> str:
        """
        Render all series in the Prometheus text exposition format.
        """

        return generate_latest(self._registry).decode("utf-8")

    def reset(self) -> None:
        """
        Drop every value and re-declare all series.
        """

        with self._lock:
            self._install()
        logger.info("Metric registry reset")

    @property
    def series_names(self) -> list[str]:
        return list(self._specs)

    def _install(self) -> None:
        self._sealed = False
        self._registry = CollectorRegistry()
        self._specs: dict[str, SeriesSpec] = {}
        self._metrics: dict[str, Gauge | Counter] = {}
        self._written: dict[str, set[tuple[str, ...]]] = {}
        for spec in self._series:
            self.declare(spec.name, spec.kind, spec.label_names, spec.help)
        self._sealed = True

    def _spec(self, series_name: str) -> SeriesSpec:
        spec = self._specs.get(series_name)
        if spec is None:
            raise RegistrySchemaError(f"Series '{series_name}' was never declared.")
        return spec

    @staticmethod
    def _label_key(spec: SeriesSpec, label_values: LabelValues) -> tuple[str, ...]:
        provided = set(label_values)
        expected = set(spec.label_names)
        if provided != expected:
            raise RegistrySchemaError(
                f"Series '{spec.name}' expects labels {sorted(expected)}, "
                f"got {sorted(provided)}."
            )
        return tuple(str(label_values[name]) for name in spec.label_names)
