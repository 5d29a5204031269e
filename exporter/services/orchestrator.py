"""
exporter/services/orchestrator.py

Fans collection cycles out across stores and owns the exporter lifecycle.

Lifecycle
----------
``IDLE -> INITIALIZING -> STEADY_STATE -> SHUTTING_DOWN -> STOPPED``

``initialize()`` builds one ``StoreClient`` per enabled store.  A failed
connectivity probe is only logged; a client that cannot be constructed
leaves its store out for the rest of the process lifetime.  No usable
client at all is a fatal ``ConfigurationError``.

``shutdown()`` refuses new cycles and waits for in-flight ones to finish.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum

from exporter.connectors.woocommerce import StoreClient
from exporter.domain import CycleResult
from exporter.errors import ConfigurationError, RegistrySchemaError, StoreNotFoundError
from exporter.logging_utils import log_event
from exporter.metrics import MetricRegistry
from exporter.services.aggregator import Aggregator
from exporter.stores.loader import enabled_stores
from exporter.stores.models import StoreDescriptor

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    STEADY_STATE = "steady_state"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class Orchestrator:
    """
    Runs full-fleet and single-store collection cycles.
    """

    def __init__(
        self,
        *,
        registry: MetricRegistry,
        aggregator: Aggregator | None = None,
        client_factory: Callable[[StoreDescriptor], StoreClient] = StoreClient,
    ) -> None:
        self._registry = registry
        self._aggregator = aggregator or Aggregator(registry=registry)
        self._client_factory = client_factory
        self._stores: tuple[StoreDescriptor, ...] = ()
        self._clients: dict[str, StoreClient] = {}
        self._state = LifecycleState.IDLE
        self._inflight = 0
        self._inflight_changed = threading.Condition()
        self.last_cycle_at: datetime | None = None
        self.last_results: list[CycleResult] = []

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def stores(self) -> tuple[StoreDescriptor, ...]:
        return self._stores

    @property
    def active_store_ids(self) -> list[str]:
        return list(self._clients)

    @property
    def inflight_cycles(self) -> int:
        with self._inflight_changed:
            return self._inflight

    def initialize(self, stores: Sequence[StoreDescriptor], *, probe: bool = True) -> int:
        """
        Build clients for every enabled store and return how many succeeded.
        """

        self._state = LifecycleState.INITIALIZING
        self._stores = tuple(stores)
        enabled = enabled_stores(self._stores)
        if not enabled:
            self._state = LifecycleState.IDLE
            raise ConfigurationError("No enabled stores found in configuration.")

        logger.info("Initializing %d enabled stores", len(enabled))
        for store in enabled:
            try:
                client = self._client_factory(store)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Failed to initialize store=%s name=%r error=%s",
                    store.id,
                    store.display_name,
                    exc,
                )
                continue

            self._clients[store.id] = client
            if not probe:
                continue
            if client.probe():
                logger.info("Store initialized store=%s name=%r", store.id, store.display_name)
            else:
                logger.warning(
                    "Store initialized but connection test failed store=%s name=%r",
                    store.id,
                    store.display_name,
                )

        logger.info(
            "Successfully initialized %d out of %d stores",
            len(self._clients),
            len(enabled),
        )
        if not self._clients:
            self._state = LifecycleState.IDLE
            raise ConfigurationError("No stores could be initialized.")

        self._state = LifecycleState.STEADY_STATE
        return len(self._clients)

    def get_client(self, store_id: str) -> StoreClient:
        client = self._clients.get(store_id)
        if client is None:
            raise StoreNotFoundError(f"Store {store_id} not found or not initialized")
        return client

    def probe(self, store_id: str) -> bool:
        return self.get_client(store_id).probe()

    def run_cycle(self, target_store_id: str | None = None) -> list[CycleResult]:
        """
        Collect every active store concurrently, or only ``target_store_id``.

        One store's failure never aborts or delays the others; every store
        gets a ``CycleResult``.
        """

        if target_store_id is not None:
            clients = [self.get_client(target_store_id)]
        else:
            clients = list(self._clients.values())

        if not clients:
            logger.warning("No store clients available for metrics collection")
            return []

        with self._track_cycle() as admitted:
            if not admitted:
                logger.warning("Collection cycle skipped; exporter is %s", self._state.value)
                return []

            started = time.monotonic()
            log_event(
                logger,
                logging.INFO,
                "collection_cycle_started",
                stores=[client.store_id for client in clients],
            )
            if len(clients) == 1:
                results = [self._collect_one(clients[0])]
            else:
                with ThreadPoolExecutor(
                    max_workers=len(clients),
                    thread_name_prefix="collect-cycle",
                ) as executor:
                    results = list(executor.map(self._collect_one, clients))

            completed = sum(1 for result in results if result.success)
            failed = len(results) - completed
            duration = time.monotonic() - started
            self.last_cycle_at = datetime.now(timezone.utc)
            self.last_results = results

            log_event(
                logger,
                logging.INFO,
                "collection_cycle_completed",
                completed=completed,
                failed=failed,
                duration_seconds=round(duration, 3),
            )
            if failed:
                logger.warning("%d stores failed during metrics collection", failed)
        return results

    def shutdown(self, *, timeout: float | None = None) -> bool:
        """
        Stop accepting cycles and wait for in-flight ones.

        Returns False when ``timeout`` elapsed before the drain finished.
        """

        with self._inflight_changed:
            self._state = LifecycleState.SHUTTING_DOWN
            logger.info("Shutting down; waiting for %d in-flight cycles", self._inflight)
            drained = self._inflight_changed.wait_for(lambda: self._inflight == 0, timeout)

        for client in self._clients.values():
            client.close()
        with self._inflight_changed:
            self._state = LifecycleState.STOPPED
        if drained:
            logger.info("Shutdown complete")
        else:
            logger.warning("Shutdown timed out with %d cycles still running", self.inflight_cycles)
        return drained

    def _collect_one(self, client: StoreClient) -> CycleResult:
        started = time.monotonic()
        try:
            collected = self._aggregator.collect_store(client)
        except RegistrySchemaError:
            raise
        except Exception as exc:
            logger.error("Metrics collection failed store=%s error=%s", client.store_id, exc)
            return CycleResult(
                store_id=client.store_id,
                success=False,
                duration_seconds=time.monotonic() - started,
                error_kind=type(exc).__name__,
                error=str(exc),
            )

        failures = [outcome for outcome in collected.branches if not outcome.success]
        return CycleResult(
            store_id=client.store_id,
            success=not failures,
            duration_seconds=collected.duration_seconds,
            error_kind=",".join(outcome.branch for outcome in failures) or None,
            error="; ".join(f"{outcome.branch}: {outcome.error}" for outcome in failures) or None,
        )

    @contextmanager
    def _track_cycle(self) -> Iterator[bool]:
        # admission check and in-flight increment happen together under the drain lock
        with self._inflight_changed:
            admitted = self._state not in (LifecycleState.SHUTTING_DOWN, LifecycleState.STOPPED)
            if admitted:
                self._inflight += 1
        try:
            yield admitted
        finally:
            if admitted:
                with self._inflight_changed:
                    self._inflight -= 1
                    self._inflight_changed.notify_all()
