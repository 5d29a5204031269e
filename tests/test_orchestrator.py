"""
tests/test_orchestrator.py

Orchestrator lifecycle, fan-out and failure isolation.
"""

from __future__ import annotations

import threading
import time

import pytest

from conftest import FakeSession, failing, healthy_routes, make_store
from exporter.connectors import StoreClient
from exporter.errors import ConfigurationError, StoreNotFoundError
from exporter.metrics import MetricRegistry, catalog
from exporter.services import Aggregator, LifecycleState, Orchestrator


def _labels(store_id: str) -> dict[str, str]:
    return {"store_id": store_id, "store_name": f"Shop {store_id}"}


@pytest.fixture()
def sessions() -> dict[str, FakeSession]:
    return {}


@pytest.fixture()
def orchestrator(registry: MetricRegistry, aggregator: Aggregator, sessions) -> Orchestrator:
    def factory(store):
        session = sessions.setdefault(store.id, FakeSession(healthy_routes()))
        return StoreClient(store, session=session)

    return Orchestrator(registry=registry, aggregator=aggregator, client_factory=factory)


class TestInitialize:
    def test_builds_clients_for_enabled_stores_only(self, orchestrator: Orchestrator) -> None:
        count = orchestrator.initialize(
            [make_store("a"), make_store("b", enabled=False), make_store("c")]
        )
        assert count == 2
        assert orchestrator.active_store_ids == ["a", "c"]
        assert len(orchestrator.stores) == 3
        assert orchestrator.state is LifecycleState.STEADY_STATE

    def test_no_enabled_stores_is_a_configuration_error(self, orchestrator: Orchestrator) -> None:
        with pytest.raises(ConfigurationError):
            orchestrator.initialize([make_store("a", enabled=False)])
        assert orchestrator.state is LifecycleState.IDLE

    def test_failed_probe_keeps_the_store(self, orchestrator: Orchestrator, sessions) -> None:
        routes = healthy_routes()
        routes["system_status"] = failing(401)
        sessions["a"] = FakeSession(routes)

        orchestrator.initialize([make_store("a")])

        assert orchestrator.active_store_ids == ["a"]

    def test_construction_failure_excludes_the_store(self, registry: MetricRegistry) -> None:
        def factory(store):
            if store.id == "broken":
                raise ValueError("bad url")
            return StoreClient(store, session=FakeSession(healthy_routes()))

        orchestrator = Orchestrator(registry=registry, client_factory=factory)
        orchestrator.initialize([make_store("broken"), make_store("ok")], probe=False)

        assert orchestrator.active_store_ids == ["ok"]
        with pytest.raises(StoreNotFoundError):
            orchestrator.get_client("broken")

    def test_no_usable_client_is_a_configuration_error(self, registry: MetricRegistry) -> None:
        def factory(store):
            raise ValueError("bad url")

        orchestrator = Orchestrator(registry=registry, client_factory=factory)
        with pytest.raises(ConfigurationError):
            orchestrator.initialize([make_store("a")])


class TestRunCycle:
    def test_no_stores_leaves_registry_untouched(
        self, orchestrator: Orchestrator, registry: MetricRegistry
    ) -> None:
        before = registry.render()
        assert orchestrator.run_cycle() == []
        assert registry.render() == before

    def test_one_store_failure_is_isolated(
        self, orchestrator: Orchestrator, registry: MetricRegistry, sessions
    ) -> None:
        routes = healthy_routes()
        routes["orders"] = failing(500)
        sessions["b"] = FakeSession(routes)
        orchestrator.initialize([make_store("a"), make_store("b"), make_store("c")])

        results = {result.store_id: result for result in orchestrator.run_cycle()}

        assert set(results) == {"a", "b", "c"}
        assert results["a"].success and results["c"].success
        assert not results["b"].success
        assert results["b"].error_kind == "orders"

        for store_id in ("a", "c"):
            labels = _labels(store_id)
            assert registry.get(catalog.PENDING_ORDERS, labels) == 1
            assert registry.get(catalog.OUT_OF_STOCK_PRODUCTS, labels) == 1
            assert registry.get(catalog.TOTAL_CUSTOMERS, labels) == 7

        b_labels = _labels("b")
        assert registry.get(catalog.SCRAPE_ERRORS, {**b_labels, "error_type": "orders"}) == 1
        assert registry.get(catalog.LAST_SCRAPE_SUCCESS, b_labels) is not None
        assert registry.get(catalog.TOTAL_CUSTOMERS, b_labels) == 7
        assert orchestrator.last_cycle_at is not None

    def test_single_store_cycle(self, orchestrator: Orchestrator, registry: MetricRegistry) -> None:
        orchestrator.initialize([make_store("a"), make_store("b")])

        results = orchestrator.run_cycle(target_store_id="b")

        assert [result.store_id for result in results] == ["b"]
        assert registry.get(catalog.TOTAL_CUSTOMERS, _labels("b")) == 7
        assert registry.get(catalog.TOTAL_CUSTOMERS, _labels("a")) is None

    def test_unknown_store_raises_not_found(self, orchestrator: Orchestrator) -> None:
        orchestrator.initialize([make_store("a")])
        with pytest.raises(StoreNotFoundError):
            orchestrator.run_cycle(target_store_id="zzz")
        with pytest.raises(StoreNotFoundError):
            orchestrator.probe("zzz")

    def test_probe_by_store_id(self, orchestrator: Orchestrator) -> None:
        orchestrator.initialize([make_store("a")], probe=False)
        assert orchestrator.probe("a") is True


class TestShutdown:
    def test_shutdown_waits_for_inflight_cycle(
        self, orchestrator: Orchestrator, sessions
    ) -> None:
        entered = threading.Event()
        release = threading.Event()
        routes = healthy_routes()
        serve_orders = routes["orders"]

        def blocking_orders(params):
            entered.set()
            release.wait(5)
            return serve_orders(params)

        routes["orders"] = blocking_orders
        sessions["a"] = FakeSession(routes)
        orchestrator.initialize([make_store("a")], probe=False)

        cycle = threading.Thread(target=orchestrator.run_cycle)
        cycle.start()
        assert entered.wait(5)
        assert orchestrator.inflight_cycles == 1

        assert orchestrator.shutdown(timeout=0.05) is False
        assert orchestrator.state is LifecycleState.STOPPED

        release.set()
        cycle.join(5)
        assert orchestrator.inflight_cycles == 0
        assert orchestrator.shutdown(timeout=1) is True

    def test_cycle_requested_during_drain_is_refused(
        self, orchestrator: Orchestrator, sessions
    ) -> None:
        entered = threading.Event()
        release = threading.Event()
        order_calls: list[int] = []
        routes = healthy_routes()
        serve_orders = routes["orders"]

        def blocking_orders(params):
            order_calls.append(params["page"])
            entered.set()
            release.wait(5)
            return serve_orders(params)

        routes["orders"] = blocking_orders
        sessions["a"] = FakeSession(routes)
        orchestrator.initialize([make_store("a")], probe=False)

        cycle = threading.Thread(target=orchestrator.run_cycle)
        cycle.start()
        assert entered.wait(5)

        drained: list[bool] = []
        stopper = threading.Thread(target=lambda: drained.append(orchestrator.shutdown(timeout=5)))
        stopper.start()
        for _ in range(500):
            if orchestrator.state is LifecycleState.SHUTTING_DOWN:
                break
            time.sleep(0.01)
        assert orchestrator.state is LifecycleState.SHUTTING_DOWN

        assert orchestrator.run_cycle() == []
        assert orchestrator.inflight_cycles == 1
        assert order_calls == [1]

        release.set()
        cycle.join(5)
        stopper.join(5)
        assert drained == [True]
        assert orchestrator.state is LifecycleState.STOPPED

    def test_drained_shutdown_closes_clients(self, orchestrator: Orchestrator, sessions) -> None:
        orchestrator.initialize([make_store("a")], probe=False)

        assert orchestrator.shutdown(timeout=1) is True
        assert sessions["a"].closed
        assert orchestrator.state is LifecycleState.STOPPED

    def test_no_cycles_after_shutdown(
        self, orchestrator: Orchestrator, registry: MetricRegistry
    ) -> None:
        orchestrator.initialize([make_store("a")], probe=False)
        orchestrator.shutdown(timeout=1)

        assert orchestrator.run_cycle() == []
        assert registry.get(catalog.TOTAL_CUSTOMERS, _labels("a")) is None
