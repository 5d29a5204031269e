"""
tests/conftest.py

Shared fakes for the exporter test suite.

``FakeSession`` stands in for ``requests.Session``: requests are routed by
the last path segment of the URL (``orders``, ``products``, ``customers``,
``system_status``) to a handler that receives the query parameters.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest
import requests

from exporter.connectors import StoreClient
from exporter.metrics import MetricRegistry
from exporter.services import Aggregator
from exporter.stores import StoreDescriptor

FIXED_NOW = datetime(2024, 5, 15, 12, 0, 0)
FIXED_WALL_TIME = 1715774400.0


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


Handler = Callable[[dict[str, Any]], Any]


class FakeSession:
    """
    Minimal ``requests.Session`` replacement routing by resource name.

    A handler may return a JSON payload, a ``FakeResponse``, or raise.
    Unrouted resources answer 404.
    """

    def __init__(self, routes: dict[str, Handler] | None = None) -> None:
        self.routes: dict[str, Handler] = dict(routes or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._lock = threading.Lock()

    def request(self, *, method: str, url: str, params=None, headers=None, timeout=None):
        resource = url.rstrip("/").rsplit("/", 1)[-1]
        params = dict(params or {})
        with self._lock:
            self.calls.append((resource, params))
        handler = self.routes.get(resource)
        if handler is None:
            return FakeResponse({"message": "No route"}, status_code=404)
        result = handler(params)
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(result)

    def calls_for(self, resource: str) -> list[dict[str, Any]]:
        return [params for name, params in self.calls if name == resource]

    def close(self) -> None:
        self.closed = True


def paged(records: list[dict[str, Any]]) -> Handler:
    """Serve ``records`` honoring the ``page`` and ``per_page`` parameters."""

    def handler(params: dict[str, Any]) -> list[dict[str, Any]]:
        page = int(params.get("page", 1))
        per_page = int(params.get("per_page", 100))
        start = (page - 1) * per_page
        return records[start : start + per_page]

    return handler


def failing(status_code: int = 500) -> Handler:
    def handler(params: dict[str, Any]) -> FakeResponse:
        return FakeResponse({"message": "Internal error"}, status_code=status_code)

    return handler


def make_store(store_id: str = "store1", **overrides: Any) -> StoreDescriptor:
    fields: dict[str, Any] = {
        "id": store_id,
        "display_name": f"Shop {store_id}",
        "base_url": f"https://{store_id}.example.com",
        "api_key": "ck_test",
        "api_secret": "cs_test",
        "currency_code": "USD",
    }
    fields.update(overrides)
    return StoreDescriptor(**fields)


def order(
    status: str,
    total: Any,
    *,
    created: str = "2024-05-15T09:30:00",
    items: list[tuple[int, str, int]] | None = None,
) -> dict[str, Any]:
    return {
        "status": status,
        "total": total,
        "date_created": created,
        "line_items": [
            {"product_id": product_id, "name": name, "quantity": quantity}
            for product_id, name, quantity in (items or [])
        ],
    }


def product(
    status: str = "publish",
    *,
    stock_status: str = "instock",
    quantity: int | None = None,
    manage_stock: bool = False,
) -> dict[str, Any]:
    return {
        "status": status,
        "stock_status": stock_status,
        "stock_quantity": quantity,
        "manage_stock": manage_stock,
    }


def healthy_routes() -> dict[str, Handler]:
    """Routes for a small store where every endpoint succeeds."""

    return {
        "orders": paged(
            [
                order("completed", "100.00", items=[(1, "Mug", 2)]),
                order("completed", "50.50", created="2024-05-01T10:00:00", items=[(2, "Cap", 1)]),
                order("processing", "20.00"),
                order("pending", "5.00"),
            ]
        ),
        "products": paged(
            [
                product(),
                product(stock_status="outofstock", quantity=0, manage_stock=True),
                product(quantity=3, manage_stock=True),
            ]
        ),
        "customers": paged([{"id": index} for index in range(7)]),
        "system_status": lambda params: {"environment": {}},
    }


@pytest.fixture()
def registry() -> MetricRegistry:
    return MetricRegistry()


@pytest.fixture()
def aggregator(registry: MetricRegistry) -> Aggregator:
    return Aggregator(
        registry=registry,
        clock=lambda: FIXED_NOW,
        wall_time=lambda: FIXED_WALL_TIME,
    )


@pytest.fixture()
def make_client() -> Callable[..., StoreClient]:
    def build(store_id: str = "store1", routes: dict[str, Handler] | None = None) -> StoreClient:
        session = FakeSession(healthy_routes() if routes is None else routes)
        return StoreClient(make_store(store_id), session=session)

    return build
