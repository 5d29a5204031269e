"""
tests/test_store_client.py

StoreClient pagination, failure and probe behaviour against a fake session.
"""

from __future__ import annotations

import pytest
import requests

from conftest import FakeResponse, FakeSession, failing, make_store, paged
from exporter.connectors import MAX_PAGES, StoreClient
from exporter.errors import FetchError


def _client(routes, **store_overrides) -> tuple[StoreClient, FakeSession]:
    session = FakeSession(routes)
    return StoreClient(make_store(**store_overrides), session=session), session


class TestFetchPage:
    def test_sends_auth_and_paging_parameters(self) -> None:
        client, session = _client({"orders": paged([{"id": 1}])})
        page = client.fetch_page("orders", 1, 100, {"after": "2024-01-01T00:00:00.000Z"})

        assert list(page) == [{"id": 1}]
        params = session.calls_for("orders")[0]
        assert params["page"] == 1
        assert params["per_page"] == 100
        assert params["after"] == "2024-01-01T00:00:00.000Z"
        assert params["consumer_key"] == "ck_test"
        assert params["consumer_secret"] == "cs_test"

    def test_rest_path_suffix_in_url_is_normalized(self) -> None:
        client, _ = _client({}, base_url="https://shop.example.com/wp-json/wc/v3")
        assert client.store.public_url == "https://shop.example.com"
        assert client.describe()["url"] == "https://shop.example.com"

    def test_http_error_becomes_fetch_error(self) -> None:
        client, _ = _client({"orders": failing(500)})
        with pytest.raises(FetchError) as excinfo:
            client.fetch_page("orders")
        assert excinfo.value.record_type == "orders"
        assert excinfo.value.http_status == 500

    def test_transport_error_becomes_fetch_error_without_credentials(self) -> None:
        def boom(params):
            raise requests.ConnectionError("https://x?consumer_key=ck_test&consumer_secret=cs_test")

        client, _ = _client({"orders": boom})
        with pytest.raises(FetchError) as excinfo:
            client.fetch_page("orders")
        assert excinfo.value.http_status is None
        assert "cs_test" not in str(excinfo.value)

    def test_non_list_payload_is_fetch_error(self) -> None:
        client, _ = _client({"orders": lambda params: {"code": "woocommerce_rest_error"}})
        with pytest.raises(FetchError):
            client.fetch_page("orders")

    def test_invalid_json_is_fetch_error(self) -> None:
        client, _ = _client({"orders": lambda params: FakeResponse(ValueError("bad json"))})
        with pytest.raises(FetchError):
            client.fetch_page("orders")

    def test_unknown_record_type_is_rejected(self) -> None:
        client, _ = _client({})
        with pytest.raises(ValueError):
            client.fetch_page("refunds")


class TestFetchAll:
    def test_stops_after_first_empty_page_and_keeps_order(self) -> None:
        records = [{"id": index} for index in range(250)]
        client, session = _client({"products": paged(records)})

        pages = list(client.fetch_all("products"))

        assert [len(page) for page in pages] == [100, 100, 50]
        assert [record["id"] for page in pages for record in page] == list(range(250))
        assert [params["page"] for params in session.calls_for("products")] == [1, 2, 3, 4]

    def test_empty_source_yields_nothing(self) -> None:
        client, session = _client({"products": paged([])})
        assert list(client.fetch_all("products")) == []
        assert len(session.calls_for("products")) == 1

    def test_never_ending_source_stops_at_page_ceiling(self) -> None:
        client, session = _client({"products": lambda params: [{"id": params["page"]}]})

        pages = list(client.fetch_all("products"))

        assert len(pages) == MAX_PAGES == 100
        assert len(session.calls_for("products")) == 100

    def test_custom_page_cap(self) -> None:
        client, session = _client({"customers": lambda params: [{"id": 1}] * 100})
        pages = list(client.fetch_all("customers", max_pages=10))
        assert len(pages) == 10
        assert len(session.calls_for("customers")) == 10

    def test_is_lazy(self) -> None:
        client, session = _client({"orders": paged([{"id": index} for index in range(300)])})
        walk = client.fetch_all("orders")
        assert session.calls == []
        next(walk)
        assert len(session.calls_for("orders")) == 1

    def test_page_failure_aborts_the_walk(self) -> None:
        def flaky(params):
            if params["page"] == 2:
                return FakeResponse({"message": "boom"}, status_code=502)
            return [{"id": params["page"]}] * 100

        client, session = _client({"orders": flaky})
        walk = client.fetch_all("orders")
        assert len(next(walk)) == 100
        with pytest.raises(FetchError):
            next(walk)
        assert len(session.calls_for("orders")) == 2


class TestProbe:
    def test_probe_success(self) -> None:
        client, session = _client({"system_status": lambda params: {"environment": {}}})
        assert client.probe() is True
        assert len(session.calls_for("system_status")) == 1

    def test_probe_failure_returns_false(self) -> None:
        client, _ = _client({"system_status": failing(401)})
        assert client.probe() is False

    def test_probe_never_raises_on_transport_error(self) -> None:
        def boom(params):
            raise requests.Timeout("slow")

        client, _ = _client({"system_status": boom})
        assert client.probe() is False

    def test_probe_never_raises_on_unexpected_error(self) -> None:
        def boom(params):
            raise RuntimeError("unexpected")

        client, _ = _client({"system_status": boom})
        assert client.probe() is False
