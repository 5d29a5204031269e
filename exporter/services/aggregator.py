"""
exporter/services/aggregator.py

Reduces one store's orders, products and customers into metric values.

The three reductions run concurrently per store and are isolated from each
other: a failing branch records an error under its own name and never
stops its siblings from writing their metrics.  Each branch writes only
after its full record walk succeeded, so a page failure never leaves a
half-reduced value behind.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from exporter.connectors.woocommerce import PAGE_SIZE, StoreClient
from exporter.domain import (
    BRANCH_GENERAL,
    CUSTOMERS,
    ORDERS,
    PRODUCTS,
    BranchOutcome,
    CustomerCount,
    StoreCollectionResult,
)
from exporter.errors import FetchError, RegistrySchemaError
from exporter.logging_utils import log_event
from exporter.metrics import MetricRegistry, catalog
from reductions import LOOKBACK_DAYS, OrderReduction, ProductReduction
from reductions.base import utc_iso

logger = logging.getLogger(__name__)

CUSTOMER_MAX_PAGES = 10
ALL_STATUSES = "all"
ALL_TIME = "all_time"

_BRANCHES = (ORDERS, PRODUCTS, CUSTOMERS)


class Aggregator:
    """
    Drives a ``StoreClient`` through full pagination and writes the
    reduced values into the ``MetricRegistry``.
    """

    def __init__(
        self,
        *,
        registry: MetricRegistry,
        clock: Callable[[], datetime] = datetime.now,
        wall_time: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self._clock = clock
        self._wall_time = wall_time

    def collect_store(self, client: StoreClient) -> StoreCollectionResult:
        """
        Run the orders, products and customers reductions for one store.

        The success timestamp and scrape duration are written whatever the
        branch outcomes were.
        """

        started = time.monotonic()
        labels = _store_labels(client)
        log_event(
            logger,
            logging.INFO,
            "store_collection_started",
            store_id=client.store_id,
            store_name=client.store_name,
        )

        collectors: dict[str, Callable[[StoreClient], None]] = {
            ORDERS: self.collect_orders,
            PRODUCTS: self.collect_products,
            CUSTOMERS: self.collect_customers,
        }
        try:
            with ThreadPoolExecutor(
                max_workers=len(_BRANCHES),
                thread_name_prefix=f"collect-{client.store_id}",
            ) as executor:
                futures = {
                    branch: executor.submit(self._run_branch, branch, collectors[branch], client)
                    for branch in _BRANCHES
                }
                outcomes = tuple(futures[branch].result() for branch in _BRANCHES)

            self._registry.set(catalog.LAST_SCRAPE_SUCCESS, labels, int(self._wall_time()))
            duration = time.monotonic() - started
            self._registry.set(catalog.SCRAPE_DURATION, labels, duration)
        except RegistrySchemaError:
            raise
        except Exception as exc:
            logger.exception(
                "Error collecting metrics store=%s error=%s",
                client.store_id,
                exc,
            )
            self._record_error(labels, BRANCH_GENERAL)
            raise

        result = StoreCollectionResult(
            store_id=client.store_id,
            duration_seconds=duration,
            branches=outcomes,
        )
        log_event(
            logger,
            logging.INFO if result.success else logging.WARNING,
            "store_collection_completed",
            store_id=client.store_id,
            duration_seconds=round(duration, 3),
            failed_branches=result.failed_branches,
        )
        return result

    def collect_orders(self, client: StoreClient) -> None:
        """
        Reduce orders created within the look-back window.
        """

        labels = _store_labels(client)
        currency = client.currency
        started = time.monotonic()
        now = self._clock()
        reduction = OrderReduction(now=now)

        after = utc_iso(now - timedelta(days=LOOKBACK_DAYS))
        for page in client.fetch_all(ORDERS, {"after": after}):
            reduction.add_all(page)

        self._registry.set(
            catalog.API_RESPONSE_TIME,
            {**labels, "endpoint": ORDERS},
            time.monotonic() - started,
        )
        summary = reduction.summary()

        self._registry.set(
            catalog.TOTAL_ORDERS,
            {**labels, "status": ALL_STATUSES, "currency": currency},
            summary.total_orders,
        )
        self._registry.replace(
            catalog.ORDERS_BY_STATUS,
            {"store_id": client.store_id},
            [
                ({**labels, "status": status, "currency": currency}, count)
                for status, count in summary.status_counts.items()
            ],
        )
        self._registry.set(catalog.PENDING_ORDERS, labels, summary.status_count("pending"))
        self._registry.set(catalog.FAILED_ORDERS, labels, summary.status_count("failed"))
        self._registry.set(catalog.PROCESSING_ORDERS, labels, summary.status_count("processing"))

        money_labels = {**labels, "currency": currency}
        self._registry.set(
            catalog.TOTAL_REVENUE, {**money_labels, "period": ALL_TIME}, summary.total_revenue
        )
        self._registry.set(catalog.REVENUE_TODAY, money_labels, summary.revenue_today)
        self._registry.set(catalog.REVENUE_THIS_MONTH, money_labels, summary.revenue_this_month)
        self._registry.set(
            catalog.AVERAGE_ORDER_VALUE,
            {**money_labels, "period": ALL_TIME},
            summary.average_order_value,
        )

        self._registry.replace(
            catalog.TOP_PRODUCTS_SOLD,
            {"store_id": client.store_id},
            [
                (
                    {
                        **labels,
                        "product_id": product.product_id,
                        "product_name": product.product_name,
                    },
                    product.quantity,
                )
                for product in summary.top_products
            ],
        )

        logger.debug(
            "Order metrics collected store=%s orders=%s revenue=%.2f",
            client.store_id,
            summary.total_orders,
            summary.total_revenue,
        )

    def collect_products(self, client: StoreClient) -> None:
        """
        Reduce the full product catalog.
        """

        labels = _store_labels(client)
        started = time.monotonic()
        reduction = ProductReduction()

        for page in client.fetch_all(PRODUCTS):
            reduction.add_all(page)

        self._registry.set(
            catalog.API_RESPONSE_TIME,
            {**labels, "endpoint": PRODUCTS},
            time.monotonic() - started,
        )
        summary = reduction.summary()

        rows = [({**labels, "status": ALL_STATUSES}, summary.total_products)]
        rows.extend(
            ({**labels, "status": status}, count)
            for status, count in summary.status_counts.items()
        )
        self._registry.replace(catalog.TOTAL_PRODUCTS, {"store_id": client.store_id}, rows)
        self._registry.set(
            catalog.LOW_STOCK_PRODUCTS,
            {**labels, "threshold": str(summary.low_stock_threshold)},
            summary.low_stock,
        )
        self._registry.set(catalog.OUT_OF_STOCK_PRODUCTS, labels, summary.out_of_stock)

        logger.debug(
            "Product metrics collected store=%s products=%s low_stock=%s out_of_stock=%s",
            client.store_id,
            summary.total_products,
            summary.low_stock,
            summary.out_of_stock,
        )

    def collect_customers(self, client: StoreClient) -> None:
        """
        Write the customer count, exact or estimated.
        """

        labels = _store_labels(client)
        started = time.monotonic()
        counted = self.count_customers(client)

        self._registry.set(
            catalog.API_RESPONSE_TIME,
            {**labels, "endpoint": CUSTOMERS},
            time.monotonic() - started,
        )
        self._registry.set(catalog.TOTAL_CUSTOMERS, labels, counted.count)
        self._registry.set(catalog.CUSTOMER_COUNT_COMPLETE, labels, 1 if counted.complete else 0)

        logger.debug(
            "Customer metrics collected store=%s customers=%s complete=%s source=%s",
            client.store_id,
            counted.count,
            counted.complete,
            counted.source,
        )

    def count_customers(self, client: StoreClient) -> CustomerCount:
        """
        Count customers with a capped page walk, falling back to the size of
        a single first page when the walk fails.

        Raises ``FetchError`` only when the fallback fails too.
        """

        try:
            count = 0
            pages = 0
            last_page_size = 0
            for page in client.fetch_all(CUSTOMERS, max_pages=CUSTOMER_MAX_PAGES):
                pages += 1
                last_page_size = len(page)
                count += last_page_size
            complete = pages < CUSTOMER_MAX_PAGES or last_page_size < PAGE_SIZE
            return CustomerCount(count=count, complete=complete, source="walk")
        except FetchError as exc:
            logger.warning(
                "Could not get full customer count store=%s, using first page error=%s",
                client.store_id,
                exc,
            )

        first_page = client.fetch_page(CUSTOMERS, 1, PAGE_SIZE)
        return CustomerCount(count=len(first_page), complete=False, source="first_page")

    def _run_branch(
        self,
        branch: str,
        collect: Callable[[StoreClient], None],
        client: StoreClient,
    ) -> BranchOutcome:
        try:
            collect(client)
        except RegistrySchemaError:
            raise
        except Exception as exc:
            logger.error(
                "Error collecting %s metrics store=%s error=%s",
                branch,
                client.store_id,
                exc,
            )
            self._record_error(_store_labels(client), branch)
            return BranchOutcome(
                branch=branch,
                success=False,
                error_kind=type(exc).__name__,
                error=str(exc),
            )
        return BranchOutcome(branch=branch, success=True)

    def _record_error(self, labels: dict[str, str], error_type: str) -> None:
        self._registry.increment(catalog.SCRAPE_ERRORS, {**labels, "error_type": error_type})


def _store_labels(client: StoreClient) -> dict[str, str]:
    return {"store_id": client.store_id, "store_name": client.store_name}
