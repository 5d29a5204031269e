"""
reductions/orders.py

Order reduction: status tallies, completed-order revenue and top sellers.

Expected record fields
----------------------
status : str
    Order status, e.g. ``completed``, ``processing``, ``pending``.
total : str | float
    Order total. Absent or non-numeric totals count as zero.
date_created : str
    ISO timestamp of order creation in store-local time.
line_items : list[dict]
    Each with ``product_id``, ``name`` and ``quantity``.

Revenue
-------
Only orders whose status is ``completed`` contribute revenue. Revenue is
also bucketed into "today" and "this month" by comparing the order's
creation date with the observation time handed to the reduction.

AOV = completed revenue / completed orders, and 0.0 when there are none.

Top products
------------
Quantities are summed per product id; the ranking is ordered by descending
quantity, ties keep first-seen order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from reductions.base import BaseReduction, parse_amount, parse_local_datetime, parse_quantity

COMPLETED_STATUS = "completed"
LOOKBACK_DAYS = 90
TOP_PRODUCTS_LIMIT = 10
UNKNOWN_STATUS = "unknown"


@dataclass(frozen=True)
class ProductSales:
    """Units sold for one product across the reduced orders."""

    product_id: str
    product_name: str
    quantity: int


@dataclass(frozen=True)
class OrderSummary:
    """
    Reduced order metrics for one store.
    """

    total_orders: int
    status_counts: dict[str, int]
    completed_orders: int
    total_revenue: float
    revenue_today: float
    revenue_this_month: float
    average_order_value: float
    top_products: tuple[ProductSales, ...] = ()

    def status_count(self, status: str) -> int:
        return self.status_counts.get(status, 0)


@dataclass
class _ProductTally:
    product_id: str
    product_name: str
    quantity: int = 0


@dataclass
class OrderReduction(BaseReduction[OrderSummary]):
    """
    Deterministic order reduction.

    ``now`` is the observation time of the collection cycle as a naive
    local datetime; it decides the "today" and "this month" buckets.
    """

    now: datetime
    top_n: int = TOP_PRODUCTS_LIMIT
    _status_counts: dict[str, int] = field(default_factory=dict, init=False)
    _product_sales: dict[str, _ProductTally] = field(default_factory=dict, init=False)
    _total_orders: int = field(default=0, init=False)
    _completed_revenue: float = field(default=0.0, init=False)
    _revenue_today: float = field(default=0.0, init=False)
    _revenue_this_month: float = field(default=0.0, init=False)

    def add(self, record: dict[str, Any]) -> None:
        status = str(record.get("status") or UNKNOWN_STATUS)
        self._total_orders += 1
        self._status_counts[status] = self._status_counts.get(status, 0) + 1

        if status == COMPLETED_STATUS:
            order_total = parse_amount(record.get("total"))
            self._completed_revenue += order_total

            created = parse_local_datetime(record.get("date_created"))
            if created is not None:
                if created.date() == self.now.date():
                    self._revenue_today += order_total
                if (created.year, created.month) == (self.now.year, self.now.month):
                    self._revenue_this_month += order_total

        for item in record.get("line_items") or ():
            self._add_line_item(item)

    def summary(self) -> OrderSummary:
        completed = self._status_counts.get(COMPLETED_STATUS, 0)
        return OrderSummary(
            total_orders=self._total_orders,
            status_counts=dict(self._status_counts),
            completed_orders=completed,
            total_revenue=self._completed_revenue,
            revenue_today=self._revenue_today,
            revenue_this_month=self._revenue_this_month,
            average_order_value=_average(self._completed_revenue, completed),
            top_products=self._top_products(),
        )

    def _add_line_item(self, item: Any) -> None:
        if not isinstance(item, dict) or item.get("product_id") is None:
            return
        product_id = str(item["product_id"])
        tally = self._product_sales.get(product_id)
        if tally is None:
            tally = _ProductTally(product_id=product_id, product_name=str(item.get("name") or ""))
            self._product_sales[product_id] = tally
        tally.quantity += parse_quantity(item.get("quantity")) or 0

    def _top_products(self) -> tuple[ProductSales, ...]:
        # sorted() is stable, so equal quantities keep first-seen order
        ranked = sorted(self._product_sales.values(), key=lambda tally: tally.quantity, reverse=True)
        return tuple(
            ProductSales(
                product_id=tally.product_id,
                product_name=tally.product_name,
                quantity=tally.quantity,
            )
            for tally in ranked[: self.top_n]
        )


def _average(revenue: float, completed_orders: int) -> float:
    """
    AOV = revenue / completed_orders.

    Returns 0.0 when there are no completed orders.
    """
    if completed_orders == 0:
        return 0.0
    return revenue / completed_orders
