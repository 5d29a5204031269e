"""
reductions/products.py

Product reduction: status tallies and stock classification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reductions.base import BaseReduction, parse_quantity

LOW_STOCK_THRESHOLD = 10
OUT_OF_STOCK_STATUS = "outofstock"
UNKNOWN_STATUS = "unknown"


@dataclass(frozen=True)
class ProductSummary:
    """
    Reduced product metrics for one store.
    """

    total_products: int
    status_counts: dict[str, int]
    out_of_stock: int
    low_stock: int
    low_stock_threshold: int = LOW_STOCK_THRESHOLD


@dataclass
class ProductReduction(BaseReduction[ProductSummary]):
    """
    Deterministic product reduction.

    A product is out of stock when its stock status says so or its tracked
    quantity is exactly zero. Only otherwise is it checked for low stock,
    which requires stock management and a quantity at or below the
    threshold. The two buckets never count the same product.

    Only a tracked quantity can be zero: a product without stock management
    reports a null ``stock_quantity``, which is not read as zero, so it lands in
    neither bucket unless its stock status is ``outofstock``.
    """

    low_stock_threshold: int = LOW_STOCK_THRESHOLD
    _status_counts: dict[str, int] = field(default_factory=dict, init=False)
    _total: int = field(default=0, init=False)
    _out_of_stock: int = field(default=0, init=False)
    _low_stock: int = field(default=0, init=False)

    def add(self, record: dict[str, Any]) -> None:
        status = str(record.get("status") or UNKNOWN_STATUS)
        self._total += 1
        self._status_counts[status] = self._status_counts.get(status, 0) + 1

        quantity = parse_quantity(record.get("stock_quantity"))
        if record.get("stock_status") == OUT_OF_STOCK_STATUS or quantity == 0:
            self._out_of_stock += 1
        elif (
            record.get("manage_stock")
            and quantity is not None
            and quantity <= self.low_stock_threshold
        ):
            self._low_stock += 1

    def summary(self) -> ProductSummary:
        return ProductSummary(
            total_products=self._total,
            status_counts=dict(self._status_counts),
            out_of_stock=self._out_of_stock,
            low_stock=self._low_stock,
            low_stock_threshold=self.low_stock_threshold,
        )
