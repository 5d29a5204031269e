"""
exporter/domain/collection.py

Transient result types produced while collecting store metrics.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

ORDERS = "orders"
PRODUCTS = "products"
CUSTOMERS = "customers"
COUPONS = "coupons"

RECORD_TYPES = frozenset({ORDERS, PRODUCTS, CUSTOMERS, COUPONS})

BRANCH_GENERAL = "general"


@dataclass(frozen=True)
class RecordPage:
    """
    One page of raw records returned by a single API call.
    """

    record_type: str
    page_number: int
    records: tuple[dict[str, Any], ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class CustomerCount:
    """
    Customer count with an explicit completeness tag.

    ``complete`` is False when the count comes from the single first-page
    fallback or when the capped page walk stopped before the end of data.
    """

    count: int
    complete: bool
    source: str


@dataclass(frozen=True)
class BranchOutcome:
    """
    Outcome of one reduction branch (orders, products or customers).
    """

    branch: str
    success: bool
    error_kind: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class StoreCollectionResult:
    """
    Outcome of one store's collection, one entry per reduction branch.
    """

    store_id: str
    duration_seconds: float
    branches: tuple[BranchOutcome, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return all(outcome.success for outcome in self.branches)

    @property
    def failed_branches(self) -> list[str]:
        return [outcome.branch for outcome in self.branches if not outcome.success]


@dataclass(frozen=True)
class CycleResult:
    """
    Per-store outcome of one collection attempt.
    """

    store_id: str
    success: bool
    duration_seconds: float
    error_kind: str | None = None
    error: str | None = None
