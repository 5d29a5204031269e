"""
exporter/domain package marker.
"""

from exporter.domain.collection import (
    BRANCH_GENERAL,
    COUPONS,
    CUSTOMERS,
    ORDERS,
    PRODUCTS,
    RECORD_TYPES,
    BranchOutcome,
    CustomerCount,
    CycleResult,
    RecordPage,
    StoreCollectionResult,
)

__all__ = [
    "BRANCH_GENERAL",
    "COUPONS",
    "CUSTOMERS",
    "ORDERS",
    "PRODUCTS",
    "RECORD_TYPES",
    "BranchOutcome",
    "CustomerCount",
    "CycleResult",
    "RecordPage",
    "StoreCollectionResult",
]
