"""
Pure reductions of raw store records into metric summaries.
"""

from reductions.base import BaseReduction, parse_amount, parse_local_datetime, parse_quantity
from reductions.orders import (
    COMPLETED_STATUS,
    LOOKBACK_DAYS,
    TOP_PRODUCTS_LIMIT,
    OrderReduction,
    OrderSummary,
    ProductSales,
)
from reductions.products import LOW_STOCK_THRESHOLD, ProductReduction, ProductSummary

__all__ = [
    "BaseReduction",
    "COMPLETED_STATUS",
    "LOOKBACK_DAYS",
    "LOW_STOCK_THRESHOLD",
    "OrderReduction",
    "OrderSummary",
    "ProductReduction",
    "ProductSales",
    "ProductSummary",
    "TOP_PRODUCTS_LIMIT",
    "parse_amount",
    "parse_local_datetime",
    "parse_quantity",
]
