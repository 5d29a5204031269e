"""
exporter/metrics/catalog.py

Declarations of every exported metric series.
"""

from __future__ import annotations

from dataclasses import dataclass

GAUGE = "gauge"
COUNTER = "counter"

STORE_LABELS = ("store_id", "store_name")


@dataclass(frozen=True)
class SeriesSpec:
    """
    Name, kind, label names and help text of one metric series.
    """

    name: str
    kind: str
    label_names: tuple[str, ...]
    help: str


TOTAL_ORDERS = "woocommerce_total_orders"
ORDERS_BY_STATUS = "woocommerce_orders_by_status"
TOTAL_REVENUE = "woocommerce_total_revenue"
REVENUE_TODAY = "woocommerce_revenue_today"
REVENUE_THIS_MONTH = "woocommerce_revenue_this_month"
AVERAGE_ORDER_VALUE = "woocommerce_average_order_value"
PENDING_ORDERS = "woocommerce_pending_orders"
FAILED_ORDERS = "woocommerce_failed_orders"
PROCESSING_ORDERS = "woocommerce_processing_orders"
TOP_PRODUCTS_SOLD = "woocommerce_top_products_sold"
TOTAL_PRODUCTS = "woocommerce_total_products"
LOW_STOCK_PRODUCTS = "woocommerce_low_stock_products"
OUT_OF_STOCK_PRODUCTS = "woocommerce_out_of_stock_products"
TOTAL_CUSTOMERS = "woocommerce_total_customers"
CUSTOMER_COUNT_COMPLETE = "woocommerce_customer_count_complete"
LAST_SCRAPE_SUCCESS = "woocommerce_last_scrape_success"
SCRAPE_ERRORS = "woocommerce_scrape_errors_total"
SCRAPE_DURATION = "woocommerce_scrape_duration_seconds"
API_RESPONSE_TIME = "woocommerce_api_response_time_seconds"

DEFAULT_SERIES: tuple[SeriesSpec, ...] = (
    SeriesSpec(
        TOTAL_ORDERS, GAUGE, STORE_LABELS + ("status", "currency"), "Total number of orders"
    ),
    SeriesSpec(
        ORDERS_BY_STATUS,
        GAUGE,
        STORE_LABELS + ("status", "currency"),
        "Number of orders by status",
    ),
    SeriesSpec(TOTAL_REVENUE, GAUGE, STORE_LABELS + ("currency", "period"), "Total revenue amount"),
    SeriesSpec(REVENUE_TODAY, GAUGE, STORE_LABELS + ("currency",), "Revenue for today"),
    SeriesSpec(REVENUE_THIS_MONTH, GAUGE, STORE_LABELS + ("currency",), "Revenue for this month"),
    SeriesSpec(
        AVERAGE_ORDER_VALUE, GAUGE, STORE_LABELS + ("currency", "period"), "Average order value"
    ),
    SeriesSpec(PENDING_ORDERS, GAUGE, STORE_LABELS, "Number of pending orders"),
    SeriesSpec(FAILED_ORDERS, GAUGE, STORE_LABELS, "Number of failed orders"),
    SeriesSpec(PROCESSING_ORDERS, GAUGE, STORE_LABELS, "Number of processing orders"),
    SeriesSpec(
        TOP_PRODUCTS_SOLD,
        GAUGE,
        STORE_LABELS + ("product_id", "product_name"),
        "Top selling products by quantity",
    ),
    SeriesSpec(TOTAL_PRODUCTS, GAUGE, STORE_LABELS + ("status",), "Total number of products"),
    SeriesSpec(
        LOW_STOCK_PRODUCTS,
        GAUGE,
        STORE_LABELS + ("threshold",),
        "Number of products with low stock",
    ),
    SeriesSpec(OUT_OF_STOCK_PRODUCTS, GAUGE, STORE_LABELS, "Number of products out of stock"),
    SeriesSpec(TOTAL_CUSTOMERS, GAUGE, STORE_LABELS, "Total number of customers"),
    SeriesSpec(
        CUSTOMER_COUNT_COMPLETE,
        GAUGE,
        STORE_LABELS,
        "1 when the customer count is exact, 0 when it is a partial estimate",
    ),
    SeriesSpec(LAST_SCRAPE_SUCCESS, GAUGE, STORE_LABELS, "Timestamp of last successful scrape"),
    SeriesSpec(
        SCRAPE_ERRORS, COUNTER, STORE_LABELS + ("error_type",), "Total number of scrape errors"
    ),
    SeriesSpec(SCRAPE_DURATION, GAUGE, STORE_LABELS, "Duration of last scrape in seconds"),
    SeriesSpec(
        API_RESPONSE_TIME,
        GAUGE,
        STORE_LABELS + ("endpoint",),
        "WooCommerce API response time in seconds",
    ),
)
