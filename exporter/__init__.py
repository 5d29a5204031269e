"""
Prometheus exporter for WooCommerce store metrics.
"""

__version__ = "1.0.0"
