"""
Prometheus metrics for the order service.

Tracks HTTP traffic and order placement outcomes.
"""

from fastapi import Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)

# Request metrics
http_requests_total = Counter(
    "order_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "order_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Order metrics
orders_placed_total = Counter(
    "orders_placed_total",
    "Total orders placed successfully",
)

orders_rejected_total = Counter(
    "orders_rejected_total",
    "Total order placements that failed",
    ["reason"],
)

order_items_per_order = Histogram(
    "order_items_per_order",
    "Number of line items per placed order",
    buckets=(1, 2, 3, 5, 10, 25, 50, 100),
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_order_placed(item_count: int):
    """Track a successful order placement."""
    orders_placed_total.inc()
    order_items_per_order.observe(item_count)


def track_order_rejected(reason: str):
    """Track a failed order placement."""
    orders_rejected_total.labels(reason=reason).inc()


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
