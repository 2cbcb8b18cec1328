"""Prometheus metrics for monitoring sales, tenders, rejections, and webhook performance"""

from prometheus_client import Counter, Histogram

# Sale metrics
sale_counter = Counter(
    "pos_sales_total",
    "Total sales completed",
    ["payment_method"],  # cash | card | transfer | credit
)

sale_total_bucket_counter = Counter(
    "pos_sale_total_bucket",
    "Completed sales by total amount bucket",
    ["bucket"],  # $0-$100, $100-$1000, $1000-$10000, $10000+
)

tender_counter = Counter(
    "pos_tenders_total",
    "Tender entries confirmed",
    ["method"],
)

checkout_rejected_counter = Counter(
    "pos_checkout_rejected_total",
    "Checkout actions rejected by validation",
    ["reason"],
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Ledger webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_sale(payment_method: str, total_cents: int) -> None:
    """Record sale metrics for monitoring payment mix and ticket size"""
    sale_counter.labels(payment_method=payment_method).inc()

    if total_cents <= 10_000:
        bucket = "$0-$100"
    elif total_cents <= 100_000:
        bucket = "$100-$1000"
    elif total_cents <= 1_000_000:
        bucket = "$1000-$10000"
    else:
        bucket = "$10000+"

    sale_total_bucket_counter.labels(bucket=bucket).inc()


def record_rejection(reason: str) -> None:
    checkout_rejected_counter.labels(reason=reason).inc()
