"""Prometheus metrics for schedule preparation, payments and store traffic"""

from prometheus_client import Counter, Histogram

# Schedule metrics
schedule_prepared_counter = Counter(
    "billing_schedule_prepared_total",
    "Service schedules prepared for submission",
    ["kind"],  # generated | custom
)

schedule_rejected_counter = Counter(
    "billing_schedule_rejected_total",
    "Service schedules rejected before submission",
    ["reason"],  # incomplete | amount_mismatch | invalid_amount | invalid_count
)

# Payment metrics
installment_paid_counter = Counter(
    "billing_installment_paid_total",
    "Installments marked as paid",
)

installment_paid_cents_counter = Counter(
    "billing_installment_paid_cents_total",
    "Amount collected through mark-as-paid, in cents",
)

# Store API metrics
store_request_failures_counter = Counter(
    "billing_store_request_failures_total",
    "Failed billing store calls",
    ["operation"],
)

store_latency_histogram = Histogram(
    "billing_store_latency_seconds",
    "Billing store response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


def record_installment_paid(amount_cents: int) -> None:
    """Count a collected installment and its amount"""
    installment_paid_counter.inc()
    installment_paid_cents_counter.inc(amount_cents)
