"""Prometheus metrics for schedules, repayments, risk tiers and notification delivery"""

from prometheus_client import Counter, Histogram

# Schedule and repayment metrics
schedule_created_counter = Counter(
    "agrigrow_schedules_created_total",
    "Repayment schedules generated for approved loans",
)

payment_recorded_counter = Counter(
    "agrigrow_payments_recorded_total",
    "Installment payments recorded",
    ["method"],  # mobile_money | bank | cash
)

overdue_marked_counter = Counter(
    "agrigrow_installments_marked_overdue_total",
    "Installments moved from pending to overdue by the sweep",
)

# Risk metrics
risk_assessment_counter = Counter(
    "agrigrow_risk_assessments_total",
    "Risk assessments by tier",
    ["tier"],  # very_low | low | moderate | high | very_high
)

# Notification metrics
notification_latency_histogram = Histogram(
    "notification_latency_seconds",
    "Notification webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

notification_failure_counter = Counter(
    "notification_failures_total",
    "Failed notification deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(tier: str) -> None:
    """Record tier distribution for monitoring portfolio risk"""
    risk_assessment_counter.labels(tier=tier).inc()
