"""Prometheus metrics for session lifecycle, funding volume and request latency"""

from prometheus_client import Counter, Histogram

# Session metrics
sessions_issued_counter = Counter(
    "banking_sessions_issued_total",
    "Sessions issued at login or signup",
)

sessions_revoked_counter = Counter(
    "banking_sessions_revoked_total",
    "Sessions deleted by logout",
    ["kind"],  # single | others
)

sessions_swept_counter = Counter(
    "banking_sessions_swept_total",
    "Expired sessions purged",
)

# Ledger metrics
accounts_opened_counter = Counter(
    "banking_accounts_opened_total",
    "Accounts opened",
    ["account_type"],
)

funding_counter = Counter(
    "banking_funding_total",
    "Completed funding operations",
    ["source"],  # card | bank
)

funding_amount_histogram = Histogram(
    "banking_funding_amount_cents",
    "Funded amounts in cents",
    buckets=[1_000, 10_000, 50_000, 100_000, 500_000, 1_000_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_funding(source_type: str, amount_cents: int) -> None:
    """Record funding volume by source"""
    funding_counter.labels(source=source_type).inc()
    funding_amount_histogram.observe(amount_cents)


def record_revocation(kind: str, count: int) -> None:
    if count > 0:
        sessions_revoked_counter.labels(kind=kind).inc(count)
