"""Prometheus metrics for monitoring retrieval outcomes, backfill coverage, and Plaid performance"""

from prometheus_client import Counter, Histogram

from cashai_gateway.domain.models import RetrievalOutcome, Success, NotReady

# Retrieval metrics
retrieval_outcome_counter = Counter(
    "cashai_transactions_outcome_total",
    "Transaction retrieval outcomes",
    ["outcome"],  # complete | incomplete | not_ready | <error kind>
)

coverage_gap_histogram = Histogram(
    "cashai_coverage_gap_days",
    "Days of requested history not yet backfilled by Plaid",
    buckets=[0, 7, 30, 60, 90, 180, 365, 730],
)

# Plaid API metrics
provider_latency_histogram = Histogram(
    "plaid_request_latency_seconds",
    "Plaid API response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

provider_failure_counter = Counter(
    "plaid_request_failures_total",
    "Failed Plaid API calls",
    ["operation", "error_code"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_outcome(outcome: RetrievalOutcome) -> None:
    """Record outcome metrics for monitoring how often clients hit partial backfill"""
    if isinstance(outcome, Success):
        label = "complete" if outcome.coverage.is_complete else "incomplete"
        coverage_gap_histogram.observe(outcome.coverage.coverage_gap_days)
    elif isinstance(outcome, NotReady):
        label = "not_ready"
    else:
        label = outcome.classification.value

    retrieval_outcome_counter.labels(outcome=label).inc()


def record_provider_failure(operation: str, error_code: str | None) -> None:
    provider_failure_counter.labels(operation=operation, error_code=error_code or "NONE").inc()
