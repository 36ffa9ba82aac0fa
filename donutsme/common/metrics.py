"""Prometheus metric definitions shared across the API."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
webhook_events_total = Counter(
    "webhook_events_total",
    "Processor webhook deliveries by event type and outcome",
    ["event_type", "outcome"],
)
duplicate_events_skipped_total = Counter(
    "duplicate_events_skipped_total",
    "Webhook deliveries skipped because the event id was already applied",
    ["event_type"],
)
stale_events_ignored_total = Counter(
    "stale_events_ignored_total",
    "Payout events older than an already-applied terminal status",
    ["event_type"],
)
payouts_created_total = Counter("payouts_created_total", "Payouts requested by creators", ["currency"])
upstream_failures_total = Counter(
    "upstream_failures_total",
    "Failed calls to external providers",
    ["dependency", "operation"],
)
wallet_balance_fetch_failures_total = Counter(
    "wallet_balance_fetch_failures_total",
    "Per-wallet balance fetches skipped during aggregation",
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
