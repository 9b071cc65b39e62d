"""Prometheus collectors shared by the HTTP layer and the generation service."""

from prometheus_client import Counter, Histogram

HTTP_REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["path"],
)

# outcome is "ok" or the ErrorKind value; provider is "-" when none was chosen
GENERATION_REQUESTS = Counter(
    "generation_requests_total",
    "Generation requests by content kind, provider and outcome",
    ["kind", "provider", "outcome"],
)
