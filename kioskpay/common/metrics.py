"""Prometheus metric definitions for the bridge."""

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
checkout_sessions_total = Counter(
    "checkout_sessions_total",
    "Checkout session creation attempts",
    ["service", "outcome"],
)
callbacks_total = Counter(
    "callbacks_total",
    "Payment outcomes evaluated, by entry point and verification verdict",
    ["service", "source", "verdict"],
)
kiosk_triggers_total = Counter(
    "kiosk_triggers_total",
    "Kiosk trigger calls",
    ["service", "outcome"],
)
upstream_request_duration_seconds = Histogram(
    "upstream_request_duration_seconds",
    "Outbound call duration seconds",
    ["dependency", "operation"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
