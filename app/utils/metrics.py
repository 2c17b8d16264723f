from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


HTTP_REQUESTS_TOTAL = Counter(
    "tvcatalog_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "tvcatalog_http_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "path"],
)

VALIDATION_FAILURES_TOTAL = Counter(
    "tvcatalog_validation_failures_total",
    "Requests rejected by the validation gate",
    ["kind"],
)

IMAGE_UPLOADS_TOTAL = Counter(
    "tvcatalog_image_uploads_total",
    "Image uploads to the asset host",
    ["result"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
