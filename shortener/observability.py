from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import time

# Metrics definitions
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

CACHE_HITS = Counter("cache_hits_total", "Total record cache hits")
CACHE_MISSES = Counter("cache_misses_total", "Total record cache misses")

RECORD_LOOKUP_PREFIXES = {
    "/v1/records/id/": "/v1/records/id/{record_id}",
    "/v1/records/short/": "/v1/records/short/{record_short}",
    "/v1/records/full/": "/v1/records/full/{record_full}",
}

KNOWN_PATHS = {"/v1/records", "/v1/records/len", "/metrics", "/health"}


def metric_path(path: str) -> str:
    """Collapse per-record paths into their route template."""
    if path in KNOWN_PATHS:
        return path
    for prefix, template in RECORD_LOOKUP_PREFIXES.items():
        if path.startswith(prefix):
            return template
    if path.startswith("/v1/records/"):
        return "/v1/records/{record_id}"
    # Anything else is unrouted; keep cardinality bounded.
    return "other"


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time

        status_code = str(response.status_code)
        method = request.method
        path = metric_path(request.url.path)

        HTTP_REQUESTS_TOTAL.labels(method=method, path=path, status=status_code).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(process_time)

        return response

def metrics_endpoint(request: Request):
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
