# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP Middleware — request ID propagation and Prometheus metrics."""
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from clubflow.metrics import HTTP_ERRORS, REQUEST_COUNT, REQUEST_LATENCY

SKIP_PATHS = ("/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc")


def route_template(request: Request) -> str:
    """Matched route path (``/api/v1/tracks/{track_id}``) so ids don't explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        if request.url.path in SKIP_PATHS:
            return response
        path = route_template(request)
        status = str(response.status_code)
        REQUEST_COUNT.labels(method=request.method, endpoint=path, status=status).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=path).observe(duration)
        if response.status_code >= 400:
            HTTP_ERRORS.labels(method=request.method, endpoint=path, status=status).inc()
        return response
