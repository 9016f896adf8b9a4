from __future__ import annotations

import logging
import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("floorops.api.access")

HTTP_REQUESTS = Counter(
    "floorops_http_requests_total",
    "HTTP requests served, by route template and status code",
    ["method", "route", "status_code"],
)
HTTP_LATENCY = Histogram(
    "floorops_http_request_duration_seconds",
    "HTTP request latency in seconds, by route template",
    ["method", "route"],
)


def route_template(request: Request) -> str:
    # /v1/tables/{table_id} rather than the concrete id keeps label cardinality bounded.
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


def _observe(request: Request, status_code: int, started: float) -> float:
    elapsed = time.perf_counter() - started
    route = route_template(request)
    HTTP_REQUESTS.labels(
        method=request.method, route=route, status_code=str(status_code)
    ).inc()
    HTTP_LATENCY.labels(method=request.method, route=route).observe(elapsed)
    return round(elapsed * 1000, 2)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = _observe(request, 500, started)
            logger.exception(
                "request_error",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": duration_ms,
                },
            )
            raise

        duration_ms = _observe(request, response.status_code, started)
        logger.info(
            "request_complete",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
