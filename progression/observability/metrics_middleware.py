"""
FastAPI middleware for automatic Prometheus metrics collection.

This middleware automatically tracks:
- Request counts by route template, method, and status code
- Request latency histograms
- Requests in progress (concurrent requests)
"""

import logging
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from progression.observability.metrics import (
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
)

logger = logging.getLogger(__name__)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect Prometheus metrics for HTTP requests.

    User ids are free-form strings, so requests are labelled with the
    matched route template (/api/v1/users/{user_id}/stats) rather than
    the raw path.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method
        in_progress = http_requests_in_progress.labels(method=method, endpoint="all")
        in_progress.inc()

        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response

        except Exception as e:
            logger.error(f"Request failed: {e}", exc_info=True)
            raise

        finally:
            in_progress.dec()
            path = self._route_template(request)
            duration = time.time() - start_time

            http_requests_total.labels(
                method=method, endpoint=path, status=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method, endpoint=path
            ).observe(duration)

    def _route_template(self, request: Request) -> str:
        route = request.scope.get("route")
        if route is not None and getattr(route, "path", None):
            return route.path
        return "unmatched"


def setup_metrics_middleware(app):
    """Add Prometheus metrics middleware to FastAPI application"""
    app.add_middleware(PrometheusMiddleware)
    logger.info("Prometheus metrics middleware enabled")
