"""
Monitoring and observability utilities for the task tracker service.

Provides:
- Prometheus metrics (requests, latencies, errors)
- Request tracing (unique request IDs)
- Health information for the service and its database
"""
import re
import sqlite3
import time
import uuid
import logging
from typing import Callable, Dict, Any
from contextvars import ContextVar

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge

from tasktrack.adapters.metrics import MetricsAdapter

# Request context variable for tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Prometheus metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

service_uptime_seconds = Gauge(
    'service_uptime_seconds',
    'Service uptime in seconds'
)

service_start_time = time.time()

metrics_adapter = MetricsAdapter()

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting Prometheus metrics and request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        set_request_id(request_id)

        endpoint = self._get_endpoint_path(request.url.path)
        start_time = time.time()
        service_uptime_seconds.set(time.time() - service_start_time)

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "endpoint": endpoint,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            logger.error(
                "Request failed with exception",
                exc_info=True,
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "endpoint": endpoint,
                    "status_code": status_code,
                    "duration_seconds": duration,
                    "exception_type": type(e).__name__,
                }
            )
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type="exception"
            ).inc()
            # Re-raise to let FastAPI handle it
            raise

        status_code = response.status_code
        duration = time.time() - start_time
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "endpoint": endpoint,
                "status_code": status_code,
                "duration_seconds": duration,
            }
        )

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).observe(duration)

        if status_code >= 400:
            error_type = "client_error" if status_code < 500 else "server_error"
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type=error_type
            ).inc()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Trace-ID"] = request_id
        return response

    @staticmethod
    def _get_endpoint_path(path: str) -> str:
        """Normalize endpoint path for metrics (replace numeric IDs)."""
        path = re.sub(r'/\d+', '/{id}', path)
        if len(path) > 100:
            path = path[:100]
        return path


def get_metrics() -> str:
    """Get Prometheus metrics in text format."""
    return metrics_adapter.generate_metrics_response()


def check_database_health(db) -> Dict[str, Any]:
    """
    Check that the task store answers queries.

    Reports task counts and the SQLite journal mode on success, and the
    error on failure. A failing store marks the whole service unhealthy.
    """
    start_time = time.time()
    try:
        stats = db.get_stats()
    except sqlite3.Error as e:
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.warning(
            "Task store health check failed",
            extra={
                "error_type": type(e).__name__,
                "error_message": str(e),
                "response_time_ms": response_time_ms
            }
        )
        return {
            "status": "unhealthy",
            "db_path": db.db_path,
            "response_time_ms": response_time_ms,
            "error": str(e),
            "error_type": type(e).__name__
        }

    return {
        "status": "healthy",
        "db_path": db.db_path,
        "response_time_ms": round((time.time() - start_time) * 1000, 2),
        **stats
    }


def get_health_info(db=None) -> Dict[str, Any]:
    """
    Service health: uptime plus the task store check when ``db`` is given.
    """
    components: Dict[str, Any] = {}
    if db is not None:
        components["task_store"] = check_database_health(db)

    unhealthy = any(c["status"] == "unhealthy" for c in components.values())
    return {
        "status": "unhealthy" if unhealthy else "healthy",
        "service": "tasktrack",
        "timestamp": time.time(),
        "uptime_seconds": round(time.time() - service_start_time, 3),
        "components": components
    }
