"""Monitoring and observability middleware"""
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from gatepass.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "gatepass_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "gatepass_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Gate pass metrics
transitions_total = Counter(
    "gatepass_transitions_total",
    "Total committed gate pass state transitions",
    ["from_status", "to_status"]
)

redemptions_total = Counter(
    "gatepass_redemptions_total",
    "Total checkpoint redemption attempts",
    ["outcome"]  # admitted, invalid, already_used
)

# Error metrics
http_errors_total = Counter(
    "gatepass_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

authentication_failures_total = Counter(
    "gatepass_authentication_failures_total",
    "Total authentication failures",
    ["type"]  # bearer, admin_key, role
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        method = request.method
        # Route templates keep the scan token out of metric labels and logs
        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or "unmatched"

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            status = response.status_code

            # The route is resolved during call_next
            route = request.scope.get("route")
            endpoint = getattr(route, "path", None) or endpoint

            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            # Log slow requests
            if duration > 1.0:
                logger.warning(
                    f"Slow request detected: {method} {endpoint}",
                    extra={
                        "request_id": request_id,
                        "status": status
                    }
                )

            if status >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=status
                ).inc()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception:
            http_errors_total.labels(
                method=method,
                endpoint=endpoint,
                status=500
            ).inc()

            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={"request_id": request_id},
                exc_info=True
            )
            raise


def record_transition(from_status, to_status):
    """Record a committed gate pass state transition"""
    transitions_total.labels(
        from_status=getattr(from_status, "value", from_status),
        to_status=getattr(to_status, "value", to_status)
    ).inc()


def record_redemption(outcome: str):
    """Record a checkpoint redemption outcome"""
    redemptions_total.labels(outcome=outcome).inc()


def record_auth_failure(auth_type: str):
    """Record authentication failure"""
    authentication_failures_total.labels(type=auth_type).inc()
