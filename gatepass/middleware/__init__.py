"""Middleware modules for production-ready features"""
from gatepass.middleware.monitoring import (
    MonitoringMiddleware,
    record_auth_failure,
    record_redemption,
    record_transition
)
from gatepass.middleware.rate_limit import limiter

__all__ = [
    "MonitoringMiddleware",
    "record_auth_failure",
    "record_redemption",
    "record_transition",
    "limiter"
]
