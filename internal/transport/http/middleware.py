"""
HTTP Middleware for the Storefront Service.

Provides middleware components for request processing.
"""

from .metrics import MetricsMiddleware
from .rate_limit import RateLimitMiddleware

__all__ = [
    "MetricsMiddleware",
    "RateLimitMiddleware",
]
