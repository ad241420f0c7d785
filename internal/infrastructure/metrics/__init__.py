"""
Metrics package.
"""
from .prometheus import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    RATE_LIMITED_REQUESTS,
    affiliate_clicks_total,
    affiliate_conversions_total,
    tracking_failures_total,
)

__all__ = [
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "RATE_LIMITED_REQUESTS",
    "affiliate_clicks_total",
    "affiliate_conversions_total",
    "tracking_failures_total",
]
