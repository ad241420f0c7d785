"""
Prometheus Metrics for the Storefront Service.

Defines all metrics for monitoring request handling and affiliate tracking.
"""

from prometheus_client import Counter, Histogram

# API metrics
HTTP_REQUESTS_TOTAL = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

HTTP_REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

RATE_LIMITED_REQUESTS = Counter(
    'rate_limited_requests_total',
    'Requests rejected by the rate limiter',
    ['scope']  # general, auth
)

# Affiliate tracking metrics
affiliate_clicks_total = Counter(
    'affiliate_clicks_total',
    'Total tracked affiliate clicks'
)

affiliate_conversions_total = Counter(
    'affiliate_conversions_total',
    'Total tracked affiliate conversions'
)

tracking_failures_total = Counter(
    'tracking_failures_total',
    'Tracking attempts that failed without blocking the redirect',
    ['operation']  # click, conversion
)
