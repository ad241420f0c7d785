"""
Resilience package.
"""
from .rate_limiter import SlidingWindowRateLimiter, IPRateLimiter

__all__ = [
    "SlidingWindowRateLimiter",
    "IPRateLimiter",
]
