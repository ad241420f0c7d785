"""
Rate Limiter implementation.

Sliding-window limits keyed by client address, used to protect the public
API and, more strictly, the admin login endpoint.
"""
import asyncio
import time
from collections import defaultdict
from typing import Callable, Optional

from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class SlidingWindowRateLimiter:
    """
    Sliding window rate limiter.

    Keeps the timestamps of accepted requests per key and rejects a request
    once ``limit`` of them fall inside the last ``window_seconds``.
    """

    def __init__(
        self,
        limit: int = 100,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the sliding window rate limiter.

        Args:
            limit: Maximum requests per window.
            window_seconds: Window size in seconds.
            clock: Time source, injectable for tests.
        """
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._lock = asyncio.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    def _prune(self, key: str, now: float) -> list[float]:
        window_start = now - self._window_seconds
        recent = [ts for ts in self._requests[key] if ts > window_start]
        if recent:
            self._requests[key] = recent
        else:
            self._requests.pop(key, None)
        return recent

    async def is_allowed(self, key: str) -> bool:
        """
        Check if a request is allowed for the given key and record it.

        Args:
            key: Identifier for rate limiting (e.g., IP address).

        Returns:
            True if request is allowed, False otherwise.
        """
        async with self._lock:
            now = self._clock()
            recent = self._prune(key, now)

            if len(recent) >= self._limit:
                logger.debug(
                    "Rate limit exceeded",
                    key=key,
                    count=len(recent),
                    limit=self._limit,
                )
                return False

            self._requests[key].append(now)
            return True

    async def get_remaining(self, key: str) -> int:
        """
        Get remaining requests for the given key.

        Args:
            key: Identifier for rate limiting.

        Returns:
            Number of remaining requests.
        """
        async with self._lock:
            return max(0, self._limit - len(self._prune(key, self._clock())))

    async def get_reset_time(self, key: str) -> Optional[float]:
        """
        Get time until the oldest request leaves the window.

        Args:
            key: Identifier for rate limiting.

        Returns:
            Seconds until reset, or None if no requests recorded.
        """
        async with self._lock:
            now = self._clock()
            recent = self._prune(key, now)
            if not recent:
                return None
            return max(0.0, min(recent) + self._window_seconds - now)


class IPRateLimiter:
    """
    Path-aware, IP-based rate limiter for API endpoints.

    Requests under ``strict_prefix`` are counted against the strict window;
    every other request under ``api_prefix`` against the general one.
    """

    def __init__(
        self,
        requests_per_minute: int = 100,
        strict_requests: int = 5,
        strict_window_seconds: float = 15 * 60,
        api_prefix: str = "/api",
        strict_prefix: str = "/api/auth",
    ) -> None:
        """
        Initialize the IP rate limiter.

        Args:
            requests_per_minute: General limit per minute.
            strict_requests: Limit for the strict prefix.
            strict_window_seconds: Window for the strict prefix.
            api_prefix: Paths subject to the general limit.
            strict_prefix: Paths subject to the strict limit.
        """
        self._general = SlidingWindowRateLimiter(
            limit=requests_per_minute,
            window_seconds=60,
        )
        self._strict = SlidingWindowRateLimiter(
            limit=strict_requests,
            window_seconds=strict_window_seconds,
        )
        self._api_prefix = api_prefix
        self._strict_prefix = strict_prefix

    def _limiter_for(self, path: str) -> Optional[SlidingWindowRateLimiter]:
        if path.startswith(self._strict_prefix):
            return self._strict
        if path.startswith(self._api_prefix):
            return self._general
        return None

    async def is_allowed(self, ip_address: str, path: str) -> bool:
        """
        Check if a request from an IP to a path is allowed.

        Args:
            ip_address: Client IP address.
            path: Request path.

        Returns:
            True if request is allowed.
        """
        limiter = self._limiter_for(path)
        if limiter is None:
            return True
        return await limiter.is_allowed(ip_address)

    async def get_reset_time(self, ip_address: str, path: str) -> Optional[float]:
        """Seconds until the applicable window frees a slot for this IP."""
        limiter = self._limiter_for(path)
        if limiter is None:
            return None
        return await limiter.get_reset_time(ip_address)
