"""
Rate limiting middleware.

Applies the IP rate limiter before routing and answers 429 with the error
envelope.
"""

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from internal.infrastructure.metrics import RATE_LIMITED_REQUESTS
from internal.transport.http.dto import error_response
from pkg.logger.logger import get_logger
from pkg.resilience.rate_limiter import IPRateLimiter


logger = get_logger(__name__)


def client_ip(request: Request, trusted_proxies: int = 0) -> str:
    """
    Resolve the client address used as the rate limit key.

    X-Forwarded-For is only read when the service runs behind proxies. Each
    trusted proxy appends the peer it saw, so the client is the entry
    ``trusted_proxies`` hops from the right; entries further left are
    whatever the client chose to send.

    Args:
        request: Incoming HTTP request.
        trusted_proxies: Number of reverse proxies in front of the service.

    Returns:
        Client address.
    """
    peer = request.client.host if request.client else "unknown"
    if trusted_proxies <= 0:
        return peer

    forwarded = request.headers.get("X-Forwarded-For", "")
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    if not hops:
        return peer
    return hops[-min(trusted_proxies, len(hops))]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware rejecting clients that exceed their request window.
    """

    def __init__(
        self,
        app,
        limiter: IPRateLimiter,
        strict_prefix: str = "/api/auth",
        trusted_proxies: int = 0,
    ) -> None:
        """
        Initialize the middleware.

        Args:
            app: ASGI application.
            limiter: Path-aware IP rate limiter.
            strict_prefix: Prefix counted under the strict scope in metrics.
            trusted_proxies: Reverse proxy hops trusted for X-Forwarded-For.
        """
        super().__init__(app)
        self._limiter = limiter
        self._strict_prefix = strict_prefix
        self._trusted_proxies = trusted_proxies

    async def dispatch(self, request: Request, call_next) -> Response:
        """
        Check the limiter and either reject or pass the request on.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            HTTP response.
        """
        ip = client_ip(request, self._trusted_proxies)
        path = request.url.path

        if not await self._limiter.is_allowed(ip, path):
            scope = "auth" if path.startswith(self._strict_prefix) else "general"
            RATE_LIMITED_REQUESTS.labels(scope=scope).inc()
            logger.warning("Rate limit exceeded", client_ip=ip, path=path, scope=scope)

            retry_after = await self._limiter.get_reset_time(ip, path)
            headers = {"Retry-After": str(int(retry_after) + 1)} if retry_after is not None else None
            return JSONResponse(
                status_code=429,
                content=error_response(
                    "RATE_LIMIT_EXCEEDED",
                    "Too many requests, please try again later",
                ),
                headers=headers,
            )

        return await call_next(request)
