"""
Exception handlers producing the error envelope.

Every failure leaves the API as
``{"success": false, "error": {"code", "message", "details"?}}``.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from internal.domain.errors import DomainError, RateLimitedError
from internal.transport.http.dto import error_response
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


HTTP_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMIT_EXCEEDED",
    status.HTTP_503_SERVICE_UNAVAILABLE: "SERVICE_UNAVAILABLE",
}


def _field_path(location: tuple) -> str:
    # Drop the "body"/"query"/"path" prefix pydantic puts in front.
    parts = [str(part) for part in location]
    if parts and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI, expose_internal_errors: bool = False) -> None:
    """
    Install the envelope-producing exception handlers.

    Args:
        app: FastAPI application.
        expose_internal_errors: Include the exception text in 500 responses;
            disable in production.
    """

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Domain error", code=exc.code, error=exc.message, path=request.url.path)
        else:
            logger.warning("Request rejected", code=exc.code, error=exc.message, path=request.url.path)

        headers = None
        if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
            headers = {"Retry-After": str(int(exc.retry_after) + 1)}

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        details = [
            {"field": _field_path(error.get("loc", ())), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        logger.warning("Request validation failed", path=request.url.path, errors=len(details))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response("VALIDATION_ERROR", "Validation failed", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path, error=str(exc))
        message = str(exc) if expose_internal_errors else "Internal server error"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response("INTERNAL_ERROR", message),
        )
