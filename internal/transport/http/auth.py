"""
Admin authentication dependency for FastAPI routes.
"""

from typing import Optional

from fastapi import Depends, Request

from internal.domain.admin import Admin
from internal.transport.http.dependencies import get_auth_service, get_container
from internal.usecase.admin_auth import AdminAuthService


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """
    Read the session token from the request.

    A ``Bearer`` Authorization header takes precedence over the cookie.

    Args:
        request: Incoming request.
        cookie_name: Name of the session cookie.

    Returns:
        The token, or None if the request carries none.
    """
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return request.cookies.get(cookie_name)


async def require_admin(
    request: Request,
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> Admin:
    """
    Resolve the calling admin or fail with 401/403.

    Returns:
        The authenticated admin.
    """
    token = extract_token(request, get_container().cookie_name)
    return await auth_service.authenticate(token)
