"""
FastAPI HTTP Handlers for admin login and session checks.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from internal.domain.admin import Admin
from internal.domain.errors import AuthenticationError, InsufficientPrivilegesError
from internal.transport.http.auth import extract_token, require_admin
from internal.transport.http.dependencies import get_auth_service, get_container
from internal.transport.http.dto import LoginRequest, success_response
from internal.usecase.admin_auth import AdminAuthService
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> JSONResponse:
    """
    Log an admin in.

    The token is returned in the body and set as an HttpOnly cookie.
    """
    result = await auth_service.login(request.email, request.password)
    container = get_container()

    response = JSONResponse(
        content=success_response(
            {"admin": result.admin.to_dict(), "token": result.token},
            message="Login successful",
        )
    )
    response.set_cookie(
        key=container.cookie_name,
        value=result.token,
        max_age=result.expires_in,
        httponly=True,
        secure=container.cookie_secure,
        samesite="lax",
        domain=container.cookie_domain,
    )
    return response


@router.post("/logout")
async def logout(admin: Admin = Depends(require_admin)) -> JSONResponse:
    """Clear the session cookie."""
    container = get_container()
    response = JSONResponse(content=success_response(None, message="Logged out successfully"))
    response.delete_cookie(
        key=container.cookie_name,
        domain=container.cookie_domain,
        httponly=True,
        secure=container.cookie_secure,
        samesite="lax",
    )
    logger.info("Admin logged out", admin_id=str(admin.id))
    return response


@router.get("/me")
async def current_admin(admin: Admin = Depends(require_admin)) -> dict:
    return success_response({"admin": admin.to_dict()})


@router.get("/check")
async def check_session(
    request: Request,
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> dict:
    """Report whether the request carries a valid admin session; never fails."""
    token = extract_token(request, get_container().cookie_name)
    try:
        admin = await auth_service.authenticate(token)
    except (AuthenticationError, InsufficientPrivilegesError):
        return success_response({"is_authenticated": False, "admin": None})

    return success_response({"is_authenticated": True, "admin": admin.to_dict()})
