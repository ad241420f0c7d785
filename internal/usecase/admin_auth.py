"""
Admin Authentication Service.

Login with lockout accounting, token verification for admin-gated routes,
and creation of the default admin at startup.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol
from uuid import UUID

from internal.domain.admin import ADMIN_ROLE, Admin
from internal.domain.errors import (
    AccountInactiveError,
    AccountLockedError,
    InsufficientPrivilegesError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from internal.domain.value_objects import looks_like_identifier, parse_identifier
from pkg.logger.logger import get_logger
from pkg.security import TokenError, hash_password, sign_token, verify_password, verify_token


logger = get_logger(__name__)


def _epoch(moment: datetime) -> float:
    # Naive datetimes in this service are UTC.
    return moment.replace(tzinfo=timezone.utc).timestamp()


class AdminRepository(Protocol):
    """Protocol for admin repository operations."""

    async def get_by_id(self, admin_id: UUID) -> Optional[Admin]:
        ...

    async def get_by_email(self, email: str) -> Optional[Admin]:
        ...

    async def count(self) -> int:
        ...

    async def create(self, admin: Admin) -> Admin:
        ...

    async def save_login_state(self, admin: Admin) -> None:
        ...


@dataclass
class LoginOutput:
    """Output for a successful login."""

    admin: Admin
    token: str
    expires_in: int


class AdminAuthService:
    """
    Authentication boundary for catalog writes.

    A caller is authorized when it presents a valid token for an active,
    unlocked account with the admin role.
    """

    def __init__(
        self,
        repository: AdminRepository,
        secret: str,
        token_ttl_seconds: int = 7 * 24 * 60 * 60,
        password_hash_iterations: int = 390_000,
    ) -> None:
        """
        Initialize the service.

        Args:
            repository: Admin repository.
            secret: Token signing key.
            token_ttl_seconds: Token lifetime.
            password_hash_iterations: PBKDF2 work factor for new hashes.
        """
        self._repository = repository
        self._secret = secret
        self._token_ttl_seconds = token_ttl_seconds
        self._iterations = password_hash_iterations

    @property
    def token_ttl_seconds(self) -> int:
        return self._token_ttl_seconds

    async def login(self, email: str, password: str, now: Optional[datetime] = None) -> LoginOutput:
        """
        Check credentials and issue a token.

        Args:
            email: Login email, case-insensitive.
            password: Plain-text password.
            now: Current time, defaults to utcnow.

        Returns:
            LoginOutput with the admin and a signed token.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password.
            AccountLockedError: Too many failed attempts.
            AccountInactiveError: The account is deactivated.
        """
        now = now or datetime.utcnow()
        admin = await self._repository.get_by_email(email)
        if admin is None:
            logger.warning("Login failed: unknown email", email=email)
            raise InvalidCredentialsError()

        if admin.is_locked(now):
            logger.warning("Login rejected: account locked", admin_id=str(admin.id))
            raise AccountLockedError()

        if not admin.is_active:
            logger.warning("Login rejected: account inactive", admin_id=str(admin.id))
            raise AccountInactiveError()

        if not verify_password(password, admin.password_hash):
            admin.register_failed_login(now)
            await self._repository.save_login_state(admin)
            logger.warning(
                "Login failed: wrong password",
                admin_id=str(admin.id),
                login_attempts=admin.login_attempts,
                locked=admin.is_locked(now),
            )
            raise InvalidCredentialsError()

        admin.register_successful_login(now)
        await self._repository.save_login_state(admin)

        token = sign_token(
            {"id": str(admin.id), "email": admin.email, "role": admin.role},
            self._secret,
            ttl_seconds=self._token_ttl_seconds,
            now=_epoch(now),
        )

        logger.info("Admin logged in", admin_id=str(admin.id))
        return LoginOutput(admin=admin, token=token, expires_in=self._token_ttl_seconds)

    async def authenticate(self, token: Optional[str], now: Optional[datetime] = None) -> Admin:
        """
        Resolve a token to an authorized admin.

        Args:
            token: Token from the cookie or Authorization header.
            now: Current time, defaults to utcnow.

        Returns:
            The admin, with last_activity stamped.

        Raises:
            InvalidTokenError: Missing, forged or expired token, or unknown admin.
            AccountInactiveError: The account is deactivated.
            AccountLockedError: The account is locked.
            InsufficientPrivilegesError: The account lacks the admin role.
        """
        if not token or token == "none":
            raise InvalidTokenError()

        now = now or datetime.utcnow()
        try:
            claims = verify_token(token, self._secret, now=_epoch(now))
        except TokenError as e:
            logger.debug("Token rejected", reason=str(e))
            raise InvalidTokenError() from e

        admin_id = claims.get("id")
        if not isinstance(admin_id, str) or not looks_like_identifier(admin_id):
            raise InvalidTokenError()

        admin = await self._repository.get_by_id(parse_identifier(admin_id))
        if admin is None:
            raise InvalidTokenError()
        if not admin.is_active:
            raise AccountInactiveError()
        if admin.is_locked(now):
            raise AccountLockedError()
        if admin.role != ADMIN_ROLE:
            raise InsufficientPrivilegesError()

        admin.last_activity = now
        await self._repository.save_login_state(admin)
        return admin

    async def get_profile(self, admin_id: UUID) -> Optional[Admin]:
        return await self._repository.get_by_id(admin_id)

    async def ensure_default_admin(
        self,
        email: Optional[str],
        password: Optional[str],
    ) -> Optional[Admin]:
        """
        Create the default admin when no admin exists yet.

        Does nothing when credentials are not configured or any admin
        already exists, so it is safe to run on every startup.

        Args:
            email: Default admin email.
            password: Default admin password.

        Returns:
            The created admin, or None if nothing was created.
        """
        if not email or not password:
            logger.warning("Default admin credentials not configured")
            return None

        if await self._repository.count() > 0:
            return None

        admin = Admin(
            email=email,
            password_hash=hash_password(password, iterations=self._iterations),
            first_name="Admin",
            last_name="User",
        )
        created = await self._repository.create(admin)
        logger.info("Default admin created", admin_id=str(created.id), email=created.email)
        return created
