"""
Unit tests for admin authentication, passwords and tokens.
"""
from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from internal.domain.admin import MAX_LOGIN_ATTEMPTS
from internal.domain.errors import (
    AccountInactiveError,
    AccountLockedError,
    InsufficientPrivilegesError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from internal.usecase.admin_auth import AdminAuthService
from pkg.security import TokenError, hash_password, sign_token, verify_password, verify_token


SECRET = "test-secret"
TEST_PASSWORD = "correct-horse-battery"
NOW = datetime(2024, 6, 1, 12, 0)


@pytest.fixture
def admin_repository(admin_account):
    repository = AsyncMock()
    repository.get_by_email = AsyncMock(return_value=admin_account)
    repository.get_by_id = AsyncMock(return_value=admin_account)
    return repository


@pytest.fixture
def auth_service(admin_repository):
    return AdminAuthService(
        repository=admin_repository,
        secret=SECRET,
        token_ttl_seconds=3600,
        password_hash_iterations=1000,
    )


class TestPasswords:
    """Tests for password hashing."""

    def test_roundtrip(self):
        encoded = hash_password("s3cret", iterations=1000)

        assert verify_password("s3cret", encoded)
        assert not verify_password("wrong", encoded)

    def test_salted(self):
        assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)

    def test_garbage_hash_rejected(self):
        assert not verify_password("s3cret", "not-a-hash")


class TestTokens:
    """Tests for signed tokens."""

    def test_claims_returned(self):
        token = sign_token({"id": "abc"}, SECRET, ttl_seconds=60, now=1000)

        assert verify_token(token, SECRET, now=1030)["id"] == "abc"

    def test_expired(self):
        token = sign_token({"id": "abc"}, SECRET, ttl_seconds=60, now=1000)

        with pytest.raises(TokenError):
            verify_token(token, SECRET, now=1061)

    def test_wrong_secret(self):
        token = sign_token({"id": "abc"}, SECRET)

        with pytest.raises(TokenError):
            verify_token(token, "other-secret")

    def test_malformed(self):
        with pytest.raises(TokenError):
            verify_token("no-dot-here", SECRET)


class TestLogin:
    """Tests for AdminAuthService.login."""

    @pytest.mark.asyncio
    async def test_success(self, auth_service, admin_repository, admin_account):
        result = await auth_service.login("ADMIN@example.com", TEST_PASSWORD, now=NOW)

        assert result.admin is admin_account
        assert result.expires_in == 3600
        assert admin_account.last_login == NOW
        admin_repository.save_login_state.assert_awaited_once_with(admin_account)

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service, admin_repository):
        admin_repository.get_by_email = AsyncMock(return_value=None)

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("nobody@example.com", TEST_PASSWORD, now=NOW)

    @pytest.mark.asyncio
    async def test_wrong_password_counts_attempt(self, auth_service, admin_repository, admin_account):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(admin_account.email, "wrong", now=NOW)

        assert admin_account.login_attempts == 1
        admin_repository.save_login_state.assert_awaited_once_with(admin_account)

    @pytest.mark.asyncio
    async def test_lockout_blocks_correct_password(self, auth_service, admin_account):
        for _ in range(MAX_LOGIN_ATTEMPTS):
            with pytest.raises(InvalidCredentialsError):
                await auth_service.login(admin_account.email, "wrong", now=NOW)

        with pytest.raises(AccountLockedError):
            await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)

        later = NOW + timedelta(hours=3)
        result = await auth_service.login(admin_account.email, TEST_PASSWORD, now=later)
        assert result.admin.login_attempts == 0

    @pytest.mark.asyncio
    async def test_inactive_account(self, auth_service, admin_repository, admin_account):
        admin_account.is_active = False

        with pytest.raises(AccountInactiveError):
            await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)


class TestAuthenticate:
    """Tests for AdminAuthService.authenticate."""

    @pytest.mark.asyncio
    async def test_valid_token(self, auth_service, admin_account):
        login = await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)

        admin = await auth_service.authenticate(login.token, now=NOW + timedelta(minutes=5))

        assert admin is admin_account
        assert admin.last_activity == NOW + timedelta(minutes=5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "none", "garbage"])
    async def test_missing_or_garbage_token(self, auth_service, token):
        with pytest.raises(InvalidTokenError):
            await auth_service.authenticate(token, now=NOW)

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service, admin_account):
        login = await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)

        with pytest.raises(InvalidTokenError):
            await auth_service.authenticate(login.token, now=NOW + timedelta(hours=2))

    @pytest.mark.asyncio
    async def test_deleted_admin(self, auth_service, admin_repository, admin_account):
        login = await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)
        admin_repository.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(InvalidTokenError):
            await auth_service.authenticate(login.token, now=NOW)

    @pytest.mark.asyncio
    async def test_non_admin_role(self, auth_service, admin_repository, admin_account):
        login = await auth_service.login(admin_account.email, TEST_PASSWORD, now=NOW)
        admin_repository.get_by_id = AsyncMock(return_value=replace(admin_account, role="editor"))

        with pytest.raises(InsufficientPrivilegesError):
            await auth_service.authenticate(login.token, now=NOW)


class TestEnsureDefaultAdmin:
    """Tests for default admin bootstrap."""

    @pytest.mark.asyncio
    async def test_created_when_none_exist(self, auth_service, admin_repository):
        admin_repository.count = AsyncMock(return_value=0)
        admin_repository.create = AsyncMock(side_effect=lambda admin: admin)

        created = await auth_service.ensure_default_admin("Boss@Example.com", "pw")

        assert created.email == "boss@example.com"
        assert verify_password("pw", created.password_hash)

    @pytest.mark.asyncio
    async def test_skipped_when_admin_exists(self, auth_service, admin_repository):
        admin_repository.count = AsyncMock(return_value=1)

        assert await auth_service.ensure_default_admin("boss@example.com", "pw") is None
        admin_repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_skipped_without_credentials(self, auth_service, admin_repository):
        assert await auth_service.ensure_default_admin(None, None) is None
        admin_repository.count.assert_not_called()
