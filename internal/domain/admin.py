"""
Domain model for Admin accounts.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from .errors import DomainValidationError


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_LOGIN_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)
ADMIN_ROLE = "admin"


@dataclass
class Admin:
    """
    Admin is the authentication principal guarding catalog writes.

    Attributes:
        email: Unique, lowercase login email.
        password_hash: Encoded password hash; never serialized.
        id: Unique identifier.
        role: Account role.
        first_name: Optional first name.
        last_name: Optional last name.
        login_attempts: Consecutive failed logins.
        locked_until: End of the current lockout, if any.
        last_login: Timestamp of the last successful login.
        last_activity: Timestamp of the last authenticated request.
        is_active: Whether the account may log in.
        created_at: Timestamp of creation.
        updated_at: Timestamp of last update.
    """
    email: str
    password_hash: str
    id: UUID = field(default_factory=uuid4)
    role: str = ADMIN_ROLE
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    login_attempts: int = 0
    locked_until: Optional[datetime] = None
    last_login: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        self.email = self.email.strip().lower()
        if not EMAIL_RE.match(self.email):
            raise DomainValidationError(
                "Please provide a valid email address",
                field="email",
            )

    @property
    def full_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        """Return True while a lockout is in effect."""
        now = now or datetime.utcnow()
        return self.locked_until is not None and self.locked_until > now

    def register_failed_login(self, now: Optional[datetime] = None) -> None:
        """
        Count a failed login, locking the account after too many.

        An expired lock restarts the counter at one.

        Args:
            now: Current time, defaults to utcnow.
        """
        now = now or datetime.utcnow()
        if self.locked_until is not None and self.locked_until <= now:
            self.locked_until = None
            self.login_attempts = 1
            return

        self.login_attempts += 1
        if self.login_attempts >= MAX_LOGIN_ATTEMPTS and not self.is_locked(now):
            self.locked_until = now + LOCK_DURATION

    def register_successful_login(self, now: Optional[datetime] = None) -> None:
        """Clear lockout state and stamp login/activity times."""
        now = now or datetime.utcnow()
        self.login_attempts = 0
        self.locked_until = None
        self.last_login = now
        self.last_activity = now

    def to_dict(self) -> dict:
        """Convert to dictionary representation, without the password hash."""
        return {
            "id": str(self.id),
            "email": self.email,
            "role": self.role,
            "full_name": self.full_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }
