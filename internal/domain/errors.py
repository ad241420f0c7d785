"""
Domain-specific exceptions.

Every error carries a machine-readable ``code`` and the HTTP status the
transport layer answers with, so handlers never have to guess.
"""
from typing import Any, Optional


class DomainError(Exception):
    """Base exception for domain errors."""

    code: str = "DOMAIN_ERROR"
    status_code: int = 400

    def __init__(self, message: str, details: Optional[list[dict[str, Any]]] = None) -> None:
        """
        Initialize domain error.

        Args:
            message: Error message describing the issue.
            details: Optional list of field-level details.
        """
        self.message = message
        self.details = details
        super().__init__(self.message)


class DomainValidationError(DomainError):
    """Exception raised when domain validation fails."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message describing the issue.
            field: Path of the offending field (e.g. ``affiliate_links.0.url``).
            details: Field-level violations, one ``{field, message}`` per entry.
        """
        if details is None and field is not None:
            details = [{"field": field, "message": message}]
        super().__init__(message, details)
        self.field = field


class MissingAffiliateLinkError(DomainValidationError):
    """Exception raised when a product resolves to zero affiliate links."""

    code = "MISSING_AFFILIATE_LINK"

    def __init__(self) -> None:
        super().__init__(
            "At least one affiliate link is required",
            field="affiliate_links",
        )


class InvalidIdentifierError(DomainError):
    """Exception raised for a malformed identifier, before any store access."""

    code = "INVALID_IDENTIFIER"

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid identifier format: {value!r}")
        self.value = value


class InvalidIdsError(DomainError):
    """Exception raised when a bulk operation gets no usable ID list."""

    code = "INVALID_IDS"

    def __init__(self, message: str = "Product IDs array is required") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """Base exception for missing records."""

    code = "RESOURCE_NOT_FOUND"
    status_code = 404


class ProductNotFoundError(NotFoundError):
    """Exception raised when a product is not found."""

    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        """
        Initialize product not found error.

        Args:
            product_id: The ID or slug of the product that was not found.
        """
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class CategoryNotFoundError(NotFoundError):
    """Exception raised when a category is not found."""

    code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str) -> None:
        super().__init__(f"Category {category_id} not found")
        self.category_id = category_id


class AdminNotFoundError(NotFoundError):
    """Exception raised when an admin account is not found."""

    code = "ADMIN_NOT_FOUND"

    def __init__(self, admin_id: str) -> None:
        super().__init__(f"Admin {admin_id} not found")
        self.admin_id = admin_id


class ProductNotActiveError(DomainError):
    """Exception raised when tracking is attempted on a non-active product."""

    code = "PRODUCT_INACTIVE"

    def __init__(self, product_id: str, status: str) -> None:
        super().__init__(f"Product {product_id} is not active (status: {status})")
        self.product_id = product_id
        self.status = status


class ConflictError(DomainError):
    """Exception raised when a unique field is already taken."""

    code = "DUPLICATE_FIELD"
    status_code = 409

    def __init__(self, field: str, value: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Duplicate field: {field}",
            details=[{"field": field, "message": f"'{value}' already exists"}],
        )
        self.field = field
        self.value = value


class ProductAlreadyExistsError(ConflictError):
    """Exception raised when a product slug cannot be made unique."""

    def __init__(self, slug: str) -> None:
        super().__init__("slug", slug, f"Product with slug '{slug}' already exists")


class CategoryAlreadyExistsError(ConflictError):
    """Exception raised when a category name is already used."""

    def __init__(self, name: str) -> None:
        super().__init__("name", name, f"Category '{name}' already exists")


class AdminAlreadyExistsError(ConflictError):
    """Exception raised when an admin email is already registered."""

    def __init__(self, email: str) -> None:
        super().__init__("email", email, "Admin already exists")


class AuthenticationError(DomainError):
    """Base exception for missing, invalid or expired credentials."""

    code = "UNAUTHORIZED"
    status_code = 401


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"

    def __init__(self, message: str = "Not authorized to access this route") -> None:
        super().__init__(message)


class AccountLockedError(AuthenticationError):
    code = "ACCOUNT_LOCKED"

    def __init__(self) -> None:
        super().__init__(
            "Account is temporarily locked due to failed login attempts. "
            "Please try again later."
        )


class AccountInactiveError(AuthenticationError):
    code = "ACCOUNT_INACTIVE"

    def __init__(self) -> None:
        super().__init__("Account has been deactivated")


class InsufficientPrivilegesError(DomainError):
    """Exception raised when the caller is authenticated but not an admin."""

    code = "INSUFFICIENT_PRIVILEGES"
    status_code = 403

    def __init__(self) -> None:
        super().__init__("Admin privileges required")


class RateLimitedError(DomainError):
    """Exception raised when a caller exceeds its request window."""

    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, retry_after: Optional[float] = None) -> None:
        super().__init__("Too many requests, please try again later")
        self.retry_after = retry_after
