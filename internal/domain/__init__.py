"""
Domain package for the storefront service.

Contains domain entities, value objects, invariant derivation and domain errors.
"""
from .product import Product, COMMISSION_RATE, calculate_ctr
from .category import Category
from .admin import Admin
from .value_objects import AffiliateLink, ProductStatus, parse_identifier
from .invariants import derive_product_invariants, validate_product
from .errors import (
    DomainError,
    DomainValidationError,
    MissingAffiliateLinkError,
    InvalidIdentifierError,
    InvalidIdsError,
    NotFoundError,
    ProductNotFoundError,
    CategoryNotFoundError,
    AdminNotFoundError,
    ProductNotActiveError,
    ConflictError,
    ProductAlreadyExistsError,
    CategoryAlreadyExistsError,
    AdminAlreadyExistsError,
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    AccountLockedError,
    AccountInactiveError,
    InsufficientPrivilegesError,
    RateLimitedError,
)

__all__ = [
    "Product",
    "COMMISSION_RATE",
    "calculate_ctr",
    "Category",
    "Admin",
    "AffiliateLink",
    "ProductStatus",
    "parse_identifier",
    "derive_product_invariants",
    "validate_product",
    "DomainError",
    "DomainValidationError",
    "MissingAffiliateLinkError",
    "InvalidIdentifierError",
    "InvalidIdsError",
    "NotFoundError",
    "ProductNotFoundError",
    "CategoryNotFoundError",
    "AdminNotFoundError",
    "ProductNotActiveError",
    "ConflictError",
    "ProductAlreadyExistsError",
    "CategoryAlreadyExistsError",
    "AdminAlreadyExistsError",
    # Auth
    "AuthenticationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "AccountLockedError",
    "AccountInactiveError",
    "InsufficientPrivilegesError",
    "RateLimitedError",
]
