"""
Security helpers: password hashing and signed tokens.
"""
from .passwords import hash_password, verify_password
from .tokens import TokenError, sign_token, verify_token

__all__ = [
    "hash_password",
    "verify_password",
    "TokenError",
    "sign_token",
    "verify_token",
]
