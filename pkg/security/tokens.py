"""
Signed session tokens.

Tokens are ``base64url(json payload) "." base64url(HMAC-SHA256 signature)``
with an ``exp`` claim in epoch seconds.
"""
import base64
import hashlib
import hmac
import json
import time
from typing import Any, Optional


class TokenError(Exception):
    """Raised when a token is malformed, forged or expired."""


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def sign_token(
    payload: dict[str, Any],
    secret: str,
    ttl_seconds: Optional[int] = None,
    now: Optional[float] = None,
) -> str:
    """
    Sign a payload.

    Args:
        payload: Claims to embed.
        secret: HMAC key.
        ttl_seconds: Lifetime; sets ``exp`` when given.
        now: Current epoch time, defaults to time.time().

    Returns:
        Encoded token.
    """
    claims = dict(payload)
    if ttl_seconds is not None:
        claims["exp"] = int((now if now is not None else time.time()) + ttl_seconds)
    data = json.dumps(claims, separators=(",", ":"), sort_keys=True).encode()
    signature = hmac.new(secret.encode(), data, hashlib.sha256).digest()
    return f"{_b64encode(data)}.{_b64encode(signature)}"


def verify_token(token: str, secret: str, now: Optional[float] = None) -> dict[str, Any]:
    """
    Verify a token and return its claims.

    Args:
        token: Encoded token.
        secret: HMAC key.
        now: Current epoch time, defaults to time.time().

    Returns:
        Decoded claims.

    Raises:
        TokenError: If the token is malformed, has a bad signature or expired.
    """
    try:
        data_b64, signature_b64 = token.split(".")
        data = _b64decode(data_b64)
        signature = _b64decode(signature_b64)
    except ValueError as e:
        raise TokenError("Malformed token") from e

    expected = hmac.new(secret.encode(), data, hashlib.sha256).digest()
    if not hmac.compare_digest(signature, expected):
        raise TokenError("Invalid signature")

    try:
        claims = json.loads(data.decode())
    except ValueError as e:
        raise TokenError("Malformed payload") from e
    if not isinstance(claims, dict):
        raise TokenError("Malformed payload")

    exp = claims.get("exp")
    if exp is not None and (now if now is not None else time.time()) > exp:
        raise TokenError("Token expired")
    return claims
