"""
Password hashing with PBKDF2-SHA256.

Encoded form: ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
"""
import hashlib
import hmac
import secrets


ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 390_000


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    Hash a password with a fresh random salt.

    Args:
        password: Plain-text password.
        iterations: PBKDF2 work factor.

    Returns:
        Encoded hash.
    """
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """
    Check a password against an encoded hash.

    Args:
        password: Candidate plain-text password.
        encoded: Value produced by hash_password.

    Returns:
        True if the password matches.
    """
    if not password or not encoded:
        return False
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), rounds)
    return hmac.compare_digest(digest.hex(), expected)
