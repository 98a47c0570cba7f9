"""Password hashing for profile credentials (PBKDF2-HMAC-SHA256)."""

from __future__ import annotations

import hashlib
import hmac
import secrets

__all__ = ["hash_password", "verify_password"]

_ALGORITHM: str = "pbkdf2_sha256"


def hash_password(password: str, iterations: int) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt: str = secrets.token_hex(16)
    digest: str = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations,
    ).hex()
    return f"{_ALGORITHM}${iterations}${salt}${digest}"


def verify_password(password: str, encoded: str) -> bool:
    """Check *password* against a value produced by :func:`hash_password`.

    Login is by user id and never checks a password; this documents and
    exercises the stored hash format.
    """
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False

    computed: str = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds,
    ).hex()
    return hmac.compare_digest(computed, expected)
