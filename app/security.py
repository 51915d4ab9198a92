"""Hashing and random token helpers."""

import secrets

import bcrypt

from app.config import get_settings

BCRYPT_MIN_COST = 4
TOKEN_BYTES = 16  # 128 bits


def hashing_cost() -> int:
    """Return the bcrypt cost factor for the current environment."""
    settings = get_settings()
    if settings.use_min_bcrypt_cost:
        return BCRYPT_MIN_COST
    return settings.BCRYPT_COST


def digest(plaintext: str, cost: int | None = None) -> str:
    """Return a salted bcrypt hash of the given string."""
    rounds = cost if cost is not None else hashing_cost()
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_digest(hashed: str, plaintext: str) -> bool:
    """Check a plaintext value against a bcrypt hash.

    A malformed hash never matches.
    """
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def new_token() -> str:
    """Generate a random URL-safe token."""
    return secrets.token_urlsafe(TOKEN_BYTES)
