"""
Security utilities for authentication.

This module provides:
- Password hashing and verification (using bcrypt)
- JWT token creation and validation (using python-jose)

Tokens are HS256-signed with the process-wide ``JWT_SECRET_KEY`` and
carry two claims: ``username`` and ``exp``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from around.core.config import settings


# ================================
# Password Hashing
# ================================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns False (instead of raising) when the stored value is not a
    valid bcrypt hash.
    """
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')

    try:
        # bcrypt.checkpw handles constant-time comparison
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a plaintext password.

    bcrypt generates a random salt per call, so hashing the same
    password twice yields different strings; both verify.
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


# ================================
# JWT Tokens
# ================================

def create_access_token(username: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed token for ``username``.

    Args:
        username: Subject of the token
        expires_delta: Lifetime; defaults to JWT_TOKEN_EXPIRE_HOURS

    Returns:
        Encoded JWT string

    Example:
        >>> token = create_access_token("alice")
        >>> decode_access_token(token)["username"]
        'alice'
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.JWT_TOKEN_EXPIRE_HOURS)

    expire = datetime.now(timezone.utc) + expires_delta
    claims = {"username": username, "exp": expire}

    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify a token.

    Signature, algorithm and expiration are all checked.

    Returns:
        Claims dictionary if valid, None if invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
