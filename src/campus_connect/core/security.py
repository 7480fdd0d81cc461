"""Password hashing and access-token helpers."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from campus_connect.core.errors import Unauthenticated
from campus_connect.core.settings import settings

PASSWORD_HASHER = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return PASSWORD_HASHER.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Return True if ``password`` matches ``password_hash``."""
    try:
        return PASSWORD_HASHER.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(subject: uuid.UUID | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a signed JWT for the given principal id.

    Args:
        subject: Principal id stored in the ``sub`` claim.
        extra_claims: Optional additional claims.

    Returns:
        Encoded JWT string.
    """
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, object] = {"sub": str(subject), "exp": expire}
    if extra_claims:
        claims.update(extra_claims)
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """Validate a JWT and return the principal id it carries.

    Raises:
        Unauthenticated: If the token is invalid, expired or lacks a subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise Unauthenticated() from err

    subject = payload.get("sub")
    if subject is None:
        raise Unauthenticated()
    try:
        return uuid.UUID(str(subject))
    except ValueError as err:
        raise Unauthenticated() from err
