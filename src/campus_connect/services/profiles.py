"""CRUD-style helpers for managing profiles."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_connect.core import security
from campus_connect.core.errors import AlreadyExists, Unauthenticated
from campus_connect.models.enums import UserRole
from campus_connect.models.user import Profile
from campus_connect.services.transaction import atomic

__all__ = [
    "get_profile_by_email",
    "create_profile",
    "authenticate",
]


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_profile_by_email(db: Session, email: str) -> Profile | None:
    """Return a single profile by (case-insensitive) email."""
    stmt = select(Profile).where(Profile.email == _normalize_email(email))
    return db.scalars(stmt).first()


def create_profile(
    db: Session,
    email: str,
    password: str,
    full_name: str | None = None,
) -> Profile:
    """Persist a new student profile with a hashed password.

    Every self-registered account starts as a student; elevation only happens
    through an admin role change.
    """
    with atomic(db):
        if get_profile_by_email(db, email) is not None:
            raise AlreadyExists("An account with this email already exists")
        profile = Profile(
            email=_normalize_email(email),
            full_name=full_name.strip() if full_name else None,
            password_hash=security.hash_password(password),
            role=UserRole.STUDENT,
        )
        db.add(profile)
        try:
            db.flush()
        except IntegrityError as exc:
            raise AlreadyExists("An account with this email already exists") from exc
    return profile


def authenticate(db: Session, email: str, password: str) -> Profile:
    """Return the profile matching the credentials.

    Raises:
        Unauthenticated: If the email is unknown or the password is wrong.
    """
    profile = get_profile_by_email(db, email)
    if profile is None or not security.verify_password(profile.password_hash, password):
        raise Unauthenticated("Incorrect email or password")
    return profile
