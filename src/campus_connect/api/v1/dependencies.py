"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_connect.core.errors import Unauthenticated
from campus_connect.core.security import decode_access_token
from campus_connect.db.session import get_db
from campus_connect.models import Profile
from campus_connect.services.role_registry import Principal

# auto_error is off so that a missing header surfaces as Unauthenticated (401).
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> Profile:
    """Get the current authenticated profile from the bearer token.

    Raises:
        Unauthenticated: If the token is missing or invalid, or the profile is gone.
    """
    if credentials is None:
        raise Unauthenticated()
    profile_id = decode_access_token(credentials.credentials)
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise Unauthenticated("User not found")
    return profile


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> Profile | None:
    """Like ``get_current_user`` but anonymous callers get ``None``."""
    if credentials is None:
        return None
    return get_current_user(credentials, db)


def get_principal(current_user: Annotated[Profile, Depends(get_current_user)]) -> Principal:
    return Principal.from_profile(current_user)


def get_optional_principal(
    current_user: Annotated[Profile | None, Depends(get_optional_user)],
) -> Principal | None:
    return Principal.from_profile(current_user) if current_user is not None else None


# Type alias for current user dependency
CurrentUserDep = Annotated[Profile, Depends(get_current_user)]
PrincipalDep = Annotated[Principal, Depends(get_principal)]
OptionalPrincipalDep = Annotated[Principal | None, Depends(get_optional_principal)]
