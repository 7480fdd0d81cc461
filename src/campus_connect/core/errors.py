"""Typed errors raised by the authorization and moderation layers.

The transport layer maps each class to an HTTP status code; no business logic
lives in that mapping. Messages are written for the caller and must not leak
identifiers the caller does not already own.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every error surfaced by the service layer."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DomainError):
    """No valid principal accompanies the request."""

    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(DomainError):
    """Authenticated, but missing the required role or ownership."""

    status_code = 403
    default_message = "You do not have permission to perform this action"


class InvalidArgument(DomainError):
    """Malformed or out-of-range input."""

    status_code = 422
    default_message = "Invalid request"


class Conflict(DomainError):
    """The entity is not in the state the request expected."""

    status_code = 409
    default_message = "The resource was modified concurrently; reload and retry"


class AlreadyExists(Conflict):
    """A uniqueness rule would be violated."""

    default_message = "Resource already exists"


class NotFound(DomainError):
    """The referenced entity does not exist."""

    status_code = 404
    default_message = "Resource not found"


class Internal(DomainError):
    """Persistence or transaction failure. Details stay in server logs."""

    status_code = 500
    default_message = "Internal server error"


__all__ = [
    "DomainError",
    "Unauthenticated",
    "Forbidden",
    "InvalidArgument",
    "Conflict",
    "AlreadyExists",
    "NotFound",
    "Internal",
]
