# src/campus_connect/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    auth_router,
    clubs_router,
    events_router,
    flags_router,
    memberships_router,
    users_router,
)

__all__ = [
    "admin_router",
    "auth_router",
    "clubs_router",
    "events_router",
    "flags_router",
    "memberships_router",
    "users_router",
]
