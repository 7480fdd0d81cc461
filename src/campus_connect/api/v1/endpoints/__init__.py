# src/campus_connect/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .clubs import router as clubs_router
from .events import router as events_router
from .flags import router as flags_router
from .memberships import router as memberships_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "clubs_router",
    "events_router",
    "flags_router",
    "memberships_router",
    "users_router",
]
