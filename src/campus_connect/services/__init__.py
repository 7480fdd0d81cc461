# src/campus_connect/services/__init__.py
"""Business logic services for the Campus Connect application."""

from .moderation import ModerationEngine
from .role_registry import Principal, resolve_principal, resolve_role

__all__ = [
    "ModerationEngine",
    "Principal",
    "resolve_principal",
    "resolve_role",
]
