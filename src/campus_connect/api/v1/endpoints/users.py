"""User endpoints: the caller's profile and admin role changes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter

from campus_connect.schemas.user import ProfileResponse, RoleUpdateRequest
from campus_connect.services import authorization as gate
from campus_connect.services.moderation import ModerationEngine

from ..dependencies import CurrentUserDep, PrincipalDep, SessionDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ProfileResponse)
async def read_me(current_user: CurrentUserDep) -> ProfileResponse:
    return ProfileResponse.model_validate(current_user)


@router.patch("/{user_id}/role", response_model=ProfileResponse)
async def update_role(
    user_id: uuid.UUID,
    payload: RoleUpdateRequest,
    principal: PrincipalDep,
    db: SessionDep,
) -> ProfileResponse:
    """Change another user's platform role (admins only)."""
    gate.authorize(
        gate.can_change_role(principal, user_id, payload.role),
        "Only admins can change other users' roles",
    )
    profile = ModerationEngine.change_role(db, principal.id, user_id, payload.role)
    return ProfileResponse.model_validate(profile)
