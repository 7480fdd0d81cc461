# src/campus_connect/api/v1/endpoints/auth.py
"""Authentication endpoints for the Campus Connect API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from campus_connect.core.security import create_access_token
from campus_connect.schemas.user import (
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    TokenResponse,
)
from campus_connect.services import profiles

from ..dependencies import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: SessionDep) -> ProfileResponse:
    """Create a student account."""
    profile = profiles.create_profile(db, payload.email, payload.password, payload.full_name)
    logger.info("Registered profile %s", profile.id)
    return ProfileResponse.model_validate(profile)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: SessionDep) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    profile = profiles.authenticate(db, payload.email, payload.password)
    return TokenResponse(access_token=create_access_token(profile.id), token_type="bearer")
