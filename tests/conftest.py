# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import email_validator

# Test fixtures use the reserved ``.test`` TLD, which email-validator only
# accepts when its test-environment flag is on.
email_validator.TEST_ENVIRONMENT = True

from campus_connect.core.security import create_access_token, hash_password
from campus_connect.db.session import Base, enable_sqlite_foreign_keys
from campus_connect.db.session import get_db as app_get_session
from campus_connect.db.time import utcnow
from campus_connect.main import app as fastapi_app
from campus_connect.models import Club, ClubMembership, Event, Profile
from campus_connect.models.enums import (
    ApprovalStatus,
    MemberRole,
    MembershipStatus,
    UserRole,
)

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"

_EMAIL_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit and roll back for real, so each test gets a plain session
    # and the tables are emptied afterwards.
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_profile(db_session: Session) -> Callable[..., Profile]:
    """Return a factory that persists profiles with a given role."""

    def _make(role: UserRole = UserRole.STUDENT, email: str | None = None) -> Profile:
        profile = Profile(
            email=email or f"user{next(_EMAIL_COUNTER)}@campus.test",
            full_name="Test User",
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture()
def profile_password() -> str:
    """Plain-text password shared by every profile from ``make_profile``."""
    return TEST_PASSWORD


@pytest.fixture()
def student(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile(UserRole.STUDENT)


@pytest.fixture()
def other_student(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile(UserRole.STUDENT)


@pytest.fixture()
def leader(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile(UserRole.STUDENT_LEADER)


@pytest.fixture()
def admin(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile(UserRole.ADMIN)


@pytest.fixture()
def auth_headers() -> Callable[[Profile], dict[str, str]]:
    """Return a helper building authorization headers for a profile."""

    def _headers(profile: Profile) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(profile.id)}"}

    return _headers


@pytest.fixture()
def make_club(db_session: Session) -> Callable[..., Club]:
    """Persist a club with its creator enrolled as an approved club admin."""

    def _make(
        creator: Profile,
        status: ApprovalStatus = ApprovalStatus.APPROVED,
        name: str = "Chess Club",
    ) -> Club:
        club = Club(name=name, description="Weekly games", creator_id=creator.id, approval_status=status)
        if status is ApprovalStatus.APPROVED:
            club.approved_at = utcnow()
        if status is ApprovalStatus.REJECTED:
            club.rejection_reason = "Duplicate of an existing club"
        club.memberships.append(
            ClubMembership(user_id=creator.id, role=MemberRole.ADMIN, status=MembershipStatus.APPROVED)
        )
        db_session.add(club)
        db_session.commit()
        return club

    return _make


@pytest.fixture()
def approved_club(make_club: Callable[..., Club], leader: Profile) -> Club:
    return make_club(leader, ApprovalStatus.APPROVED)


@pytest.fixture()
def pending_club(make_club: Callable[..., Club], leader: Profile) -> Club:
    return make_club(leader, ApprovalStatus.PENDING, name="Robotics Society")


@pytest.fixture()
def event(db_session: Session, approved_club: Club, leader: Profile) -> Event:
    event = Event(
        title="Spring Tournament",
        description="Open to all levels",
        event_date=utcnow() + timedelta(days=7),
        location="Student Union",
        club_id=approved_club.id,
        creator_id=leader.id,
        is_free=True,
    )
    db_session.add(event)
    db_session.commit()
    return event
