"""Tests for account registration and login."""

import pytest
from sqlalchemy.orm import Session

from campus_connect.core.errors import AlreadyExists, Unauthenticated
from campus_connect.models.enums import UserRole
from campus_connect.services import profiles


def test_new_profiles_are_students(db_session: Session) -> None:
    profile = profiles.create_profile(db_session, "New.User@Campus.test", "long-password", "New User")
    assert profile.role is UserRole.STUDENT
    assert profile.email == "new.user@campus.test"
    assert profiles.authenticate(db_session, "NEW.USER@campus.test", "long-password").id == profile.id


def test_duplicate_email(db_session: Session) -> None:
    profiles.create_profile(db_session, "dup@campus.test", "long-password", None)
    with pytest.raises(AlreadyExists):
        profiles.create_profile(db_session, "DUP@campus.test", "long-password", None)


def test_wrong_password(db_session: Session) -> None:
    profiles.create_profile(db_session, "who@campus.test", "long-password", None)
    with pytest.raises(Unauthenticated):
        profiles.authenticate(db_session, "who@campus.test", "wrong-password")
    with pytest.raises(Unauthenticated):
        profiles.authenticate(db_session, "nobody@campus.test", "long-password")
