# tests/test_scripts.py
from alembic import command
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import Session

from campus_connect.models import Profile
from campus_connect.models.enums import UserRole
from campus_connect.scripts.grant_admin import grant_role
from campus_connect.scripts.migrate import build_config


def test_grant_role_promotes_existing_account(db_session: Session, student: Profile) -> None:
    assert grant_role(db_session, student.email.upper()) is True
    db_session.refresh(student)
    assert student.role is UserRole.ADMIN


def test_grant_role_unknown_email(db_session: Session) -> None:
    assert grant_role(db_session, "ghost@campus.test", UserRole.STUDENT_LEADER) is False


def test_upgrade_head_builds_the_schema(tmp_path, monkeypatch) -> None:
    url = f"sqlite:///{tmp_path / 'campus.db'}"
    monkeypatch.setenv("ALEMBIC_URL", url)
    command.upgrade(build_config(), "head")

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"profiles", "clubs", "flags", "moderation_logs", "alembic_version"} <= tables
