"""Grant a platform role to an existing account.

Bootstraps the first admin, since self-registration only ever creates
students and role changes over HTTP require an admin.
"""
from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy.orm import Session

from campus_connect.db.session import SessionLocal
from campus_connect.models.enums import UserRole
from campus_connect.services.profiles import get_profile_by_email
from campus_connect.services.transaction import atomic

logger = logging.getLogger("campus_connect.scripts.grant_admin")


def grant_role(db: Session, email: str, role: UserRole = UserRole.ADMIN) -> bool:
    """Set ``role`` on the profile with ``email``.

    Returns:
        False if no such profile exists.
    """
    with atomic(db):
        profile = get_profile_by_email(db, email)
        if profile is None:
            return False
        profile.role = role
    logger.info("granted %s to %s", role.value, email)
    return True


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="[grant_admin] %(message)s")
    parser = argparse.ArgumentParser(description="Grant a platform role to an account")
    parser.add_argument("email", help="Email address of the existing account")
    parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.ADMIN.value,
        help="Role to grant (default: admin)",
    )
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        if not grant_role(db, args.email, UserRole(args.role)):
            logger.error("no account found for %s", args.email)
            sys.exit(1)


if __name__ == "__main__":
    main()
