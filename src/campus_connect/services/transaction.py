"""Transaction boundary used by every mutating service operation."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_connect.core.errors import DomainError, Internal

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or nothing at all.

    Domain errors propagate unchanged after the rollback. Database errors
    are logged with full detail and surfaced as ``Internal``.
    """
    try:
        yield db
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Transaction rolled back after database error", exc_info=True)
        raise Internal() from exc
    except Exception:
        db.rollback()
        raise
