"""Translate SQLAlchemy failures into PersistenceFailure."""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from pharmatrace.core.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(db: Session, action: str):
    """
    Roll back and raise PersistenceFailure if the block hits a storage error.

    Usage:
        with storage_errors(db, "create batch"):
            db.add(batch)
            db.commit()
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation during {action}: {e.orig}")
        raise PersistenceFailure(
            f"Could not {action}: a conflicting record already exists. Please retry.",
            conflict=True,
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage error during {action}: {type(e).__name__}: {e}", exc_info=True)
        raise PersistenceFailure(f"Could not {action}: storage unavailable. Please retry.") from e
