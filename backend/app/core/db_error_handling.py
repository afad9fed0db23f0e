"""
Database transaction and error handling utilities.

Centralizes the pattern used by every write path:
1. Run the unit of work
2. Commit on success
3. On any error: roll back, log with context, and surface a typed ``ApiError``

Usage:
    from app.core.db_error_handling import transaction

    with transaction(db, "create test"):
        test = Test(title=title, created_by=owner.id)
        db.add(test)
        db.flush()
        db.add_all(questions)

Business rule violations raised inside the block (``ApiError`` subclasses)
roll the session back and propagate unchanged, so a rejected operation never
leaves partial rows behind.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.error_responses import ApiError, ErrorMessages, InternalError


logger = logging.getLogger(__name__)


@contextmanager
def transaction(
    db: Session,
    operation_name: str,
    *,
    log_level: int = logging.ERROR,
) -> Generator[Session, None, None]:
    """Run the wrapped block as one atomic unit of work.

    Args:
        db: The SQLAlchemy session to commit or roll back.
        operation_name: Human-readable name of the operation for logging and
            the generic error message (e.g. "submit test").
        log_level: Logging level for unexpected database errors.

    Yields:
        The same session, for convenience.

    Raises:
        ApiError: Re-raised unchanged after rollback.
        InternalError: When the database layer fails. The message is generic;
            the underlying error is logged.
    """
    try:
        yield db
        db.commit()
    except ApiError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.log(
            log_level,
            "Database error during %s: %s",
            operation_name,
            e,
            exc_info=True,
        )
        raise InternalError(
            ErrorMessages.database_operation_failed(operation_name)
        ) from e
    except Exception:
        db.rollback()
        raise
