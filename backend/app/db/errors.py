"""
Database error translation.

Maps driver-level constraint violations (Postgres SQLSTATE codes, or the
equivalent SQLite messages used in tests) to application exceptions with
user-facing messages.
"""

from typing import Optional

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConflictError,
    InbmException,
    RecordInUseError,
    ValidationError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
STRING_DATA_RIGHT_TRUNCATION = "22001"


def _sqlstate(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code

    text = str(orig or exc)
    if "UNIQUE constraint failed" in text:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY constraint failed" in text:
        return FOREIGN_KEY_VIOLATION
    if "CHECK constraint failed" in text:
        return CHECK_VIOLATION
    return None


def translate_db_error(
    exc: Exception,
    resource: str,
    conflict_message: Optional[str] = None,
    deleting: bool = False,
) -> InbmException:
    """
    Build the application exception for a failed flush or commit.

    Args:
        exc: IntegrityError or DataError raised by SQLAlchemy
        resource: Human readable resource name used in messages
        conflict_message: Message for unique violations
        deleting: True when the failing statement was a DELETE

    Returns:
        Exception to raise in place of the driver error
    """
    code = _sqlstate(exc)

    if code == UNIQUE_VIOLATION:
        return ConflictError(conflict_message or f"{resource} already exists")

    if code == FOREIGN_KEY_VIOLATION:
        if deleting:
            return RecordInUseError(resource)
        return ValidationError(f"{resource} references a record that does not exist")

    if code == STRING_DATA_RIGHT_TRUNCATION:
        return ValidationError("One of the values is too long for its field")

    if code == CHECK_VIOLATION:
        return ValidationError(f"{resource} violates a data constraint")

    return ConflictError(f"{resource} could not be saved")


def commit_or_raise(
    db: Session,
    resource: str,
    conflict_message: Optional[str] = None,
    deleting: bool = False,
) -> None:
    """
    Commit the session, translating constraint violations.

    The session is rolled back before the translated exception is raised.
    """
    try:
        db.commit()
    except (IntegrityError, DataError) as e:
        db.rollback()
        logger.warning(
            "Database constraint violation",
            resource=resource,
            error=str(getattr(e, "orig", e)),
        )
        raise translate_db_error(e, resource, conflict_message, deleting) from e


def flush_or_raise(
    db: Session,
    resource: str,
    conflict_message: Optional[str] = None,
) -> None:
    """Flush pending changes, translating constraint violations."""
    try:
        db.flush()
    except (IntegrityError, DataError) as e:
        db.rollback()
        logger.warning(
            "Database constraint violation",
            resource=resource,
            error=str(getattr(e, "orig", e)),
        )
        raise translate_db_error(e, resource, conflict_message) from e
