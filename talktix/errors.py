"""
Domain-specific exceptions for the TalkTix platform.

Services raise these; the API layer maps each one to a fixed status code
in main.py. Nothing here is retried automatically.
"""

from typing import Any, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class DomainError(Exception):
    """Base exception for all domain-specific errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, "details": self.details}


class ValidationError(DomainError):
    """Bad input shape or a violated business rule."""

    status_code = 400


class InvalidOTPError(ValidationError):
    """OTP missing, expired, or not matching."""


class AuthError(DomainError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class ForbiddenError(AuthError):
    """Authenticated, but not allowed (wrong role or someone else's resource)."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Resource already exists or the slot is already taken."""

    status_code = 409


class PersistenceError(DomainError):
    """Store unreachable or write failed."""

    status_code = 500


class UnavailableError(DomainError):
    """A downstream dependency timed out or refused the connection."""

    status_code = 503


def is_timeout(exc: SQLAlchemyError) -> bool:
    """True for pool checkout timeouts and statement/connect timeouts."""
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, OperationalError):
        text = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        return "timeout" in text or "timed out" in text or "statement_timeout" in text
    return False


def from_db_error(exc: SQLAlchemyError, action: str) -> DomainError:
    """Translate a store failure into PersistenceError/UnavailableError."""
    if is_timeout(exc):
        return UnavailableError(f"Database timed out while {action}", code="DatabaseTimeout")
    return PersistenceError(f"Error {action}: {exc.__class__.__name__}")
