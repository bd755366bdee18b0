from __future__ import annotations

from datetime import datetime


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced tag, occurrence or record does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks membership, guardianship or role for an action."""


class ConflictError(DomainError):
    """Raised when the current state does not allow the requested transition."""


class TemporalError(DomainError):
    """Raised when an action happens outside the time it is allowed in."""


class TooEarlyError(TemporalError):
    """No check-in window is open yet; carries the next occurrence so callers can show a countdown."""

    def __init__(self, *, occurrence_id: int, title: str, starts_at: datetime, start_time: str):
        self.occurrence_id = occurrence_id
        self.title = title
        self.starts_at = starts_at
        self.start_time = start_time
        super().__init__(f"Too early to check in: {title} starts at {start_time}")
