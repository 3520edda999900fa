from __future__ import annotations

from .enums import CalendarState


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a record addressed by id does not exist."""


class AuthorizationError(DomainError):
    """Raised when a role lacks permission for an action."""


class DuplicateRecordError(DomainError):
    """Raised by repositories when a subject already has a record for the day."""


class CalendarUnavailable(DomainError):
    """Raised when the calendar client is not in the READY state."""

    def __init__(self, state: CalendarState, message: str):
        super().__init__(message)
        self.state = state


class CalendarSyncError(DomainError):
    """Raised when the calendar provider rejects or fails a call."""
