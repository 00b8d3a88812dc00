"""Domain exceptions for the allocation tracker.

Repository failures are normalized into RepositoryError so callers can map
them to a safe response without knowing which storage backend is in use.
"""

from enum import Enum
from typing import Optional


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    pass


class NotInitializedError(TrackerError):
    """Raised when Settings or Budget are required but were never created."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message)
        self.resource = resource


class ValidationError(TrackerError):
    """Raised for malformed input at the HTTP boundary.

    Examples:
    - Ticker outside the allowed set
    - Tier outside 1..tier_count of the formation
    - Non-positive entry price
    - Unknown formation id
    """

    def __init__(self, message: str, field: Optional[str] = None, code: str = "VALIDATION_ERROR"):
        super().__init__(message)
        self.field = field
        self.code = code


class RepositoryErrorKind(str, Enum):
    """Failure category of the persistence layer"""
    CONNECTION = "CONNECTION"
    TIMEOUT = "TIMEOUT"
    AUTHENTICATION = "AUTHENTICATION"
    QUERY = "QUERY"
    CONSTRAINT = "CONSTRAINT"
    UNKNOWN = "UNKNOWN"


_SAFE_MESSAGES = {
    RepositoryErrorKind.CONNECTION: "Failed to connect to the database",
    RepositoryErrorKind.TIMEOUT: "Database operation timed out",
    RepositoryErrorKind.AUTHENTICATION: "Database authentication failed",
    RepositoryErrorKind.QUERY: "Database query failed",
    RepositoryErrorKind.CONSTRAINT: "Database constraint violated",
    RepositoryErrorKind.UNKNOWN: "Database operation failed",
}


class RepositoryError(TrackerError):
    """Wraps any failure raised by a repository."""

    def __init__(
        self,
        message: str,
        kind: RepositoryErrorKind = RepositoryErrorKind.UNKNOWN,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.cause = cause

    @property
    def safe_message(self) -> str:
        """Message that can be shown outside development"""
        return _SAFE_MESSAGES[self.kind]

    @classmethod
    def from_exception(cls, error: BaseException) -> "RepositoryError":
        """Classify an arbitrary exception by its message"""
        if isinstance(error, RepositoryError):
            return error

        message = str(error).lower()

        if "timeout" in message or "timed out" in message:
            kind = RepositoryErrorKind.TIMEOUT
        elif "connection" in message or "connect" in message:
            kind = RepositoryErrorKind.CONNECTION
        elif "auth" in message or "credential" in message or "permission" in message:
            kind = RepositoryErrorKind.AUTHENTICATION
        elif "constraint" in message or "duplicate" in message or "foreign key" in message:
            kind = RepositoryErrorKind.CONSTRAINT
        elif "query" in message or "syntax" in message or "sql" in message:
            kind = RepositoryErrorKind.QUERY
        else:
            kind = RepositoryErrorKind.UNKNOWN

        return cls(f"{_SAFE_MESSAGES[kind]}: {error}", kind=kind, cause=error)
