"""Directory store exceptions."""

from .base import DiscoveryError


class DirectoryError(DiscoveryError):
    """Base class for directory store errors."""
    pass


class DirectoryUnavailableError(DirectoryError):
    """Raised when the directory store cannot be reached.

    Transient: callers retry on their own schedule.
    """

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        self.reason = reason
        message = f"Directory unavailable during {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"operation": operation, "reason": reason})


class DirectoryQueryError(DirectoryError):
    """Raised when the directory store rejects a statement."""

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        self.reason = reason
        message = f"Directory query failed during {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"operation": operation, "reason": reason})


class InvalidDirectoryEntryError(DirectoryError):
    """Raised when a directory entry violates its invariants."""
    pass


class InvalidIdentifierError(DirectoryError):
    """Raised when a schema or table name is invalid or unsafe."""

    def __init__(self, identifier: str, reason: str = ""):
        self.identifier = identifier
        self.reason = reason
        message = f"Invalid identifier '{identifier}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
