"""Base exceptions for keycloak-discovery.

All exceptions inherit from DiscoveryError and carry an error code and a
details mapping so they can be logged and rendered consistently.
"""

from typing import Any, Dict, Optional


class DiscoveryError(Exception):
    """Base exception for all keycloak-discovery errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(DiscoveryError):
    """Raised when configuration is missing or inconsistent."""
    pass


def create_error_response(exception: DiscoveryError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The discovery exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
