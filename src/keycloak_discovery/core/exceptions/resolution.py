"""Address resolution exceptions."""

from typing import Optional, Sequence

from .base import DiscoveryError


class ResolutionError(DiscoveryError):
    """Base class for address resolution errors."""
    pass


class NameLookupError(ResolutionError):
    """Raised when a single name lookup fails."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(
            f"Lookup of '{name}' failed: {reason}",
            details={"name": name, "reason": reason},
        )


class UnroutableAddressError(ResolutionError):
    """Raised when a lookup only produced addresses peers cannot reach."""

    def __init__(self, name: str, candidates: Sequence[str]):
        self.name = name
        self.candidates = list(candidates)
        message = f"No routable address for '{name}'"
        if self.candidates:
            message += f" (candidates: {', '.join(self.candidates)})"
        super().__init__(message, details={"name": name, "candidates": self.candidates})


class AddressResolutionExhaustedError(ResolutionError):
    """Raised when every resolution attempt failed.

    This is fatal: a node that does not know its own routable address must not
    register itself.
    """

    def __init__(self, name: str, attempts: int, last_error: Optional[BaseException] = None):
        self.name = name
        self.attempts = attempts
        self.last_error = last_error
        message = f"Could not resolve '{name}' after {attempts} attempts"
        if last_error is not None:
            message += f": {last_error}"
        super().__init__(
            message,
            details={"name": name, "attempts": attempts, "last_error": str(last_error) if last_error else None},
        )
