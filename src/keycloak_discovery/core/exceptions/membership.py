"""Membership agent exceptions."""

from .base import DiscoveryError


class MembershipError(DiscoveryError):
    """Base class for membership errors."""
    pass


class NodeIdentityError(MembershipError):
    """Raised when the environment does not supply a usable node identity."""
    pass


class AgentStateError(MembershipError):
    """Raised when an agent operation is invoked in the wrong state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            f"Cannot {operation} while agent is {state}",
            details={"operation": operation, "state": state},
        )
