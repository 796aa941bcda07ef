"""Exception hierarchy for keycloak-discovery.

Taxonomy:
- Fatal: AddressResolutionExhaustedError, the node must terminate.
- Transient: DirectoryError subclasses raised by stores, retried by the agent.
- Programming/configuration: ConfigurationError, NodeIdentityError, AgentStateError.
"""

from .base import ConfigurationError, DiscoveryError, create_error_response
from .directory import (
    DirectoryError,
    DirectoryQueryError,
    DirectoryUnavailableError,
    InvalidDirectoryEntryError,
    InvalidIdentifierError,
)
from .membership import AgentStateError, MembershipError, NodeIdentityError
from .resolution import (
    AddressResolutionExhaustedError,
    NameLookupError,
    ResolutionError,
    UnroutableAddressError,
)

__all__ = [
    "DiscoveryError",
    "ConfigurationError",
    "create_error_response",
    "DirectoryError",
    "DirectoryQueryError",
    "DirectoryUnavailableError",
    "InvalidDirectoryEntryError",
    "InvalidIdentifierError",
    "MembershipError",
    "NodeIdentityError",
    "AgentStateError",
    "ResolutionError",
    "NameLookupError",
    "UnroutableAddressError",
    "AddressResolutionExhaustedError",
]
