"""Keycloak Discovery - cluster membership through a shared SQL directory.

Nodes that cannot address each other directly resolve their own routable
address, publish it in a shared table, and build a view of live peers from
that table. The resulting view is handed to the cluster transport (for
example as a JGroups ``initial_hosts`` list).
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    MembershipDefaults,
    MembershipSettings,
    MembershipState,
    get_settings,
)

from .core.exceptions import (
    # Base Exception
    DiscoveryError,
    ConfigurationError,

    # Resolution
    ResolutionError,
    AddressResolutionExhaustedError,

    # Directory
    DirectoryError,
    DirectoryUnavailableError,

    # Membership
    MembershipError,
    AgentStateError,
)

from .features.resolution import (
    AddressResolver,
    DnsNameResolver,
    ResolvedAddress,
    StaticNameResolver,
)

from .features.directory import (
    DirectoryEntry,
    DirectoryStore,
    InMemoryDirectoryStore,
    PostgresDirectoryStore,
)

from .features.membership import (
    LocalView,
    MembershipAgent,
    MergeResult,
    NodeIdentity,
    PruneReport,
    ViewMerger,
)

__all__ = [
    "__version__",
    "setup_logging",
    "MembershipDefaults",
    "MembershipSettings",
    "MembershipState",
    "get_settings",
    "DiscoveryError",
    "ConfigurationError",
    "ResolutionError",
    "AddressResolutionExhaustedError",
    "DirectoryError",
    "DirectoryUnavailableError",
    "MembershipError",
    "AgentStateError",
    "AddressResolver",
    "DnsNameResolver",
    "ResolvedAddress",
    "StaticNameResolver",
    "DirectoryEntry",
    "DirectoryStore",
    "InMemoryDirectoryStore",
    "PostgresDirectoryStore",
    "LocalView",
    "MembershipAgent",
    "MergeResult",
    "NodeIdentity",
    "PruneReport",
    "ViewMerger",
]
