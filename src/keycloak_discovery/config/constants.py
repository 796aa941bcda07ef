"""Constants and enums for keycloak-discovery.

Defaults mirror the values recognised by the membership settings; the
directory table layout corresponds to the schema created by the
PostgreSQL directory store.
"""

from enum import Enum
from typing import Final


class MembershipState(str, Enum):
    """Lifecycle states of a node's membership agent."""

    INIT = "init"
    RESOLVING = "resolving"
    REGISTERING = "registering"
    ACTIVE = "active"
    REFRESHING = "refreshing"
    FAILED = "failed"
    STOPPED = "stopped"

    @property
    def is_member(self) -> bool:
        """Whether the node currently holds a registered directory entry."""
        return self in (MembershipState.ACTIVE, MembershipState.REFRESHING)

    @property
    def is_terminal(self) -> bool:
        return self in (MembershipState.FAILED, MembershipState.STOPPED)


class ResolutionDefaults:
    """Address resolution defaults."""

    MAX_RETRIES: Final[int] = 30
    RETRY_INTERVAL_SECONDS: Final[float] = 5.0
    LOOKUP_TIMEOUT_SECONDS: Final[float] = 5.0


class MembershipDefaults:
    """Membership timing defaults (seconds unless noted)."""

    NODE_PORT: Final[int] = 7800
    REFRESH_PERIOD: Final[float] = 10.0
    STALENESS_WINDOW: Final[float] = 30.0
    PRUNE_INCARNATION_GRACE: Final[float] = 15.0
    PRUNE_EVERY_CYCLES: Final[int] = 1
    STABILITY_CYCLES: Final[int] = 2
    STORE_RETRY_INITIAL_DELAY: Final[float] = 1.0
    STOP_TIMEOUT: Final[float] = 5.0


class DirectoryTable:
    """Directory table location."""

    DEFAULT_SCHEMA: Final[str] = "public"
    DEFAULT_TABLE: Final[str] = "keycloak_directory"
