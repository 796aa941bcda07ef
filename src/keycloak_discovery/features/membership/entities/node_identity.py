"""Node identity supplied by the execution environment."""

from dataclasses import dataclass
from typing import Optional

from ....core.exceptions import NodeIdentityError


@dataclass(frozen=True)
class NodeIdentity:
    """Logical name and assigned port of the local node."""

    node_id: str
    port: int
    incarnation: Optional[int] = None
    hostname: Optional[str] = None

    def __post_init__(self):
        if not self.node_id:
            raise NodeIdentityError("A logical node name is required (KC_DISCOVERY_NODE_NAME)")
        if not 1 <= self.port <= 65535:
            raise NodeIdentityError(f"Assigned port {self.port} is out of range")
        if self.incarnation is not None and self.incarnation < 1:
            raise NodeIdentityError(f"Pinned incarnation must be >= 1, got {self.incarnation}")

    @property
    def resolve_target(self) -> str:
        """Name handed to the address resolver."""
        return self.hostname or self.node_id

    @classmethod
    def from_settings(cls, settings) -> "NodeIdentity":
        if not settings.node_name:
            raise NodeIdentityError("A logical node name is required (KC_DISCOVERY_NODE_NAME)")
        return cls(
            node_id=settings.node_name,
            port=settings.node_port,
            incarnation=settings.incarnation,
            hostname=settings.node_hostname,
        )
