"""Member response model.

ONLY directory members - one live (node, incarnation) as seen by this node.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ...features.directory.entities.directory_entry import DirectoryEntry


class MemberResponse(BaseModel):
    """A member of the local view."""

    node_id: str = Field(..., description="Logical node name")
    incarnation: int = Field(..., ge=1, description="Restart counter of the node")
    address: str = Field(..., description="Routable address published by the node")
    port: int = Field(..., ge=1, le=65535, description="Externally reachable port")
    last_seen_at: datetime = Field(..., description="Last refresh, stamped by the directory")

    @classmethod
    def from_entry(cls, entry: DirectoryEntry) -> "MemberResponse":
        return cls(
            node_id=entry.node_id,
            incarnation=entry.incarnation,
            address=entry.address,
            port=entry.port,
            last_seen_at=entry.last_seen_at,
        )
