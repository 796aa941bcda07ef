"""Local view response model."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from ...features.membership.entities.local_view import LocalView
from .member_response import MemberResponse


class ViewResponse(BaseModel):
    """The node's current LocalView."""

    own_node_id: str = Field(..., description="Node that built this view")
    built_at: datetime = Field(..., description="When the view was last rebuilt")
    stable: bool = Field(default=False, description="Unchanged for the configured number of cycles")
    members: List[MemberResponse] = Field(default_factory=list)
    initial_hosts: str = Field(default="", description="JGroups initial_hosts rendering")

    @classmethod
    def from_view(cls, view: LocalView, stable: bool = False) -> "ViewResponse":
        return cls(
            own_node_id=view.own_node_id,
            built_at=view.built_at,
            stable=stable,
            members=[MemberResponse.from_entry(e) for e in view],
            initial_hosts=view.as_initial_hosts(),
        )
