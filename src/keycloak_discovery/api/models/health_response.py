"""Membership health response model.

ONLY agent health - state machine position and directory reachability.
"""

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health of the local membership agent."""

    healthy: bool = Field(..., description="True while the node is a cluster member")
    state: str = Field(..., description="Membership state")
    node_id: str
    address: Optional[str] = None
    port: int
    incarnation: Optional[int] = None
    member_count: int = Field(default=0, ge=0)
    stable: bool = False
    consecutive_store_failures: int = Field(default=0, ge=0)
    last_refresh_at: Optional[str] = Field(default=None, description="ISO timestamp of the last refresh")
    last_error: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "healthy": True,
                "state": "active",
                "node_id": "kc-0",
                "address": "10.0.0.5",
                "port": 7800,
                "incarnation": 3,
                "member_count": 3,
                "stable": True,
                "consecutive_store_failures": 0,
                "last_refresh_at": "2024-05-01T12:00:00+00:00",
                "last_error": None,
            }
        }
    }
