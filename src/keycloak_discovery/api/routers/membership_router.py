"""Membership status router.

Read-only endpoints for load balancers and operators: health reflects
whether this node is currently a cluster member.
"""

from fastapi import APIRouter, Depends, Response, status

from ...features.membership.services.membership_agent import MembershipAgent
from ..dependencies.agent_dependencies import get_membership_agent
from ..models.health_response import HealthResponse
from ..models.view_response import ViewResponse

membership_router = APIRouter(
    prefix="/membership",
    tags=["Membership"],
    responses={503: {"description": "Node is not an active cluster member"}},
)


@membership_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Membership health",
    description="200 while the node is ACTIVE or REFRESHING, 503 otherwise",
)
async def get_membership_health(
    response: Response,
    agent: MembershipAgent = Depends(get_membership_agent),
) -> HealthResponse:
    """Report the agent state."""
    snapshot = agent.status()
    healthy = agent.state.is_member
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        healthy=healthy,
        state=snapshot["state"],
        node_id=snapshot["node_id"],
        address=snapshot["address"],
        port=snapshot["port"],
        incarnation=snapshot["incarnation"],
        member_count=len(snapshot["members"]),
        stable=snapshot["stable"],
        consecutive_store_failures=snapshot["consecutive_store_failures"],
        last_refresh_at=snapshot["last_refresh_at"],
        last_error=snapshot["last_error"],
    )


@membership_router.get(
    "/view",
    response_model=ViewResponse,
    summary="Local view",
    description="Live, de-duplicated cluster members as last seen by this node",
)
async def get_local_view(
    agent: MembershipAgent = Depends(get_membership_agent),
) -> ViewResponse:
    return ViewResponse.from_view(agent.view, stable=agent.is_stable)
