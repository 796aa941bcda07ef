"""Membership agent dependency for the status API."""

from fastapi import Request

from ...features.membership.services.membership_agent import MembershipAgent


async def get_membership_agent(request: Request) -> MembershipAgent:
    """Get the agent attached to the application state."""
    return request.app.state.membership_agent
