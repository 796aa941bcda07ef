"""Status API dependencies."""

from .agent_dependencies import get_membership_agent

__all__ = ["get_membership_agent"]
