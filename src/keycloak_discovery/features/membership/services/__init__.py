"""Membership services."""

from .membership_agent import MembershipAgent, ViewListener
from .view_merger import ViewMerger

__all__ = ["MembershipAgent", "ViewListener", "ViewMerger"]
