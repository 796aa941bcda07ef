"""Membership feature: the per-node control loop and view reconciliation.

Feature-First layout:
- entities/: NodeIdentity, LocalView and merge results
- services/: MembershipAgent state machine and ViewMerger
"""

from .entities import LocalView, MergeResult, NodeIdentity, PruneReport
from .services import MembershipAgent, ViewMerger

__all__ = [
    "LocalView",
    "MembershipAgent",
    "MergeResult",
    "NodeIdentity",
    "PruneReport",
    "ViewMerger",
]
