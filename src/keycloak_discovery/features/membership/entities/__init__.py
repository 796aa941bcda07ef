"""Membership entities."""

from .local_view import LocalView
from .merge_result import MergeResult, PruneReport
from .node_identity import NodeIdentity

__all__ = ["LocalView", "MergeResult", "NodeIdentity", "PruneReport"]
