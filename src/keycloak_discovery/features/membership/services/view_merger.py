"""Reconciliation of directory scans into a trustworthy peer list.

The directory is the single source of truth: nodes never vote on
membership, they only read and prune it. For every node id the highest
incarnation wins (the most recent restart); older incarnations are
superseded and removed once they have been quiet for a grace period, so a
row whose owner is mid-way through re-registering is left alone.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ....config.constants import MembershipDefaults
from ...directory.entities.directory_entry import DirectoryEntry
from ...directory.entities.protocols import DirectoryStore
from ..entities.local_view import LocalView
from ..entities.merge_result import MergeResult, PruneReport

logger = logging.getLogger(__name__)


class ViewMerger:
    """Turns raw scans into LocalViews and keeps the directory clean."""

    def __init__(
        self,
        own_node_id: str,
        staleness_window: float = MembershipDefaults.STALENESS_WINDOW,
        prune_incarnation_grace: float = MembershipDefaults.PRUNE_INCARNATION_GRACE,
        stability_cycles: int = MembershipDefaults.STABILITY_CYCLES,
    ):
        if staleness_window <= 0:
            raise ValueError("staleness_window must be > 0")
        if prune_incarnation_grace < 0:
            raise ValueError("prune_incarnation_grace must be >= 0")
        if stability_cycles < 1:
            raise ValueError("stability_cycles must be >= 1")

        self.own_node_id = own_node_id
        self.staleness_window = staleness_window
        self.prune_incarnation_grace = prune_incarnation_grace
        self.stability_cycles = stability_cycles

        self._previous: Optional[LocalView] = None
        self._unchanged_merges = 0

    def merge(self, entries: Iterable[DirectoryEntry]) -> MergeResult:
        """Reduce a scan to one entry per node id, highest incarnation first."""
        latest: Dict[str, DirectoryEntry] = {}
        superseded: List[DirectoryEntry] = []

        for entry in sorted(entries, key=lambda e: (e.node_id, e.incarnation)):
            current = latest.get(entry.node_id)
            if current is None:
                latest[entry.node_id] = entry
            elif entry.incarnation > current.incarnation:
                superseded.append(current)
                latest[entry.node_id] = entry
            elif entry.last_seen_at > current.last_seen_at:
                # Same key reported twice; keep the freshest copy
                latest[entry.node_id] = entry

        if superseded:
            logger.debug(
                "Superseded incarnations: "
                + ", ".join(f"{e.node_id}@{e.incarnation}" for e in superseded)
            )

        view = LocalView.build(self.own_node_id, latest.values())
        stable = self._track_stability(view)
        return MergeResult(view=view, superseded=tuple(superseded), stable=stable)

    def _track_stability(self, view: LocalView) -> bool:
        """Stable once the view includes this node and repeated identically."""
        if not view.includes_self:
            self._previous = None
            self._unchanged_merges = 0
            return False

        if view.same_members(self._previous):
            self._unchanged_merges += 1
        else:
            self._unchanged_merges = 1
        self._previous = view
        return self._unchanged_merges >= self.stability_cycles

    @property
    def is_stable(self) -> bool:
        return self._previous is not None and self._unchanged_merges >= self.stability_cycles

    def reset(self) -> None:
        """Forget stability history."""
        self._previous = None
        self._unchanged_merges = 0

    async def prune(
        self,
        store: DirectoryStore,
        superseded: Iterable[DirectoryEntry] = (),
    ) -> PruneReport:
        """Delete stale rows and quiet superseded incarnations.

        Idempotent and safe to run from every node concurrently. Store errors
        propagate to the caller.
        """
        stale_deleted = await store.delete_stale(self.staleness_window)

        superseded_deleted = 0
        for entry in superseded:
            removed = await store.delete_entry(
                entry.node_id,
                entry.incarnation,
                older_than=self.prune_incarnation_grace,
            )
            if removed:
                superseded_deleted += 1

        report = PruneReport(stale_deleted=stale_deleted, superseded_deleted=superseded_deleted)
        if report.total:
            logger.info(
                f"Pruned directory: {report.stale_deleted} stale, "
                f"{report.superseded_deleted} superseded rows"
            )
        return report
