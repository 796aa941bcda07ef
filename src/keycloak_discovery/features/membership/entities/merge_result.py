"""Results produced by the view merger."""

from dataclasses import dataclass
from typing import Tuple

from ...directory.entities.directory_entry import DirectoryEntry
from .local_view import LocalView


@dataclass(frozen=True)
class MergeResult:
    """Outcome of reconciling one directory scan."""

    view: LocalView
    superseded: Tuple[DirectoryEntry, ...] = ()
    stable: bool = False

    @property
    def has_duplicates(self) -> bool:
        return bool(self.superseded)


@dataclass(frozen=True)
class PruneReport:
    """Rows removed by one prune pass."""

    stale_deleted: int = 0
    superseded_deleted: int = 0

    @property
    def total(self) -> int:
        return self.stale_deleted + self.superseded_deleted
