"""A node's local view of the live cluster."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple

from ....utils.datetime import utc_now
from ...directory.entities.directory_entry import DirectoryEntry


@dataclass(frozen=True)
class LocalView:
    """Live, de-duplicated directory entries: at most one per node id.

    Rebuilt from scratch on each scan cycle, never mutated.
    """

    own_node_id: str
    entries: Tuple[DirectoryEntry, ...] = ()
    built_at: datetime = field(default_factory=utc_now)

    @classmethod
    def build(
        cls,
        own_node_id: str,
        entries: Iterable[DirectoryEntry],
        built_at: Optional[datetime] = None,
    ) -> "LocalView":
        ordered = tuple(sorted(entries, key=lambda e: e.node_id))
        node_ids = [e.node_id for e in ordered]
        if len(node_ids) != len(set(node_ids)):
            raise ValueError("LocalView requires at most one entry per node_id")
        return cls(own_node_id=own_node_id, entries=ordered, built_at=built_at or utc_now())

    @classmethod
    def empty(cls, own_node_id: str) -> "LocalView":
        return cls(own_node_id=own_node_id)

    @property
    def node_ids(self) -> List[str]:
        return [e.node_id for e in self.entries]

    @property
    def members(self) -> FrozenSet[Tuple[str, int]]:
        """(node_id, incarnation) pairs, ignoring refresh timestamps."""
        return frozenset(e.key for e in self.entries)

    @property
    def fingerprint(self) -> FrozenSet[Tuple[str, int, str, int]]:
        """(node_id, incarnation, address, port) tuples; what peers actually dial."""
        return frozenset((e.node_id, e.incarnation, e.address, e.port) for e in self.entries)

    @property
    def endpoints(self) -> List[str]:
        return [e.endpoint for e in self.entries]

    @property
    def peers(self) -> Tuple[DirectoryEntry, ...]:
        return tuple(e for e in self.entries if e.node_id != self.own_node_id)

    @property
    def includes_self(self) -> bool:
        return self.get(self.own_node_id) is not None

    def get(self, node_id: str) -> Optional[DirectoryEntry]:
        for entry in self.entries:
            if entry.node_id == node_id:
                return entry
        return None

    def contains(self, node_id: str, incarnation: Optional[int] = None) -> bool:
        entry = self.get(node_id)
        if entry is None:
            return False
        return incarnation is None or entry.incarnation == incarnation

    def same_members(self, other: Optional["LocalView"]) -> bool:
        """True when both views hold the same nodes at the same endpoints."""
        return other is not None and self.fingerprint == other.fingerprint

    def as_initial_hosts(self) -> str:
        """Render as a JGroups ``initial_hosts`` list: ``host[port],host[port]``."""
        return ",".join(f"{e.address}[{e.port}]" for e in self.entries)

    def to_dict(self) -> dict:
        return {
            "own_node_id": self.own_node_id,
            "built_at": self.built_at.isoformat(),
            "members": [e.to_dict() for e in self.entries],
            "initial_hosts": self.as_initial_hosts(),
        }

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)
