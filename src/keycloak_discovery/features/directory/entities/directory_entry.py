"""Directory entry entity: one row per (node, incarnation)."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ....core.exceptions import InvalidDirectoryEntryError
from ....utils.datetime import as_timedelta, to_utc, utc_now


@dataclass(frozen=True)
class DirectoryEntry:
    """A node's published endpoint in the shared directory."""

    node_id: str
    incarnation: int
    address: str
    port: int
    last_seen_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        """Validate the entry and normalise the timestamp to UTC."""
        if not self.node_id or not self.node_id.strip():
            raise InvalidDirectoryEntryError("node_id cannot be empty")
        if self.incarnation < 1:
            raise InvalidDirectoryEntryError(
                f"incarnation must be >= 1 for node '{self.node_id}'"
            )
        if not self.address:
            raise InvalidDirectoryEntryError(f"address cannot be empty for node '{self.node_id}'")
        if not 1 <= self.port <= 65535:
            raise InvalidDirectoryEntryError(
                f"port {self.port} out of range for node '{self.node_id}'"
            )
        object.__setattr__(self, "last_seen_at", to_utc(self.last_seen_at))

    @property
    def key(self) -> Tuple[str, int]:
        return (self.node_id, self.incarnation)

    @property
    def endpoint(self) -> str:
        if ":" in self.address:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or utc_now()) - self.last_seen_at

    def is_live(self, staleness_window: Union[float, timedelta], now: Optional[datetime] = None) -> bool:
        """Live iff now - last_seen_at < staleness_window."""
        return self.age(now) < as_timedelta(staleness_window)

    def is_stale(self, staleness_window: Union[float, timedelta], now: Optional[datetime] = None) -> bool:
        return not self.is_live(staleness_window, now)

    def refreshed(self, at: Optional[datetime] = None) -> "DirectoryEntry":
        """Copy with a new last_seen_at; never moves the timestamp backwards."""
        at = to_utc(at or utc_now())
        return replace(self, last_seen_at=max(at, self.last_seen_at))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "DirectoryEntry":
        """Build an entry from a database record or mapping."""
        return cls(
            node_id=record["node_id"],
            incarnation=int(record["incarnation"]),
            address=record["address"],
            port=int(record["port"]),
            last_seen_at=record["last_seen_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "incarnation": self.incarnation,
            "address": self.address,
            "port": self.port,
            "last_seen_at": self.last_seen_at.isoformat(),
        }
