"""In-memory directory store."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from ....utils.datetime import as_timedelta, utc_now
from ..entities.directory_entry import DirectoryEntry

logger = logging.getLogger(__name__)


class InMemoryDirectoryStore:
    """Directory store kept in process memory.

    Same semantics as the PostgreSQL store, with the store's clock stamping
    last_seen_at. Several agents sharing one instance behave like nodes
    sharing one table, which makes it the store for local clusters and tests.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._entries: Dict[Tuple[str, int], DirectoryEntry] = {}
        self._incarnations: Dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def initialize(self) -> None:
        # Nothing to prepare
        pass

    async def upsert(self, entry: DirectoryEntry) -> DirectoryEntry:
        async with self._lock:
            now = self._clock()
            existing = self._entries.get(entry.key)
            stored = DirectoryEntry(
                node_id=entry.node_id,
                incarnation=entry.incarnation,
                address=entry.address,
                port=entry.port,
                last_seen_at=max(now, existing.last_seen_at) if existing else now,
            )
            self._entries[entry.key] = stored
            return stored

    async def scan_live(self, staleness_window: float) -> List[DirectoryEntry]:
        async with self._lock:
            now = self._clock()
            return sorted(
                (e for e in self._entries.values() if e.is_live(staleness_window, now)),
                key=lambda e: e.key,
            )

    async def scan_all(self) -> List[DirectoryEntry]:
        async with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.key)

    async def delete_stale(self, staleness_window: float) -> int:
        async with self._lock:
            now = self._clock()
            stale = [key for key, e in self._entries.items() if e.is_stale(staleness_window, now)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    async def delete_entry(self, node_id: str, incarnation: int,
                           older_than: Optional[float] = None) -> bool:
        async with self._lock:
            entry = self._entries.get((node_id, incarnation))
            if entry is None:
                return False
            if older_than is not None and entry.age(self._clock()) < as_timedelta(older_than):
                return False
            del self._entries[(node_id, incarnation)]
            return True

    async def next_incarnation(self, node_id: str) -> int:
        async with self._lock:
            incarnations = [inc for (nid, inc) in self._entries if nid == node_id]
            allocated = max(max(incarnations, default=0), self._incarnations.get(node_id, 0)) + 1
            self._incarnations[node_id] = allocated
            return allocated

    async def reset(self) -> int:
        async with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            logger.warning(f"In-memory directory reset, {removed} rows removed")
            return removed

    async def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._entries)
