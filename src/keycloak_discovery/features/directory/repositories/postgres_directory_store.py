"""PostgreSQL directory store on the shared asyncpg pool."""

import logging
from datetime import timedelta
from typing import List, Optional

from ....config.constants import DirectoryTable
from ....database.connection import DatabaseManager
from ..entities.directory_entry import DirectoryEntry
from ..utils.error_handling import directory_operation
from ..utils.queries import (
    DIRECTORY_CREATE_INCARNATION_TABLE,
    DIRECTORY_CREATE_INDEX,
    DIRECTORY_CREATE_TABLE,
    DIRECTORY_DELETE_ENTRY,
    DIRECTORY_DELETE_ENTRY_OLDER_THAN,
    DIRECTORY_DELETE_STALE,
    DIRECTORY_NEXT_INCARNATION,
    DIRECTORY_RESET,
    DIRECTORY_SCAN_ALL,
    DIRECTORY_SCAN_LIVE,
    DIRECTORY_UPSERT,
    parse_row_count,
)
from ..utils.validation import validate_identifier

logger = logging.getLogger(__name__)


class PostgresDirectoryStore:
    """Directory store backed by a PostgreSQL table.

    Every statement is a single idempotent command; no cluster-wide lock or
    explicit transaction is taken. Deletes carry their age condition in the
    WHERE clause so they cannot race a concurrent refresh of a fresh row.
    """

    def __init__(
        self,
        database: DatabaseManager,
        schema: str = DirectoryTable.DEFAULT_SCHEMA,
        table: str = DirectoryTable.DEFAULT_TABLE,
        auto_create: bool = True,
    ):
        self._db = database
        self._schema = validate_identifier(schema)
        self._table = validate_identifier(table)
        validate_identifier(f"{table}_incarnations")
        self._auto_create = auto_create
        self._initialized = False

    @classmethod
    def from_settings(cls, settings, database: Optional[DatabaseManager] = None) -> "PostgresDirectoryStore":
        return cls(
            database or DatabaseManager.from_settings(settings),
            schema=settings.directory_schema,
            table=settings.directory_table,
        )

    @property
    def qualified_table(self) -> str:
        return f"{self._schema}.{self._table}"

    def _sql(self, template: str) -> str:
        return template.format(schema=self._schema, table=self._table)

    @directory_operation("initialize")
    async def initialize(self) -> None:
        """Create the directory table, its index and the incarnation table if missing."""
        await self._db.execute(self._sql(DIRECTORY_CREATE_TABLE))
        await self._db.execute(self._sql(DIRECTORY_CREATE_INDEX))
        await self._db.execute(self._sql(DIRECTORY_CREATE_INCARNATION_TABLE))
        self._initialized = True
        logger.info(f"Directory table {self.qualified_table} ready")

    async def _ensure_initialized(self) -> None:
        # Retried lazily so a store that was down at startup still gets its table
        if self._auto_create and not self._initialized:
            await self.initialize()

    @directory_operation("upsert")
    async def upsert(self, entry: DirectoryEntry) -> DirectoryEntry:
        await self._ensure_initialized()
        row = await self._db.fetchrow(
            self._sql(DIRECTORY_UPSERT),
            entry.node_id,
            entry.incarnation,
            entry.address,
            entry.port,
        )
        if row is None:
            return entry
        return DirectoryEntry.from_record(row)

    @directory_operation("scan")
    async def scan_live(self, staleness_window: float) -> List[DirectoryEntry]:
        await self._ensure_initialized()
        rows = await self._db.fetch(
            self._sql(DIRECTORY_SCAN_LIVE), timedelta(seconds=staleness_window)
        )
        return [DirectoryEntry.from_record(row) for row in rows]

    @directory_operation("scan")
    async def scan_all(self) -> List[DirectoryEntry]:
        await self._ensure_initialized()
        rows = await self._db.fetch(self._sql(DIRECTORY_SCAN_ALL))
        return [DirectoryEntry.from_record(row) for row in rows]

    @directory_operation("prune")
    async def delete_stale(self, staleness_window: float) -> int:
        await self._ensure_initialized()
        status = await self._db.execute(
            self._sql(DIRECTORY_DELETE_STALE), timedelta(seconds=staleness_window)
        )
        return parse_row_count(status)

    @directory_operation("delete")
    async def delete_entry(self, node_id: str, incarnation: int,
                           older_than: Optional[float] = None) -> bool:
        await self._ensure_initialized()
        if older_than is None:
            status = await self._db.execute(
                self._sql(DIRECTORY_DELETE_ENTRY), node_id, incarnation
            )
        else:
            status = await self._db.execute(
                self._sql(DIRECTORY_DELETE_ENTRY_OLDER_THAN),
                node_id,
                incarnation,
                timedelta(seconds=older_than),
            )
        return parse_row_count(status) > 0

    @directory_operation("incarnation allocation")
    async def next_incarnation(self, node_id: str) -> int:
        """Allocate an incarnation above every one previously handed out to the node."""
        await self._ensure_initialized()
        value = await self._db.fetchval(self._sql(DIRECTORY_NEXT_INCARNATION), node_id)
        return int(value or 1)

    @directory_operation("reset")
    async def reset(self) -> int:
        """Remove every directory row. Incarnation high-water marks are kept."""
        await self._ensure_initialized()
        status = await self._db.execute(self._sql(DIRECTORY_RESET))
        removed = parse_row_count(status)
        logger.warning(f"Directory {self.qualified_table} reset, {removed} rows removed")
        return removed

    async def close(self) -> None:
        await self._db.close_pool()
