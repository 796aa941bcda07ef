"""
Database connection management using asyncpg for the shared directory.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import asyncpg
from asyncpg import Pool, Record

from ..__version__ import __version__
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the connection pool to the directory database."""

    def __init__(self, database_url: Optional[str] = None, **pool_config):
        """Initialize DatabaseManager.

        Args:
            database_url: Database URL (defaults to DATABASE_URL env var)
            **pool_config: Additional pool configuration options
        """
        self.pool: Optional[Pool] = None
        self.dsn = database_url or os.getenv("DATABASE_URL", "")
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")

        # Membership traffic is a handful of small statements per cycle
        self.pool_config = {
            "min_size": 1,
            "max_size": 4,
            "max_inactive_connection_lifetime": 300,
            "command_timeout": 10,
            **pool_config
        }

    @classmethod
    def from_settings(cls, settings) -> "DatabaseManager":
        return cls(settings.database_url, **settings.pool_config)

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if self.pool is None:
            if not self.dsn:
                raise ConfigurationError(
                    "No directory database configured. Set KC_DISCOVERY_DATABASE_URL or DATABASE_URL."
                )
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")

            server_settings = {
                'application_name': f"keycloak-discovery/{__version__}",
            }

            self.pool = await asyncpg.create_pool(
                self.dsn,
                server_settings=server_settings,
                **self.pool_config
            )
            logger.info("Database pool created successfully")
        return self.pool

    async def close_pool(self):
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: float = None) -> Optional[Record]:
        """Fetch a single row."""
        async with self.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: float = None) -> Any:
        """Fetch a single value."""
        async with self.acquire() as connection:
            return await connection.fetchval(query, *args, column=column, timeout=timeout)
