"""Standardized error handling for directory store operations."""

import asyncio
import functools
import logging
from typing import Any, Callable

import asyncpg

from ....core.exceptions import (
    DirectoryError,
    DirectoryQueryError,
    DirectoryUnavailableError,
)

logger = logging.getLogger(__name__)

# Errors meaning the store could not be reached, as opposed to a rejected statement
_CONNECTIVITY_ERRORS = (
    asyncpg.PostgresConnectionError,
    asyncpg.InterfaceError,
    asyncpg.CannotConnectNowError,
    OSError,
    asyncio.TimeoutError,
)


def directory_operation(operation_name: str, log_level: int = logging.DEBUG):
    """Decorator translating driver errors into DirectoryError subclasses.

    Errors are logged with context and re-raised; retrying is the caller's job.

    Usage:
        @directory_operation("upsert")
        async def upsert(self, entry):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> Any:
            try:
                return await func(self, *args, **kwargs)
            except DirectoryError:
                raise
            except _CONNECTIVITY_ERRORS as e:
                logger.log(
                    log_level,
                    f"Directory {operation_name} failed: {e!r} | table={getattr(self, 'qualified_table', '?')}"
                )
                raise DirectoryUnavailableError(operation_name, str(e) or e.__class__.__name__) from e
            except asyncpg.PostgresError as e:
                logger.error(
                    f"Directory {operation_name} rejected: {e!r} | table={getattr(self, 'qualified_table', '?')}"
                )
                raise DirectoryQueryError(operation_name, str(e)) from e

        return wrapper
    return decorator
