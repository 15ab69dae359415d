"""
This module provides the PostgreSQL connection adapter.

It includes the `PostgresAdapter` class, which implements the `DatabaseAdapter`
interface on top of a single `asyncpg` connection. The extraction core shares
one session for the whole traversal, so no pool is used.
"""

import asyncio
import logging
from typing import Optional

import asyncpg  # type: ignore[import-untyped]

from pgstructure.adapters.base import DatabaseAdapter
from pgstructure.core.config import settings
from pgstructure.core.error_utils import sanitize_error_message
from pgstructure.core.exceptions import InvalidConnectionStringError
from pgstructure.models.structure import StructureDocument

logger = logging.getLogger(__name__)

VALID_SCHEMES = ("postgresql://", "postgres://")


def validate_connection_string(connection_string: str) -> str:
    """
    Check that a connection string is a PostgreSQL URL.

    Strings without a scheme are rejected rather than repaired.

    Raises:
        InvalidConnectionStringError: If the string is empty or has the wrong scheme.
    """
    value = (connection_string or "").strip()
    if not value.startswith(VALID_SCHEMES):
        raise InvalidConnectionStringError(
            "Connection string must start with 'postgresql://' or 'postgres://'"
        )
    return value


class PostgresAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter.

    Owns one connection for the duration of an export. The connection must not
    be shared with another extraction while a walk is running.
    """

    def __init__(self, connection_string: str):
        """
        Initializes the PostgresAdapter.

        Args:
            connection_string: The connection string for the PostgreSQL database.

        Raises:
            InvalidConnectionStringError: If the connection string is malformed.
        """
        self.connection_string = validate_connection_string(connection_string)
        self.connection: Optional[asyncpg.Connection] = None

    @property
    def safe_target(self) -> str:
        """Connection string with the password masked, for logging."""
        return sanitize_error_message(self.connection_string)

    async def connect(self) -> None:
        """
        Opens the connection.

        Connection failures (refused, authentication, missing database) are not
        retried.
        """
        try:
            self.connection = await asyncpg.connect(
                self.connection_string,
                timeout=settings.CONNECT_TIMEOUT,
                command_timeout=settings.COMMAND_TIMEOUT,
                statement_cache_size=settings.STATEMENT_CACHE_SIZE,
            )
        except ValueError as e:
            # asyncpg reports unparsable DSNs as ValueError subclasses
            raise InvalidConnectionStringError(sanitize_error_message(str(e))) from e
        except Exception as e:
            logger.warning(
                "Failed to connect to PostgreSQL database %s: %s",
                self.safe_target,
                sanitize_error_message(str(e)),
            )
            raise

        logger.info(f"Connected to PostgreSQL database {self.safe_target}")

    async def disconnect(self) -> None:
        """Closes the connection."""
        if self.connection is None:
            return
        try:
            await asyncio.wait_for(self.connection.close(), timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("PostgreSQL connection close timed out, terminating")
            self.connection.terminate()
        except Exception as e:
            logger.warning(f"Error closing PostgreSQL connection: {e}")
        finally:
            self.connection = None

    async def introspect_structure(self) -> StructureDocument:
        """
        Extracts the structure of the connected database.

        Returns:
            A `StructureDocument` for the current database.
        """
        from pgstructure.services.extractor import extract_structure_model

        if self.connection is None:
            await self.connect()
        assert self.connection is not None  # Type assertion for mypy
        return await extract_structure_model(self.connection)
