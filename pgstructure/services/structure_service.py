"""Export orchestration: connect, extract, serialize."""

import logging
from typing import Any, Dict

import orjson

from pgstructure.adapters.postgres import PostgresAdapter

logger = logging.getLogger(__name__)


def render_json(document: Dict[str, Any]) -> bytes:
    """Serialize a structure document as two-space indented UTF-8 JSON."""
    return orjson.dumps(document, option=orjson.OPT_INDENT_2)


class StructureService:
    """Runs one export against a connection string"""

    async def export(self, connection_string: str) -> Dict[str, Any]:
        """
        Connect, extract the current database's structure and disconnect.

        The connection is always closed, including when extraction fails.
        Errors propagate unchanged so the caller can categorize them.

        Args:
            connection_string: PostgreSQL URL (``postgresql://...``)

        Returns:
            The structure document as JSON-compatible data.
        """
        adapter = PostgresAdapter(connection_string)
        async with adapter:
            document = await adapter.introspect_structure()

        schema_count = sum(len(db.schemas) for db in document.databases)
        logger.debug(f"Extracted {schema_count} schema(s)")
        return document.to_document()


async def export_structure(connection_string: str) -> Dict[str, Any]:
    return await StructureService().export(connection_string)
