"""
Hierarchy walker: assembles the nested structure document.

Traversal is depth-first and strictly sequential on a single connection.
Each step receives only the identifiers it needs and returns an immutable
subtree. Any catalog failure aborts the walk; the only recoverable step is
the search-path reset at the root.
"""

import logging
from typing import List

from pgstructure.adapters.base import CatalogConnection
from pgstructure.core.error_utils import safe_log_warning
from pgstructure.models.structure import CatalogCapabilities, Schema, Table
from pgstructure.services import catalog
from pgstructure.services.normalizer import (normalize_column,
                                             normalize_constraint,
                                             normalize_foreign_key,
                                             normalize_function,
                                             normalize_index,
                                             normalize_trigger,
                                             normalize_view)

logger = logging.getLogger(__name__)


class StructureWalker:
    """Walks schemas, then tables, then table sub-objects."""

    def __init__(
        self,
        connection: CatalogConnection,
        capabilities: CatalogCapabilities = CatalogCapabilities(),
    ):
        """
        Args:
            connection: Connection bound to the database being introspected.
                It must not be used concurrently while the walk runs.
            capabilities: Server features detected by the extractor.
        """
        self.connection = connection
        self.capabilities = capabilities

    async def walk_schemas(self) -> List[Schema]:
        """Build every non-system schema of the current database, by name."""
        await self._reset_search_path()

        schemas = []
        for row in await catalog.list_schemas(self.connection):
            schemas.append(await self.walk_schema(row["schema_name"]))
        return schemas

    async def walk_schema(self, schema_name: str) -> Schema:
        """Build one schema; tables, views and functions are independent."""
        logger.debug(f"Introspecting schema {schema_name}")

        tables = []
        for row in await catalog.list_tables(self.connection, schema_name):
            tables.append(await self.walk_table(schema_name, row["table_name"]))

        views = [
            normalize_view(row)
            for row in await catalog.list_views(self.connection, schema_name)
        ]
        functions = [
            normalize_function(row)
            for row in await catalog.list_functions(
                self.connection, schema_name, self.capabilities
            )
        ]

        return Schema(name=schema_name, tables=tables, views=views, functions=functions)

    async def walk_table(self, schema_name: str, table_name: str) -> Table:
        conn = self.connection

        columns = await catalog.list_columns(conn, schema_name, table_name)
        constraints = await catalog.list_constraints(conn, schema_name, table_name)
        foreign_keys = await catalog.list_foreign_keys(conn, schema_name, table_name)
        triggers = await catalog.list_triggers(conn, schema_name, table_name)
        indexes = await catalog.list_indexes(conn, schema_name, table_name)

        return Table(
            name=table_name,
            columns=[normalize_column(r) for r in columns],
            constraints=[normalize_constraint(r) for r in constraints],
            foreign_keys=[normalize_foreign_key(r) for r in foreign_keys],
            triggers=[normalize_trigger(r) for r in triggers],
            indexes=[normalize_index(r) for r in indexes],
        )

    async def _reset_search_path(self) -> None:
        # Best effort: a failure here must not abort the export
        try:
            await catalog.set_search_path(self.connection)
        except Exception as e:
            safe_log_warning(logger, f"Could not set search path: {e}")
