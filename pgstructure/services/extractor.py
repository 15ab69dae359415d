"""Structure extraction entry point."""

import logging
from typing import Any, Dict

from pgstructure.adapters.base import CatalogConnection
from pgstructure.core.exceptions import ExtractionError
from pgstructure.models.structure import (CatalogCapabilities, Database,
                                          StructureDocument)
from pgstructure.services import catalog
from pgstructure.services.walker import StructureWalker

logger = logging.getLogger(__name__)


async def extract_structure_model(connection: CatalogConnection) -> StructureDocument:
    """
    Introspect the database the connection is bound to.

    Only the current database is walked, even when the connection could reach
    others. Safe to call repeatedly on the same connection.

    Args:
        connection: A live connection (see `CatalogConnection`)

    Returns:
        A `StructureDocument` holding exactly one database

    Raises:
        ExtractionError: If the current database cannot be determined.
            Errors raised while walking the catalog propagate unchanged.
    """
    try:
        row = await catalog.get_current_database(connection)
        db_name = row["db_name"]
    except Exception as e:
        logger.warning(f"Error extracting database structure: {e}")
        raise ExtractionError(f"Could not determine the current database: {e}") from e

    logger.info(f"Connected to database: {db_name}")

    capabilities = CatalogCapabilities(server_version_num=row.get("server_version_num"))
    walker = StructureWalker(connection, capabilities)
    schemas = await walker.walk_schemas()

    return StructureDocument(databases=[Database(name=db_name, schemas=schemas)])


async def extract_structure(connection: CatalogConnection) -> Dict[str, Any]:
    """Introspect the current database and return plain JSON-compatible data."""
    document = await extract_structure_model(connection)
    return document.to_document()
