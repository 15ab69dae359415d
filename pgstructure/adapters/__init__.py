from pgstructure.adapters.base import CatalogConnection, DatabaseAdapter
from pgstructure.adapters.postgres import (PostgresAdapter,
                                           validate_connection_string)

__all__ = [
    "CatalogConnection",
    "DatabaseAdapter",
    "PostgresAdapter",
    "validate_connection_string",
]
