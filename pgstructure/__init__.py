"""
pgstructure - PostgreSQL structure export

Connects to a PostgreSQL database and produces a nested JSON snapshot of its
schemas, tables (columns, constraints, foreign keys, triggers, indexes), views
and functions.
"""

__version__ = "1.0.0"

from pgstructure.services.extractor import (extract_structure,
                                            extract_structure_model)

__all__ = [
    "extract_structure",
    "extract_structure_model",
]
