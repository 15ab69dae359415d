"""
Models package initialization.
Exports the structure document models for easier access.
"""

from .structure import (CatalogCapabilities, Column, Constraint, Database,
                        ForeignKey, Function, Index, Schema,
                        StructureDocument, Table, Trigger, View)
