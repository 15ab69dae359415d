"""Structure document models"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Column(BaseModel):
    """Table column, in declaration order"""
    name: str
    data_type: Optional[str] = None
    is_nullable: Optional[str] = None  # "YES" / "NO"
    default: Optional[str] = None
    max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None

    model_config = {"frozen": True}


class Constraint(BaseModel):
    """Table constraint"""
    name: str
    type: Optional[str] = None
    definition: Optional[str] = None

    model_config = {"frozen": True}


class ForeignKey(BaseModel):
    """Foreign key; source_columns[i] references target_columns[i]"""
    name: str
    source_schema: str
    source_table: str
    source_columns: List[str] = []
    target_schema: Optional[str] = None
    target_table: Optional[str] = None
    target_columns: List[str] = []
    update_rule: Optional[str] = None
    delete_rule: Optional[str] = None

    model_config = {"frozen": True}


class Trigger(BaseModel):
    """Table trigger"""
    name: str
    enabled_state: Optional[str] = None
    level: str
    timing: str
    insert_event: bool = False
    delete_event: bool = False
    update_event: bool = False
    truncate_event: bool = False
    function_name: Optional[str] = None
    function_schema: Optional[str] = None
    definition: Optional[str] = None

    model_config = {"frozen": True}


class Index(BaseModel):
    """Table index"""
    name: str
    definition: Optional[str] = None
    column_names: List[str] = []  # declared key order
    tablespace: Optional[str] = None
    is_unique: bool = False
    is_primary: bool = False
    is_valid: bool = True

    model_config = {"frozen": True}


class Table(BaseModel):
    """Base table and its sub-objects"""
    name: str
    columns: List[Column] = []
    constraints: List[Constraint] = []
    foreign_keys: List[ForeignKey] = Field(default_factory=list, alias="foreignKeys")
    triggers: List[Trigger] = []
    indexes: List[Index] = []

    model_config = {"frozen": True, "populate_by_name": True}


class View(BaseModel):
    """View and its defining query"""
    name: str
    definition: Optional[str] = None

    model_config = {"frozen": True}


class Function(BaseModel):
    """Function, procedure, aggregate or window function"""
    name: str
    arguments: Optional[str] = None
    return_type: Optional[str] = None
    body: Optional[str] = None
    kind: Optional[str] = None
    volatility: Optional[str] = None
    is_strict: Optional[bool] = None
    returns_set: Optional[bool] = None

    model_config = {"frozen": True}


class Schema(BaseModel):
    """Schema and the objects it contains"""
    name: str
    tables: List[Table] = []
    views: List[View] = []
    functions: List[Function] = []

    model_config = {"frozen": True}


class Database(BaseModel):
    """The introspected database"""
    name: str
    schemas: List[Schema] = []

    model_config = {"frozen": True}


class StructureDocument(BaseModel):
    """Complete structure snapshot; exactly one database per run"""
    databases: List[Database]

    model_config = {"frozen": True}

    def to_document(self) -> Dict[str, Any]:
        """Plain JSON-compatible data, using the published field names."""
        return self.model_dump(mode="json", by_alias=True)


class CatalogCapabilities(BaseModel):
    """Server features that change which catalog columns are available"""
    server_version_num: Optional[int] = None

    model_config = {"frozen": True}

    @property
    def has_prokind(self) -> bool:
        """pg_proc.prokind exists from PostgreSQL 11 onwards."""
        if self.server_version_num is None:
            return True
        return self.server_version_num >= 110000
