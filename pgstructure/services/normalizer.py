"""
Row normalization: raw catalog rows to structure document models.

Catalog codes are decoded through plain lookup tables. An unrecognized code is
not an error: it is passed through as its raw text (or null for referential
actions) so newer server versions never break an export.
"""

from typing import Any, Dict, List, Mapping, Optional

from pgstructure.models.structure import (Column, Constraint, ForeignKey,
                                          Function, Index, Trigger, View)

Row = Mapping[str, Any]

CONSTRAINT_TYPES: Dict[str, str] = {
    "p": "PRIMARY KEY",
    "u": "UNIQUE",
    "c": "CHECK",
    "f": "FOREIGN KEY",
}

REFERENTIAL_ACTIONS: Dict[str, str] = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}

FUNCTION_KINDS: Dict[str, str] = {
    "f": "FUNCTION",
    "p": "PROCEDURE",
    "a": "AGGREGATE",
    "w": "WINDOW",
}

# pg_trigger.tgtype bits
TRIGGER_TYPE_ROW = 1 << 0
TRIGGER_TYPE_BEFORE = 1 << 1
TRIGGER_TYPE_INSERT = 1 << 2
TRIGGER_TYPE_DELETE = 1 << 3
TRIGGER_TYPE_UPDATE = 1 << 4
TRIGGER_TYPE_TRUNCATE = 1 << 5
TRIGGER_TYPE_INSTEAD = 1 << 6


def _as_text(code: Any) -> Optional[str]:
    if code is None:
        return None
    if isinstance(code, bytes):
        return code.decode("utf-8", errors="replace")
    return str(code)


def decode_constraint_type(code: Any) -> Optional[str]:
    text = _as_text(code)
    return CONSTRAINT_TYPES.get(text, text)


def decode_referential_action(code: Any) -> Optional[str]:
    return REFERENTIAL_ACTIONS.get(_as_text(code))


def decode_function_kind(code: Any) -> Optional[str]:
    text = _as_text(code)
    return FUNCTION_KINDS.get(text, text)


def decode_trigger_type(tgtype: Optional[int]) -> Dict[str, Any]:
    """
    Decode a ``pg_trigger.tgtype`` bitmask.

    Args:
        tgtype: The raw bitmask (null is treated as 0)

    Returns:
        A dict with ``level``, ``timing`` and the four event flags
    """
    bits = int(tgtype or 0)

    if bits & TRIGGER_TYPE_BEFORE:
        timing = "BEFORE"
    elif bits & TRIGGER_TYPE_INSTEAD:
        timing = "INSTEAD OF"
    else:
        timing = "AFTER"

    return {
        "level": "ROW" if bits & TRIGGER_TYPE_ROW else "STATEMENT",
        "timing": timing,
        "insert_event": bool(bits & TRIGGER_TYPE_INSERT),
        "delete_event": bool(bits & TRIGGER_TYPE_DELETE),
        "update_event": bool(bits & TRIGGER_TYPE_UPDATE),
        "truncate_event": bool(bits & TRIGGER_TYPE_TRUNCATE),
    }


def _names(values: Any) -> List[str]:
    return [str(v) for v in values or [] if v is not None]


def normalize_column(row: Row) -> Column:
    return Column(
        name=row["column_name"],
        data_type=row.get("data_type"),
        is_nullable=row.get("is_nullable"),
        default=row.get("column_default"),
        max_length=row.get("character_maximum_length"),
        numeric_precision=row.get("numeric_precision"),
        numeric_scale=row.get("numeric_scale"),
    )


def normalize_constraint(row: Row) -> Constraint:
    return Constraint(
        name=row["constraint_name"],
        type=decode_constraint_type(row.get("constraint_type")),
        definition=row.get("definition"),
    )


def normalize_foreign_key(row: Row) -> ForeignKey:
    return ForeignKey(
        name=row["constraint_name"],
        source_schema=row["source_schema"],
        source_table=row["source_table"],
        source_columns=_names(row.get("source_columns")),
        target_schema=row.get("target_schema"),
        target_table=row.get("target_table"),
        target_columns=_names(row.get("target_columns")),
        update_rule=decode_referential_action(row.get("update_action")),
        delete_rule=decode_referential_action(row.get("delete_action")),
    )


def normalize_trigger(row: Row) -> Trigger:
    return Trigger(
        name=row["trigger_name"],
        enabled_state=_as_text(row.get("enabled")),
        function_name=row.get("function_name"),
        function_schema=row.get("function_schema"),
        definition=row.get("definition"),
        **decode_trigger_type(row.get("trigger_type")),
    )


def normalize_index(row: Row) -> Index:
    return Index(
        name=row["index_name"],
        definition=row.get("index_definition"),
        column_names=_names(row.get("column_names")),
        tablespace=row.get("tablespace_name"),
        is_unique=bool(row.get("is_unique")),
        is_primary=bool(row.get("is_primary")),
        is_valid=bool(row.get("is_valid", True)),
    )


def normalize_view(row: Row) -> View:
    return View(name=row["view_name"], definition=row.get("view_definition"))


def normalize_function(row: Row) -> Function:
    return Function(
        name=row["function_name"],
        arguments=row.get("function_arguments"),
        return_type=row.get("return_type"),
        body=row.get("function_body"),
        kind=decode_function_kind(row.get("function_kind")),
        volatility=_as_text(row.get("volatility")),
        is_strict=row.get("is_strict"),
        returns_set=row.get("returns_set"),
    )
