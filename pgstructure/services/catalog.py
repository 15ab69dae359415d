"""
Catalog queries used to walk a PostgreSQL database's structure.

Each accessor issues exactly one read-only command and returns the raw rows.
Parent identifiers are always passed as bind parameters, never interpolated.
System schemas (``pg_*`` and ``information_schema``), internal triggers and
functions written in non-inspectable languages are filtered in SQL, so an
accessor returns an empty list when the parent has no children of its kind.
"""

import logging
from typing import Any, List, Mapping

from pgstructure.adapters.base import CatalogConnection
from pgstructure.models.structure import CatalogCapabilities

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

CURRENT_DATABASE_QUERY = """
SELECT
    current_database() AS db_name,
    current_setting('server_version_num')::int AS server_version_num
"""

SEARCH_PATH_COMMAND = 'SET search_path TO "$user", public'

SCHEMAS_QUERY = r"""
SELECT nspname AS schema_name
FROM pg_namespace
WHERE nspname NOT LIKE 'pg\_%'
AND nspname <> 'information_schema'
ORDER BY nspname
"""

TABLES_QUERY = """
SELECT table_name
FROM information_schema.tables
WHERE table_schema = $1
AND table_type = 'BASE TABLE'
ORDER BY table_name
"""

COLUMNS_QUERY = """
SELECT
    column_name,
    data_type,
    is_nullable,
    column_default,
    character_maximum_length,
    numeric_precision,
    numeric_scale
FROM information_schema.columns
WHERE table_schema = $1
AND table_name = $2
ORDER BY ordinal_position
"""

CONSTRAINTS_QUERY = """
SELECT
    con.conname AS constraint_name,
    con.contype::text AS constraint_type,
    pg_get_constraintdef(con.oid) AS definition
FROM pg_constraint con
JOIN pg_class rel ON rel.oid = con.conrelid
JOIN pg_namespace nsp ON nsp.oid = rel.relnamespace
WHERE nsp.nspname = $1
AND rel.relname = $2
ORDER BY con.conname
"""

# Key columns are unnested WITH ORDINALITY so source_columns[i] and
# target_columns[i] stay paired the way conkey/confkey declare them.
FOREIGN_KEYS_QUERY = """
SELECT
    con.conname AS constraint_name,
    ns1.nspname AS source_schema,
    cl1.relname AS source_table,
    ARRAY(
        SELECT a.attname
        FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
        ORDER BY k.ord
    ) AS source_columns,
    ns2.nspname AS target_schema,
    cl2.relname AS target_table,
    ARRAY(
        SELECT a.attname
        FROM unnest(con.confkey) WITH ORDINALITY AS k(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = con.confrelid AND a.attnum = k.attnum
        ORDER BY k.ord
    ) AS target_columns,
    con.confupdtype::text AS update_action,
    con.confdeltype::text AS delete_action
FROM pg_constraint con
JOIN pg_class cl1 ON con.conrelid = cl1.oid
JOIN pg_namespace ns1 ON cl1.relnamespace = ns1.oid
JOIN pg_class cl2 ON con.confrelid = cl2.oid
JOIN pg_namespace ns2 ON cl2.relnamespace = ns2.oid
WHERE ns1.nspname = $1
AND cl1.relname = $2
AND con.contype = 'f'
ORDER BY con.conname
"""

TRIGGERS_QUERY = """
SELECT
    trg.tgname AS trigger_name,
    trg.tgenabled::text AS enabled,
    trg.tgtype::int AS trigger_type,
    p.proname AS function_name,
    ns.nspname AS function_schema,
    pg_get_triggerdef(trg.oid) AS definition
FROM pg_trigger trg
JOIN pg_class tbl ON trg.tgrelid = tbl.oid
JOIN pg_namespace nsp ON tbl.relnamespace = nsp.oid
JOIN pg_proc p ON trg.tgfoid = p.oid
JOIN pg_namespace ns ON p.pronamespace = ns.oid
WHERE NOT trg.tgisinternal
AND nsp.nspname = $1
AND tbl.relname = $2
ORDER BY trg.tgname
"""

VIEWS_QUERY = """
SELECT
    table_name AS view_name,
    view_definition
FROM information_schema.views
WHERE table_schema = $1
ORDER BY table_name
"""

FUNCTIONS_QUERY = """
SELECT
    p.proname AS function_name,
    pg_get_function_arguments(p.oid) AS function_arguments,
    t.typname AS return_type,
    p.prosrc AS function_body,
    {kind_expression} AS function_kind,
    p.provolatile::text AS volatility,
    p.proisstrict AS is_strict,
    p.proretset AS returns_set
FROM pg_proc p
JOIN pg_namespace n ON p.pronamespace = n.oid
JOIN pg_type t ON p.prorettype = t.oid
JOIN pg_language l ON p.prolang = l.oid
WHERE n.nspname = $1
AND l.lanname NOT IN ('internal', 'c')
ORDER BY p.proname, function_arguments
"""

# pg_proc.prokind replaced proisagg/proiswindow in PostgreSQL 11
PROKIND_EXPRESSION = "p.prokind::text"
LEGACY_KIND_EXPRESSION = (
    "CASE WHEN p.proisagg THEN 'a' WHEN p.proiswindow THEN 'w' ELSE 'f' END"
)

FUNCTIONS_PROKIND_QUERY = FUNCTIONS_QUERY.format(kind_expression=PROKIND_EXPRESSION)
FUNCTIONS_LEGACY_QUERY = FUNCTIONS_QUERY.format(kind_expression=LEGACY_KIND_EXPRESSION)

INDEXES_QUERY = """
SELECT
    ci.relname AS index_name,
    pg_get_indexdef(ci.oid) AS index_definition,
    ARRAY(
        SELECT a.attname
        FROM unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord)
        JOIN pg_attribute a ON a.attrelid = ix.indrelid AND a.attnum = k.attnum
        ORDER BY k.ord
    ) AS column_names,
    ts.spcname AS tablespace_name,
    ix.indisunique AS is_unique,
    ix.indisprimary AS is_primary,
    ix.indisvalid AS is_valid
FROM pg_index ix
JOIN pg_class ci ON ci.oid = ix.indexrelid
JOIN pg_class ct ON ct.oid = ix.indrelid
JOIN pg_namespace n ON n.oid = ct.relnamespace
LEFT JOIN pg_tablespace ts ON ts.oid = ci.reltablespace
WHERE n.nspname = $1
AND ct.relname = $2
ORDER BY ci.relname
"""


async def _fetch(conn: CatalogConnection, query: str, *args: Any) -> List[Row]:
    rows = await conn.fetch(query, *args)
    return list(rows) if rows else []


async def get_current_database(conn: CatalogConnection) -> Row:
    """Return the connected database's name and server version number."""
    rows = await _fetch(conn, CURRENT_DATABASE_QUERY)
    if not rows:
        raise LookupError("current_database() returned no rows")
    return rows[0]


async def set_search_path(conn: CatalogConnection) -> None:
    """Reset the session search path to the server default."""
    await conn.execute(SEARCH_PATH_COMMAND)


async def list_schemas(conn: CatalogConnection) -> List[Row]:
    """Non-system schemas of the current database, by name."""
    return await _fetch(conn, SCHEMAS_QUERY)


async def list_tables(conn: CatalogConnection, schema_name: str) -> List[Row]:
    """Base tables of a schema, by name."""
    return await _fetch(conn, TABLES_QUERY, schema_name)


async def list_views(conn: CatalogConnection, schema_name: str) -> List[Row]:
    return await _fetch(conn, VIEWS_QUERY, schema_name)


async def list_functions(
    conn: CatalogConnection,
    schema_name: str,
    capabilities: CatalogCapabilities = CatalogCapabilities(),
) -> List[Row]:
    """
    Functions of a schema whose body text is inspectable.

    Functions implemented in the ``internal`` and ``c`` languages are skipped.
    On servers without ``pg_proc.prokind`` the kind code is derived from the
    legacy ``proisagg``/``proiswindow`` flags.
    """
    if capabilities.has_prokind:
        query = FUNCTIONS_PROKIND_QUERY
    else:
        logger.debug("pg_proc.prokind unavailable, deriving function kind from legacy flags")
        query = FUNCTIONS_LEGACY_QUERY
    return await _fetch(conn, query, schema_name)


async def list_columns(
    conn: CatalogConnection, schema_name: str, table_name: str
) -> List[Row]:
    """Columns of a table in declaration order."""
    return await _fetch(conn, COLUMNS_QUERY, schema_name, table_name)


async def list_constraints(
    conn: CatalogConnection, schema_name: str, table_name: str
) -> List[Row]:
    return await _fetch(conn, CONSTRAINTS_QUERY, schema_name, table_name)


async def list_foreign_keys(
    conn: CatalogConnection, schema_name: str, table_name: str
) -> List[Row]:
    """Foreign keys declared on a table (the table is always the source)."""
    return await _fetch(conn, FOREIGN_KEYS_QUERY, schema_name, table_name)


async def list_triggers(
    conn: CatalogConnection, schema_name: str, table_name: str
) -> List[Row]:
    """User-defined triggers of a table."""
    return await _fetch(conn, TRIGGERS_QUERY, schema_name, table_name)


async def list_indexes(
    conn: CatalogConnection, schema_name: str, table_name: str
) -> List[Row]:
    """Indexes of a table with key columns in declared order."""
    return await _fetch(conn, INDEXES_QUERY, schema_name, table_name)
