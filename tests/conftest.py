"""
Pytest configuration and fixtures for pgstructure tests.

Environment variables are set before any pgstructure import so that
Settings() is instantiated with test values during collection.

The `catalog_connection` fixture builds a scripted stand-in for an asyncpg
connection: it answers the catalog queries from a plain dict describing the
database, records every command, and can be told to fail on a given query.
"""
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("SENTRY_DSN", "")  # Never report from tests
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from pgstructure.services import catalog  # noqa: E402


class FakeConnection:
    """Answers catalog queries from an in-memory description of one database."""

    def __init__(
        self,
        database: Dict[str, Any],
        failures: Optional[Dict[str, Exception]] = None,
        execute_error: Optional[Exception] = None,
    ):
        self.database = database
        self.failures = failures or {}
        self.execute_error = execute_error
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _schema(self, name: str) -> Dict[str, Any]:
        return self.database.get("schemas", {}).get(name, {})

    def _table(self, schema: str, table: str) -> Dict[str, Any]:
        return self._schema(schema).get("tables", {}).get(table, {})

    def _rows(self, query: str, args: Tuple[Any, ...]) -> List[Dict[str, Any]]:
        if query == catalog.CURRENT_DATABASE_QUERY:
            return [{
                "db_name": self.database["name"],
                "server_version_num": self.database.get("server_version_num", 160002),
            }]
        if query == catalog.SCHEMAS_QUERY:
            return [{"schema_name": name} for name in sorted(self.database.get("schemas", {}))]
        if query == catalog.TABLES_QUERY:
            tables = self._schema(args[0]).get("tables", {})
            return [{"table_name": name} for name in sorted(tables)]
        if query == catalog.VIEWS_QUERY:
            return self._schema(args[0]).get("views", [])
        if query in (catalog.FUNCTIONS_PROKIND_QUERY, catalog.FUNCTIONS_LEGACY_QUERY):
            return self._schema(args[0]).get("functions", [])

        by_table = {
            catalog.COLUMNS_QUERY: "columns",
            catalog.CONSTRAINTS_QUERY: "constraints",
            catalog.FOREIGN_KEYS_QUERY: "foreign_keys",
            catalog.TRIGGERS_QUERY: "triggers",
            catalog.INDEXES_QUERY: "indexes",
        }
        if query in by_table:
            return self._table(*args).get(by_table[query], [])

        raise AssertionError(f"Unexpected query: {query}")

    async def fetch(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        self.calls.append((query, args))
        if query in self.failures:
            raise self.failures[query]
        return [dict(row) for row in self._rows(query, args)]

    async def execute(self, query: str, *args: Any) -> str:
        self.calls.append((query, args))
        if self.execute_error is not None:
            raise self.execute_error
        return "SET"


USERS_TABLE = {
    "columns": [
        {
            "column_name": "id",
            "data_type": "integer",
            "is_nullable": "NO",
            "column_default": None,
            "character_maximum_length": None,
            "numeric_precision": 32,
            "numeric_scale": 0,
        },
        {
            "column_name": "name",
            "data_type": "text",
            "is_nullable": "YES",
            "column_default": "'anon'::text",
            "character_maximum_length": None,
            "numeric_precision": None,
            "numeric_scale": None,
        },
    ],
    "constraints": [
        {
            "constraint_name": "users_pkey",
            "constraint_type": "p",
            "definition": "PRIMARY KEY (id)",
        },
    ],
    "indexes": [
        {
            "index_name": "users_pkey",
            "index_definition": "CREATE UNIQUE INDEX users_pkey ON public.users USING btree (id)",
            "column_names": ["id"],
            "tablespace_name": None,
            "is_unique": True,
            "is_primary": True,
            "is_valid": True,
        },
    ],
}

ORDERS_TABLE = {
    "columns": [
        {"column_name": "id", "data_type": "integer", "is_nullable": "NO"},
        {"column_name": "user_id", "data_type": "integer", "is_nullable": "NO"},
        {"column_name": "tenant_id", "data_type": "integer", "is_nullable": "NO"},
    ],
    "constraints": [
        {
            "constraint_name": "orders_user_fkey",
            "constraint_type": "f",
            "definition": "FOREIGN KEY (user_id, tenant_id) REFERENCES accounts(id, tenant)",
        },
        {
            "constraint_name": "orders_excl",
            "constraint_type": "x",
            "definition": "EXCLUDE USING gist (id WITH =)",
        },
    ],
    "foreign_keys": [
        {
            "constraint_name": "orders_user_fkey",
            "source_schema": "public",
            "source_table": "orders",
            "source_columns": ["user_id", "tenant_id"],
            "target_schema": "billing",
            "target_table": "accounts",
            "target_columns": ["id", "tenant"],
            "update_action": "a",
            "delete_action": "c",
        },
    ],
    "triggers": [
        {
            "trigger_name": "orders_touch",
            "enabled": "O",
            "trigger_type": (1 << 0) | (1 << 1) | (1 << 4),
            "function_name": "touch_updated_at",
            "function_schema": "public",
            "definition": "CREATE TRIGGER orders_touch BEFORE UPDATE ON public.orders "
            "FOR EACH ROW EXECUTE FUNCTION touch_updated_at()",
        },
    ],
}

SHOP_DATABASE = {
    "name": "shop",
    "schemas": {
        "public": {
            "tables": {"users": USERS_TABLE, "orders": ORDERS_TABLE},
            "views": [
                {"view_name": "active_users", "view_definition": " SELECT users.id FROM users;"},
            ],
            "functions": [
                {
                    "function_name": "touch_updated_at",
                    "function_arguments": "",
                    "return_type": "trigger",
                    "function_body": "BEGIN NEW.updated_at := now(); RETURN NEW; END",
                    "function_kind": "f",
                    "volatility": "v",
                    "is_strict": False,
                    "returns_set": False,
                },
            ],
        },
        "billing": {
            "tables": {},
            "views": [],
            "functions": [],
        },
    },
}


@pytest.fixture
def catalog_connection() -> Callable[..., FakeConnection]:
    """Factory for scripted connections; defaults to the `shop` database."""

    def factory(database: Optional[Dict[str, Any]] = None, **kwargs: Any) -> FakeConnection:
        return FakeConnection(SHOP_DATABASE if database is None else database, **kwargs)

    return factory
