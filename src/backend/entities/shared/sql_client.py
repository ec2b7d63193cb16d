"""
Shared Postgres client for catalog reads and query execution.

This module provides a reusable async client for reading schema metadata
and executing read-only SQL queries against Postgres over ODBC.
"""

import logging
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

import aioodbc
from config.settings import Settings
from entities.query_validator import validate_query
from models import ColumnInfo, TableInfo

logger = logging.getLogger(__name__)

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = ? AND table_type = 'BASE TABLE' "
    "AND table_name NOT LIKE 'pg\\_%' "
    "ORDER BY table_name"
)

_COLUMNS_SQL = (
    "SELECT table_name, column_name, data_type, is_nullable "
    "FROM information_schema.columns "
    "WHERE table_schema = ? "
    "ORDER BY table_name, ordinal_position"
)

_PRIMARY_KEYS_SQL = (
    "SELECT kcu.table_name, kcu.column_name "
    "FROM information_schema.table_constraints tc "
    "JOIN information_schema.key_column_usage kcu "
    "ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema "
    "WHERE tc.constraint_type = 'PRIMARY KEY' AND tc.table_schema = ? "
    "ORDER BY kcu.table_name, kcu.ordinal_position"
)

# Postgres type name -> simplified type shown to the model
_TYPE_MAP = {
    "integer": "integer",
    "bigint": "integer",
    "smallint": "integer",
    "numeric": "numeric",
    "decimal": "numeric",
    "real": "numeric",
    "double precision": "numeric",
    "text": "text",
    "varchar": "text",
    "character varying": "text",
    "char": "text",
    "character": "text",
    "boolean": "boolean",
    "timestamp": "timestamp",
    "timestamp with time zone": "timestamp",
    "timestamp without time zone": "timestamp",
    "date": "date",
    "time": "time",
    "time without time zone": "time",
    "uuid": "uuid",
    "json": "json",
    "jsonb": "json",
}


def map_postgres_type(pg_type: str) -> str:
    """Collapse a Postgres data type to the simplified name shown to the model.

    Unknown types pass through unchanged.
    """
    return _TYPE_MAP.get(pg_type.strip().lower(), pg_type)


def build_table_infos(
    table_rows: list[tuple],
    column_rows: list[tuple],
    primary_key_rows: list[tuple],
    schema: str = "public",
) -> list[TableInfo]:
    """Assemble ``TableInfo`` objects from raw catalog rows.

    Args:
        table_rows: ``(table_name,)`` rows.
        column_rows: ``(table_name, column_name, data_type, is_nullable)`` rows.
        primary_key_rows: ``(table_name, column_name)`` rows.
        schema: Schema the rows were read from.

    Returns:
        One ``TableInfo`` per table, in ``table_rows`` order.
    """
    primary_keys: dict[str, list[str]] = {}
    for table_name, column_name in primary_key_rows:
        primary_keys.setdefault(table_name, []).append(column_name)

    columns: dict[str, list[ColumnInfo]] = {}
    for table_name, column_name, data_type, is_nullable in column_rows:
        columns.setdefault(table_name, []).append(
            ColumnInfo(
                name=column_name,
                type=map_postgres_type(data_type or ""),
                nullable=str(is_nullable).upper() == "YES",
                is_primary_key=column_name in primary_keys.get(table_name, []),
            )
        )

    return [
        TableInfo(
            name=row[0],
            schema_name=schema,
            columns=columns.get(row[0], []),
            primary_key=primary_keys.get(row[0], []),
        )
        for row in table_rows
    ]


def _json_safe(value: Any) -> Any:  # noqa: ANN401
    """Convert a driver value to something ``json.dumps`` accepts."""
    if value is None or isinstance(value, (int, float, str, bool)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class PostgresClient:
    """
    Async context manager for Postgres operations.

    Supports reading the schema catalog and executing read-only SQL
    queries.

    Usage:
        async with PostgresClient(settings) as client:
            result = await client.execute_query("SELECT * FROM users LIMIT 10")
    """

    def __init__(self, settings: Settings, read_only: bool = True):
        """
        Initialize the Postgres client.

        Args:
            settings: Application settings carrying the connection details.
            read_only: If True, only read-only SELECT queries are allowed.
        """
        self.server = settings.database_server
        self.port = settings.database_port
        self.database = settings.database_name
        self.user = settings.database_user
        self.password = settings.database_password
        self.driver = settings.database_odbc_driver
        self.schema = settings.database_schema
        self.read_only = read_only
        self._connection: aioodbc.Connection | None = None

    async def __aenter__(self):
        """Establish the database connection."""
        if not self.server:
            raise ValueError("DATABASE_SERVER environment variable is required")

        connection_string = (
            f"DRIVER={{{self.driver}}};"
            f"SERVER={self.server};"
            f"PORT={self.port};"
            f"DATABASE={self.database};"
            f"UID={self.user};"
            f"PWD={self.password};"
        )

        self._connection = await aioodbc.connect(dsn=connection_string, autocommit=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()

    async def _fetch(self, query: str, params: list[Any] | None = None) -> list[tuple]:
        if not self._connection:
            raise RuntimeError("Database connection not established. Use 'async with' context manager.")
        async with self._connection.cursor() as cursor:
            await cursor.execute(query, params or [])
            return [tuple(row) for row in await cursor.fetchall()]

    async def fetch_tables(self) -> list[TableInfo]:
        """Read tables, columns, and primary keys for the configured schema."""
        table_rows = await self._fetch(_TABLES_SQL, [self.schema])
        column_rows = await self._fetch(_COLUMNS_SQL, [self.schema])
        primary_key_rows = await self._fetch(_PRIMARY_KEYS_SQL, [self.schema])

        tables = build_table_infos(table_rows, column_rows, primary_key_rows, self.schema)
        logger.info("Catalog read: %d tables in schema '%s'", len(tables), self.schema)
        return tables

    async def fetch_sample_rows(self, table: str, n: int) -> list[dict[str, Any]]:
        """Return up to ``n`` rows from ``table`` in the configured schema.

        Raises:
            ValueError: If ``table`` is not a plain identifier.
        """
        if not _IDENTIFIER_PATTERN.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        query = f'SELECT * FROM "{self.schema}"."{table}" LIMIT ?'  # noqa: S608
        result = await self.execute_query(query, [n], validate=False)
        if not result["success"]:
            raise RuntimeError(result["error"])
        return result["rows"]

    async def execute_query(
        self, query: str, params: list[Any] | None = None, *, validate: bool = True
    ) -> dict[str, Any]:
        """
        Execute a SQL query and return results.

        Args:
            query: The SQL query to execute
            params: Bind-parameter values for ``?`` placeholders
            validate: Run the read-only validator first (when ``read_only``)

        Returns:
            A dictionary containing:
            - success: Whether the query executed successfully
            - columns: List of column names in the result
            - rows: List of dictionaries, one per row
            - row_count: Number of rows returned
            - error: Error message if the query failed
        """
        logger.info("Executing SQL query: %s", query[:200])

        if self.read_only and validate:
            validation = validate_query(query)
            if not validation.is_valid:
                return {
                    "success": False,
                    "error": "; ".join(validation.violations),
                    "columns": [],
                    "rows": [],
                    "row_count": 0,
                }

        try:
            if not self._connection:
                return {
                    "success": False,
                    "error": "Database connection not established. Use 'async with' context manager.",
                    "columns": [],
                    "rows": [],
                    "row_count": 0,
                }

            async with self._connection.cursor() as cursor:
                await cursor.execute(query, params or [])

                columns = [column[0] for column in cursor.description] if cursor.description else []
                raw_rows = await cursor.fetchall()

                rows = [
                    {col: _json_safe(row[i]) for i, col in enumerate(columns)} for row in raw_rows
                ]

                logger.info("Query executed successfully. Returned %d rows.", len(rows))

                return {
                    "success": True,
                    "columns": columns,
                    "rows": rows,
                    "row_count": len(rows),
                    "error": None,
                }

        except Exception as e:
            logger.error("SQL execution error: %s", e)
            return {"success": False, "error": str(e), "columns": [], "rows": [], "row_count": 0}
