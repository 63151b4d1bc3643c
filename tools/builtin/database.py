"""
Database Tools
--------------
sqlite (query / execute / tables / schema), migrate, seed, backup and
vector_db (stub).

Each call opens its own connection and closes it before returning, so
the tool holds no state between calls.
"""

from contextlib import closing
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging
import sqlite3

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import (
    array_param,
    bool_param,
    enum_param,
    integer_param,
    object_param,
    object_schema,
    string_param,
)

logger = logging.getLogger("toolbridge.tools.database")

SQLITE_ACTIONS = ["query", "execute", "tables", "schema"]


def _connect(path: str, timeout: float) -> sqlite3.Connection:
    conn = sqlite3.connect(path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    return conn


def _rows(cursor: sqlite3.Cursor) -> List[Dict[str, Any]]:
    rows = []
    for row in cursor.fetchall():
        rows.append({
            key: value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
            for key, value in zip(row.keys(), row)
        })
    return rows


def list_tables(conn: sqlite3.Connection) -> List[str]:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    )
    return [row[0] for row in cursor.fetchall()]


def table_schema(conn: sqlite3.Connection, table: str) -> Optional[str]:
    row = conn.execute(
        "SELECT sql FROM sqlite_master WHERE type='table' AND name=?", (table,)
    ).fetchone()
    return row[0] if row else None


def _exec_sqlite(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    database = args.get_str("database")
    action = args.get_choice("action", SQLITE_ACTIONS)
    sql = args.get_str("sql", "")
    params = args.get_list("params", [])

    if action in ("query", "execute") and not sql:
        return Result.from_error(f"sql is required for {action} action")

    try:
        with closing(_connect(database, context.timeout_or(5.0))) as conn:
            if action == "query":
                rows = _rows(conn.execute(sql, params))
                return Result.ok_with_meta(rows, {"database": database, "rows": len(rows)})

            if action == "execute":
                with conn:
                    cursor = conn.execute(sql, params)
                return Result.ok_with_meta(
                    {"rows_affected": cursor.rowcount, "last_insert_id": cursor.lastrowid},
                    {"database": database},
                )

            if action == "tables":
                tables = list_tables(conn)
                return Result.ok_with_meta(tables, {"database": database, "count": len(tables)})

            # schema: one table when sql names it, otherwise all of them
            if sql:
                schema = table_schema(conn, sql)
                if schema is None:
                    raise LookupError(f"table not found: {sql}")
                return Result.ok(schema)
            return Result.ok({table: table_schema(conn, table) for table in list_tables(conn)})

    except sqlite3.Error as e:
        return Result.from_error(f"sqlite error: {e}")


# =============================================================================
# migrate / seed / backup
# =============================================================================

MIGRATIONS_TABLE = "_migrations"


def quote_identifier(name: str) -> str:
    if not name or "\x00" in name:
        raise ValueError(f"invalid identifier: {name!r}")
    return '"' + name.replace('"', '""') + '"'


def _applied_migrations(conn: sqlite3.Connection) -> List[str]:
    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {MIGRATIONS_TABLE} ("
        "id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "migration TEXT NOT NULL UNIQUE, "
        "applied_at DATETIME DEFAULT CURRENT_TIMESTAMP)"
    )
    conn.commit()
    return [row[0] for row in conn.execute(f"SELECT migration FROM {MIGRATIONS_TABLE} ORDER BY id")]


def _exec_migrate(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    """
    Apply SQL migrations in order, recording each in _migrations.

    Every migration runs in its own transaction together with its
    bookkeeping row, so a failure leaves the database at the last
    migration that succeeded. "down" only forgets the records; the
    schema changes themselves are not reversed.
    """
    args = Arguments(raw)
    database = args.get_str("database")
    migrations = args.get_list("migrations")
    direction = args.get_choice("direction", ["up", "down"], "up")

    if not all(isinstance(m, str) and m.strip() for m in migrations):
        return Result.from_error("migrations must be non-empty SQL strings")

    applied = 0
    try:
        with closing(_connect(database, context.timeout_or(5.0))) as conn:
            done = set(_applied_migrations(conn))

            if direction == "up":
                for migration in migrations:
                    if migration in done:
                        continue
                    context.check()
                    logger.info(f"Applying migration {applied + 1} to {database}")
                    try:
                        with conn:
                            conn.execute("BEGIN")
                            conn.execute(migration)
                            conn.execute(
                                f"INSERT INTO {MIGRATIONS_TABLE} (migration) VALUES (?)", (migration,)
                            )
                    except sqlite3.Error as e:
                        return Result(
                            success=False,
                            error=f"migration failed: {e}",
                            metadata={"applied": applied, "error_category": "TOOL_FAILURE"},
                        )
                    done.add(migration)
                    applied += 1
            else:
                with conn:
                    for migration in reversed(migrations):
                        if migration in done:
                            conn.execute(
                                f"DELETE FROM {MIGRATIONS_TABLE} WHERE migration = ?", (migration,)
                            )
                            applied += 1

    except sqlite3.Error as e:
        return Result.from_error(f"sqlite error: {e}")

    return Result.ok_with_meta(
        f"Applied {applied} migrations",
        {"database": database, "direction": direction, "applied": applied},
    )


def _exec_seed(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    database = args.get_str("database")
    table = args.get_str("table")
    rows = args.get_list("rows")
    truncate = args.get_bool("truncate", False)

    if not all(isinstance(row, dict) and row for row in rows):
        return Result.from_error("rows must be non-empty objects")

    try:
        quoted_table = quote_identifier(table)
        with closing(_connect(database, context.timeout_or(5.0))) as conn:
            with conn:
                if truncate:
                    conn.execute(f"DELETE FROM {quoted_table}")
                for row in rows:
                    columns = ", ".join(quote_identifier(str(c)) for c in row)
                    placeholders = ", ".join("?" for _ in row)
                    conn.execute(
                        f"INSERT INTO {quoted_table} ({columns}) VALUES ({placeholders})",
                        list(row.values()),
                    )
    except ValueError as e:
        return Result.from_error(e)
    except sqlite3.Error as e:
        return Result.from_error(f"insert failed: {e}")

    return Result.ok_with_meta(
        f"Inserted {len(rows)} rows",
        {"database": database, "table": table, "inserted": len(rows), "truncated": truncate},
    )


def _exec_backup(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    source = args.get_str("source")
    dest = args.get_str("dest")
    action = args.get_choice("action", ["backup", "restore"])

    if action == "restore":
        source, dest = dest, source

    if not Path(source).is_file():
        raise FileNotFoundError(f"Database not found: {source}")
    Path(dest).parent.mkdir(parents=True, exist_ok=True)

    timeout = context.timeout_or(5.0)
    try:
        with closing(_connect(source, timeout)) as src, closing(_connect(dest, timeout)) as dst:
            src.backup(dst)
    except sqlite3.Error as e:
        return Result.from_error(f"{action} failed: {e}")

    return Result.ok_with_meta(
        f"Database {action} successful",
        {"source": source, "dest": dest, "action": action},
    )


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="sqlite",
            description="Execute SQLite queries. Supports SELECT, INSERT, UPDATE, DELETE and schema inspection.",
            category=Category.DATABASE,
            parameters=object_schema({
                "database": string_param("Database file path (use :memory: for in-memory)"),
                "action": enum_param("Action to perform", SQLITE_ACTIONS),
                "sql": string_param("SQL statement to execute (or table name for schema)"),
                "params": array_param("Positional query parameters"),
            }, required=["database", "action"]),
            executor=_exec_sqlite,
        ),
        Tool(
            name="migrate",
            description="Apply SQL schema migrations once each, tracked in a _migrations table",
            category=Category.DATABASE,
            parameters=object_schema({
                "database": string_param("Database file path"),
                "migrations": array_param("SQL statements, one per migration, in order", string_param("SQL")),
                "direction": enum_param("Migration direction", ["up", "down"], default="up"),
            }, required=["database", "migrations"]),
            executor=_exec_migrate,
        ),
        Tool(
            name="seed",
            description="Insert rows into a table, optionally emptying it first",
            category=Category.DATABASE,
            parameters=object_schema({
                "database": string_param("Database file path"),
                "table": string_param("Table to seed"),
                "rows": array_param("Row objects to insert", object_param("Row")),
                "truncate": bool_param("Delete existing rows before seeding", default=False),
            }, required=["database", "table", "rows"]),
            executor=_exec_seed,
        ),
        Tool(
            name="backup",
            description="Back up a SQLite database to a file, or restore it from one",
            category=Category.DATABASE,
            parameters=object_schema({
                "source": string_param("Database path"),
                "dest": string_param("Backup file path"),
                "action": enum_param("Action", ["backup", "restore"]),
            }, required=["source", "dest", "action"]),
            executor=_exec_backup,
        ),
        stub_tool(
            name="vector_db",
            description="Store and search embedding vectors (requires a vector database)",
            category=Category.DATABASE,
            parameters=object_schema({
                "action": enum_param("Action", ["insert", "search", "delete"]),
                "embedding": array_param("Embedding vector"),
                "metadata": object_param("Metadata to attach"),
                "query": string_param("Query text to search for"),
                "limit": integer_param("Number of results to return", minimum=1),
            }, required=["action"]),
            message="Vector database operations require a vector store (Pinecone, Weaviate, Chroma) to be configured",
        ),
    ]
