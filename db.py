# db.py
from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

import pymysql
from loguru import logger

from config import Settings, load_settings

Row = Dict[str, Any]


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a statement that returns no rows."""
    rowcount: int
    lastrowid: Optional[int] = None


class Database(Protocol):
    """
    The three primitives the product store needs from a database handle.
    SQL uses `%s` positional placeholders.
    """

    def query_row(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        ...

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        ...

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        ...


def get_connection(settings: Optional[Settings] = None):
    settings = settings or load_settings()
    return pymysql.connect(
        host=settings.database_host,
        port=settings.database_port,
        user=settings.database_user,
        password=settings.database_password,
        database=settings.database_name,
        charset="utf8mb4",
        cursorclass=pymysql.cursors.DictCursor,
        connect_timeout=settings.database_timeout,
        read_timeout=settings.database_timeout,
        write_timeout=settings.database_timeout,
        # DATETIME columns hold naive UTC, CURRENT_TIMESTAMP included
        init_command="SET time_zone = '+00:00'",
    )


class MySQLDatabase:
    """
    PyMySQL-backed handle. Every call opens its own connection and closes it
    when done, so nothing is held between requests.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def query_row(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        with get_connection(self._settings) as conn, conn.cursor() as cur:
            cur.execute(sql, tuple(params))
            return cur.fetchone()

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        with get_connection(self._settings) as conn, conn.cursor() as cur:
            cur.execute(sql, tuple(params))
            return list(cur.fetchall())

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        with get_connection(self._settings) as conn:
            with conn.cursor() as cur:
                cur.execute(sql, tuple(params))
                result = ExecResult(rowcount=cur.rowcount, lastrowid=cur.lastrowid)
            conn.commit()
            return result


SQLITE_SCHEMA = """
    CREATE TABLE IF NOT EXISTS products (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        quantity INTEGER NOT NULL,
        unit TEXT NOT NULL,
        price REAL NOT NULL,
        expiry_date TIMESTAMP NULL,
        created_at TIMESTAMP NOT NULL,
        updated_at TIMESTAMP NOT NULL
    )
"""


def _sqlite_param(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class SQLiteDatabase:
    """
    SQLite handle for local development and tests. One shared connection,
    serialized with a lock; `%s` placeholders are rewritten to `?`.
    """

    def __init__(self, path: str = ":memory:"):
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

    @staticmethod
    def _prepare(sql: str, params: Sequence[Any]):
        return sql.replace("%s", "?"), tuple(_sqlite_param(p) for p in params)

    def init_schema(self) -> None:
        with self._lock:
            self._conn.execute(SQLITE_SCHEMA)
            self._conn.commit()

    def query_row(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        sql, params = self._prepare(sql, params)
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return dict(row) if row is not None else None

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        sql, params = self._prepare(sql, params)
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecResult:
        sql, params = self._prepare(sql, params)
        with self._lock:
            try:
                cur = self._conn.execute(sql, params)
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise
        return ExecResult(rowcount=cur.rowcount, lastrowid=cur.lastrowid)

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def create_database(settings: Settings) -> Database:
    """Build the handle selected by DATABASE_BACKEND."""
    if settings.database_backend == "sqlite":
        logger.info("Using SQLite database at {}", settings.sqlite_path)
        db = SQLiteDatabase(settings.sqlite_path)
        db.init_schema()
        return db

    logger.info(
        "Using MySQL database {} at {}:{}",
        settings.database_name, settings.database_host, settings.database_port,
    )
    return MySQLDatabase(settings)
