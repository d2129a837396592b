"""
SHOPSEED — Insertion Engine
Executes one parameterised INSERT per record and hands back the
generated primary key. Failures are wrapped in StoreWriteError with a
structured ErrorKind; nothing here retries.
"""

from collections.abc import Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError

from seeding.errors import StoreWriteError, classify


class InsertionEngine:
    """Thin write/read layer over one open SQLAlchemy connection."""

    def __init__(self, conn: Connection):
        self.conn = conn
        self._quote = conn.dialect.identifier_preparer.quote
        self._returning = bool(getattr(conn.dialect, "insert_returning", False))

    def _insert_sql(self, table: str, columns, returning: str | None) -> str:
        cols = ", ".join(self._quote(c) for c in columns)
        params = ", ".join(f":{c}" for c in columns)
        sql = f"INSERT INTO {self._quote(table)} ({cols}) VALUES ({params})"
        if returning and self._returning:
            sql += f" RETURNING {self._quote(returning)}"
        return sql

    def insert(self, table: str, fields: Mapping, returning: str | None = None):
        """Insert one row; return the value of *returning* (or None)."""
        if not fields:
            raise ValueError(f"no fields given for {table}")
        sql = self._insert_sql(table, list(fields), returning)
        try:
            result = self.conn.execute(text(sql), dict(fields))
            if not returning:
                return None
            if self._returning:
                return result.scalar_one()
            return result.lastrowid
        except DBAPIError as exc:
            raise StoreWriteError(table, classify(exc), exc) from exc

    def lookup(self, table: str, key_column: str, value_column: str) -> dict:
        """Read back one column written by an earlier phase, keyed by id."""
        rows = self.conn.execute(text(
            f"SELECT {self._quote(key_column)}, {self._quote(value_column)} "
            f"FROM {self._quote(table)}"
        )).fetchall()
        return {r[0]: r[1] for r in rows}

    def count(self, table: str) -> int:
        return self.conn.execute(
            text(f"SELECT COUNT(*) FROM {self._quote(table)}")
        ).scalar()
