from __future__ import annotations

import json
import os
import re
import sqlite3
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


def _validate_identifier(name: str) -> str:
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ValueError(f"invalid SQL identifier: {name}")
    return name


def _quote(name: str) -> str:
    return f'"{_validate_identifier(name)}"'


@dataclass(frozen=True)
class TableSchema:
    name: str
    primary_key: str = "id"
    auto_increment: bool = True
    indexes: tuple[str, ...] = ()


SCHEMA: dict[str, TableSchema] = {
    "jobs": TableSchema("jobs", indexes=("slug", "status", "order", "title")),
    "candidates": TableSchema("candidates", indexes=("email", "stage", "jobId", "name")),
    "timelines": TableSchema("timelines", indexes=("candidateId", "ts", "stage")),
    "assessments": TableSchema("assessments", primary_key="jobId", auto_increment=False),
    "submissions": TableSchema("submissions", indexes=("jobId", "candidateId")),
}


def _sort_key(value: Any) -> tuple[int, Any]:
    # None sorts first, matching SQLite's NULL ordering.
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))


class LocalStore:
    """Table-per-entity persistence used as the fallback for every service."""

    def __init__(self, schema: Mapping[str, TableSchema] | None = None) -> None:
        self.schema = dict(schema or SCHEMA)

    def _table(self, table: str) -> TableSchema:
        meta = self.schema.get(table)
        if meta is None:
            raise KeyError(f"unknown table: {table}")
        return meta

    def all(self, table: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    def get(self, table: str, key: Any) -> dict[str, Any] | None:
        raise NotImplementedError

    def add(self, table: str, row: dict[str, Any]) -> Any:
        raise NotImplementedError

    def put(self, table: str, row: dict[str, Any]) -> Any:
        raise NotImplementedError

    def update(self, table: str, key: Any, changes: dict[str, Any]) -> int:
        raise NotImplementedError

    def clear(self, table: str | None = None) -> None:
        raise NotImplementedError

    def count(self, table: str) -> int:
        return len(self.all(table))

    def primary_keys(self, table: str) -> list[Any]:
        pk = self._table(table).primary_key
        return [row[pk] for row in self.all(table)]

    def where(self, table: str, field: str, value: Any) -> list[dict[str, Any]]:
        return [row for row in self.all(table) if row.get(field) == value]

    def order_by(self, table: str, field: str) -> list[dict[str, Any]]:
        return sorted(self.all(table), key=lambda row: _sort_key(row.get(field)))

    def bulk_add(self, table: str, rows: list[dict[str, Any]]) -> list[Any]:
        return [self.add(table, row) for row in rows]


class InMemoryLocalStore(LocalStore):
    def __init__(self, schema: Mapping[str, TableSchema] | None = None) -> None:
        super().__init__(schema)
        self._lock = threading.RLock()
        self._rows: dict[str, dict[Any, dict[str, Any]]] = {name: {} for name in self.schema}
        self._sequences: dict[str, int] = {name: 0 for name in self.schema}

    def all(self, table: str) -> list[dict[str, Any]]:
        self._table(table)
        with self._lock:
            rows = self._rows[table]
            return [dict(rows[key]) for key in sorted(rows, key=_sort_key)]

    def get(self, table: str, key: Any) -> dict[str, Any] | None:
        self._table(table)
        with self._lock:
            row = self._rows[table].get(key)
            return dict(row) if row is not None else None

    def add(self, table: str, row: dict[str, Any]) -> Any:
        meta = self._table(table)
        with self._lock:
            payload = dict(row)
            key = payload.get(meta.primary_key)
            if key is None:
                if not meta.auto_increment:
                    raise ValueError(f"{table} rows require {meta.primary_key}")
                self._sequences[table] += 1
                key = self._sequences[table]
                payload[meta.primary_key] = key
            if key in self._rows[table]:
                raise ValueError(f"duplicate key {key!r} in {table}")
            if isinstance(key, int):
                self._sequences[table] = max(self._sequences[table], key)
            self._rows[table][key] = payload
            return key

    def put(self, table: str, row: dict[str, Any]) -> Any:
        meta = self._table(table)
        with self._lock:
            if row.get(meta.primary_key) is None:
                return self.add(table, row)
            key = row[meta.primary_key]
            self._rows[table][key] = dict(row)
            if isinstance(key, int):
                self._sequences[table] = max(self._sequences[table], key)
            return key

    def update(self, table: str, key: Any, changes: dict[str, Any]) -> int:
        meta = self._table(table)
        with self._lock:
            row = self._rows[table].get(key)
            if row is None:
                return 0
            row.update({k: v for k, v in changes.items() if k != meta.primary_key})
            return 1

    def clear(self, table: str | None = None) -> None:
        with self._lock:
            names = [table] if table is not None else list(self.schema)
            for name in names:
                self._table(name)
                self._rows[name] = {}
                self._sequences[name] = 0


class SqliteLocalStore(LocalStore):
    """SQLite-backed local store; indexed fields get real columns, the row lives in ``payload``."""

    def __init__(self, db_path: str | Path, schema: Mapping[str, TableSchema] | None = None) -> None:
        super().__init__(schema)
        self._lock = threading.RLock()
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            for meta in self.schema.values():
                pk_type = "INTEGER PRIMARY KEY AUTOINCREMENT" if meta.auto_increment else "INTEGER PRIMARY KEY"
                index_columns = "".join(f", {_quote(col)}" for col in meta.indexes)
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {_quote(meta.name)} (
                        {_quote(meta.primary_key)} {pk_type}{index_columns},
                        payload TEXT NOT NULL
                    )
                    """
                )
                for col in meta.indexes:
                    conn.execute(
                        f"""
                        CREATE INDEX IF NOT EXISTS {_quote(f"idx_{meta.name}_{col}")}
                        ON {_quote(meta.name)}({_quote(col)})
                        """
                    )
            conn.commit()

    @staticmethod
    def _column_value(value: Any) -> Any:
        if value is None or isinstance(value, (str, int, float)):
            return value
        return json.dumps(value, ensure_ascii=True, sort_keys=True)

    @staticmethod
    def _decode(row: sqlite3.Row) -> dict[str, Any]:
        payload = json.loads(row["payload"])
        return payload if isinstance(payload, dict) else {}

    def _write(self, conn: sqlite3.Connection, meta: TableSchema, payload: dict[str, Any], *, replace: bool) -> Any:
        columns = [meta.primary_key, *meta.indexes, "payload"]
        key = payload.get(meta.primary_key)
        values = [key, *(self._column_value(payload.get(col)) for col in meta.indexes), None]
        verb = "INSERT OR REPLACE" if replace else "INSERT"
        placeholders = ", ".join("?" for _ in columns)
        column_sql = ", ".join(_quote(col) for col in columns)
        if key is None:
            # Let SQLite assign the key, then store it inside the payload too.
            cursor = conn.execute(
                f"{verb} INTO {_quote(meta.name)} ({column_sql}) VALUES ({placeholders})",
                (*values[:-1], "{}"),
            )
            key = cursor.lastrowid
            payload[meta.primary_key] = key
            conn.execute(
                f"UPDATE {_quote(meta.name)} SET payload = ? WHERE {_quote(meta.primary_key)} = ?",
                (json.dumps(payload, ensure_ascii=True, sort_keys=True), key),
            )
            return key
        values[-1] = json.dumps(payload, ensure_ascii=True, sort_keys=True)
        conn.execute(f"{verb} INTO {_quote(meta.name)} ({column_sql}) VALUES ({placeholders})", values)
        return key

    def all(self, table: str) -> list[dict[str, Any]]:
        meta = self._table(table)
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"SELECT payload FROM {_quote(meta.name)} ORDER BY {_quote(meta.primary_key)} ASC"
            ).fetchall()
        return [self._decode(row) for row in rows]

    def get(self, table: str, key: Any) -> dict[str, Any] | None:
        meta = self._table(table)
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT payload FROM {_quote(meta.name)} WHERE {_quote(meta.primary_key)} = ? LIMIT 1",
                (key,),
            ).fetchone()
        return self._decode(row) if row is not None else None

    def add(self, table: str, row: dict[str, Any]) -> Any:
        meta = self._table(table)
        payload = dict(row)
        if payload.get(meta.primary_key) is None and not meta.auto_increment:
            raise ValueError(f"{table} rows require {meta.primary_key}")
        with self._lock, self._connect() as conn:
            try:
                key = self._write(conn, meta, payload, replace=False)
            except sqlite3.IntegrityError as exc:
                raise ValueError(f"duplicate key {payload.get(meta.primary_key)!r} in {table}") from exc
            conn.commit()
        return key

    def put(self, table: str, row: dict[str, Any]) -> Any:
        meta = self._table(table)
        payload = dict(row)
        with self._lock, self._connect() as conn:
            key = self._write(conn, meta, payload, replace=True)
            conn.commit()
        return key

    def update(self, table: str, key: Any, changes: dict[str, Any]) -> int:
        meta = self._table(table)
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT payload FROM {_quote(meta.name)} WHERE {_quote(meta.primary_key)} = ? LIMIT 1",
                (key,),
            ).fetchone()
            if row is None:
                return 0
            payload = self._decode(row)
            payload.update({k: v for k, v in changes.items() if k != meta.primary_key})
            self._write(conn, meta, payload, replace=True)
            conn.commit()
        return 1

    def count(self, table: str) -> int:
        meta = self._table(table)
        with self._lock, self._connect() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM {_quote(meta.name)}").fetchone()
        return int(row["n"])

    def where(self, table: str, field: str, value: Any) -> list[dict[str, Any]]:
        meta = self._table(table)
        if field not in meta.indexes and field != meta.primary_key:
            return super().where(table, field, value)
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT payload FROM {_quote(meta.name)}
                WHERE {_quote(field)} = ?
                ORDER BY {_quote(meta.primary_key)} ASC
                """,
                (self._column_value(value),),
            ).fetchall()
        return [self._decode(row) for row in rows]

    def order_by(self, table: str, field: str) -> list[dict[str, Any]]:
        meta = self._table(table)
        if field not in meta.indexes and field != meta.primary_key:
            return super().order_by(table, field)
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT payload FROM {_quote(meta.name)}
                ORDER BY {_quote(field)} ASC, {_quote(meta.primary_key)} ASC
                """
            ).fetchall()
        return [self._decode(row) for row in rows]

    def clear(self, table: str | None = None) -> None:
        names = [table] if table is not None else list(self.schema)
        with self._lock, self._connect() as conn:
            for name in names:
                meta = self._table(name)
                conn.execute(f"DELETE FROM {_quote(meta.name)}")
                if meta.auto_increment:
                    conn.execute("DELETE FROM sqlite_sequence WHERE name = ?", (meta.name,))
            conn.commit()


def create_local_store_from_env(
    environ: Mapping[str, str] | None = None,
) -> InMemoryLocalStore | SqliteLocalStore:
    env = os.environ if environ is None else environ
    backend = env.get("TALENTFLOW_LOCAL_STORE", "sqlite").strip().lower()
    if backend == "memory":
        return InMemoryLocalStore()
    if backend == "sqlite":
        db_path = env.get("TALENTFLOW_SQLITE_PATH", ".runtime/talentflow.sqlite3").strip()
        if not db_path:
            raise ValueError("TALENTFLOW_SQLITE_PATH must be set when TALENTFLOW_LOCAL_STORE=sqlite")
        return SqliteLocalStore(db_path)
    raise RuntimeError(f"unsupported local store backend: {backend}")
