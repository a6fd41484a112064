from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generator, List, Mapping, Optional

from .errors import StoreError
from .models import MUTABLE_FIELDS, TaskEntity
from .repositories import Repository, new_task_id, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    status: str = "status"
    priority: str = "priority"
    owner: str = "owner"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()


def _stamp() -> str:
    # fixed width so text order matches time order
    return utcnow().isoformat(timespec="microseconds")


class SQLiteRepository(Repository):
    """
    SQLite-backed repository. Each operation opens its own connection and
    touches a single row.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open task store at {self._db_path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(f"task store operation failed: {exc}") from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} TEXT PRIMARY KEY,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NOT NULL DEFAULT '',
                    {_COLS.status} TEXT NOT NULL DEFAULT 'pending',
                    {_COLS.priority} TEXT NOT NULL DEFAULT 'medium',
                    {_COLS.owner} TEXT NOT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_owner_created_at "
                f"ON {_COLS.table}({_COLS.owner}, {_COLS.created_at})"
            )
        logger.debug("sqlite task store ready at %s", self._db_path)

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": str(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": str(row[_COLS.description] or ""),
            "status": str(row[_COLS.status]),
            "priority": str(row[_COLS.priority]),
            "owner": str(row[_COLS.owner]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
        }

    def _fetch(self, conn: sqlite3.Connection, task_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()

    def create(self, owner: str, fields: Mapping[str, Any]) -> TaskEntity:
        now = _stamp()
        task_id = new_task_id()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.id}, {_COLS.title}, {_COLS.description},
                    {_COLS.status}, {_COLS.priority}, {_COLS.owner}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    fields["title"],
                    fields.get("description", ""),
                    fields.get("status", "pending"),
                    fields.get("priority", "medium"),
                    owner,
                    now,
                    now,
                ),
            )
            row = self._fetch(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        columns = [key for key in MUTABLE_FIELDS if key in changes]
        assignments = ", ".join(f"{col} = ?" for col in [*columns, _COLS.updated_at])
        params = [changes[col] for col in columns]
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                [*params, _stamp(), task_id],
            )
            if cur.rowcount == 0:
                return None
            row = self._fetch(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, task_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def list_by_owner(self, owner: str) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                WHERE {_COLS.owner} = ?
                ORDER BY {_COLS.created_at} DESC, rowid DESC
                """,
                (owner,),
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
