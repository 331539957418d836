from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, List, Optional

from .models import TodoEntity
from .repositories import PersistenceError, Repository
from .schemas import TodoCreate, TodoUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    description: str = "description"
    created_date: str = "created_date"


_COLS = _Cols()


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    Every operation opens its own connection; nothing is cached in memory.
    Update and delete are single conditional statements, so the affected-row
    count decides the result without a separate existence query.
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
            raise PersistenceError(f"cannot open database {self._db_path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.description} TEXT NULL,
                    {_COLS.created_date} TEXT NOT NULL
                )
                """
            )
        logger.debug("SQLite store ready at %s", self._db_path)

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "description": row[_COLS.description],
            "created_date": str(row[_COLS.created_date]),
        }

    def create(self, data: TodoCreate) -> TodoEntity:
        with self._conn() as conn:
            cur = conn.execute(
                f"INSERT INTO {_COLS.table} ({_COLS.description}, {_COLS.created_date}) VALUES (?, ?)",
                (data.description, data.created_date),
            )
            new_id = cur.lastrowid
            row = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (new_id,)
            ).fetchone()
            assert row is not None
            return self._row_to_entity(row)

    def read(self, todo_id: Optional[int] = None) -> List[TodoEntity]:
        with self._conn() as conn:
            if todo_id is not None and todo_id > 0:
                rows = conn.execute(
                    f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ? ORDER BY {_COLS.id}",
                    (todo_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.id}"
                ).fetchall()
            return [self._row_to_entity(r) for r in rows]

    def update(self, todo_id: int, data: TodoUpdate) -> bool:
        assignments: List[str] = []
        params: list = []

        if data.description is not None:
            assignments.append(f"{_COLS.description} = ?")
            params.append(data.description)

        if data.created_date is not None:
            assignments.append(f"{_COLS.created_date} = ?")
            params.append(data.created_date)

        with self._conn() as conn:
            if not assignments:
                # Nothing to write; success still depends on the row existing
                row = conn.execute(
                    f"SELECT 1 FROM {_COLS.table} WHERE {_COLS.id} = ? LIMIT 1", (todo_id,)
                ).fetchone()
                return row is not None

            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                [*params, todo_id],
            )
            return cur.rowcount > 0

    def delete(self, todo_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0
