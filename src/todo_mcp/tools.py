"""
Todo tools exposed over MCP.

Each tool takes its validated argument payload, parses ids and dates out of
their text form, calls the repository and returns a human-readable string.
A missing todo or a malformed id is reported in that string, never as an
exception; only argument validation (ToolArgumentError) and storage failures
(PersistenceError) escape.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from .repositories import Repository
from .schemas import (
    CreateTodoArgs,
    DeleteTodoArgs,
    ReadTodosArgs,
    TodoCreate,
    TodoOut,
    TodoUpdate,
    UpdateTodoArgs,
)
from .utils import parse_rfc3339, parse_todo_id

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "Invalid todo id."


class ToolArgumentError(ValueError):
    """Raised when a tool argument is present but cannot be used."""


def _is_rfc3339(value: str) -> bool:
    try:
        parse_rfc3339(value)
    except ValueError:
        return False
    return True


def _not_found(todo_id: int) -> str:
    return f"Todo with Id {todo_id} not found."


# PUBLIC_INTERFACE
class TodoTools:
    """Dispatcher for the create_todo, read_todos, update_todo and delete_todo tools."""

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def create_todo(self, args: CreateTodoArgs) -> str:
        """Create a todo. Raises ToolArgumentError if createdDate is not RFC3339."""
        if not _is_rfc3339(args.created_date):
            raise ToolArgumentError("Invalid date format")

        todo = self._repo.create(
            TodoCreate(description=args.description, created_date=args.created_date)
        )
        logger.info("Created todo %d", todo["id"])
        return f"Todo created: {todo['description']} (Id: {todo['id']})"

    def read_todos(self, args: ReadTodosArgs) -> str:
        """
        Read all todos, or one todo when an id is given, as JSON array text.

        A blank id reads everything. An id that is not an integer matches
        nothing and yields an empty array.
        """
        todo_id: Optional[int] = None
        if args.id is not None and args.id.strip():
            todo_id = parse_todo_id(args.id.strip())
            if todo_id is None:
                return "[]"

        todos = self._repo.read(todo_id)
        return json.dumps(
            [TodoOut(**t).model_dump(by_alias=True) for t in todos],
            ensure_ascii=False,
        )

    def update_todo(self, args: UpdateTodoArgs) -> str:
        """
        Update the provided fields of a todo.

        An unparseable createdDate is dropped and the update proceeds with
        the remaining fields.
        """
        todo_id = parse_todo_id(args.id)
        if todo_id is None:
            return INVALID_ID_MESSAGE

        created_date = args.created_date
        if created_date is not None and not _is_rfc3339(created_date):
            logger.debug("Ignoring unparseable createdDate %r for todo %d", created_date, todo_id)
            created_date = None

        update = TodoUpdate(description=args.description, created_date=created_date)
        if not self._repo.update(todo_id, update):
            return _not_found(todo_id)
        logger.info("Updated todo %d", todo_id)
        return f"Todo {todo_id} updated."

    def delete_todo(self, args: DeleteTodoArgs) -> str:
        """Delete a todo by id."""
        todo_id = parse_todo_id(args.id)
        if todo_id is None:
            return INVALID_ID_MESSAGE

        if not self._repo.delete(todo_id):
            return _not_found(todo_id)
        logger.info("Deleted todo %d", todo_id)
        return f"Todo {todo_id} deleted."
