import os

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so importing the app never touches the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_mcp.db import SQLiteRepository  # noqa: E402
from todo_mcp.main import app  # noqa: E402
from todo_mcp.repositories import InMemoryRepository, get_repository  # noqa: E402


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "todos.db"))
    return InMemoryRepository()


@pytest.fixture
def sqlite_repo(tmp_path):
    return SQLiteRepository(str(tmp_path / "todos.db"))


@pytest.fixture
def client(sqlite_repo):
    app.dependency_overrides[get_repository] = lambda: sqlite_repo
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
