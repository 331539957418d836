import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from todo_mcp.db import SQLiteRepository
from todo_mcp.repositories import PersistenceError
from todo_mcp.schemas import TodoCreate, TodoUpdate


def new_todo(repo, description="Test todo", created_date="2024-01-01T00:00:00Z"):
    return repo.create(TodoCreate(description=description, created_date=created_date))


class TestCreateAndRead:
    def test_create_assigns_positive_id(self, repo):
        todo = new_todo(repo)
        assert todo["id"] > 0
        assert todo["description"] == "Test todo"
        assert todo["created_date"] == "2024-01-01T00:00:00Z"

    def test_create_allows_empty_description(self, repo):
        todo = new_todo(repo, description="")
        assert repo.read(todo["id"])[0]["description"] == ""

    def test_read_by_id_preserves_date_text(self, repo):
        stamp = "2024-03-10T08:15:30.123456789+05:30"
        todo = new_todo(repo, description="Precise", created_date=stamp)

        rows = repo.read(todo["id"])
        assert len(rows) == 1
        assert rows[0]["description"] == "Precise"
        assert rows[0]["created_date"] == stamp

    def test_read_all_ordered_by_id(self, repo):
        ids = [new_todo(repo, description=f"Todo {i}")["id"] for i in range(5)]
        rows = repo.read()
        assert [r["id"] for r in rows] == ids
        assert ids == sorted(ids)

    def test_read_empty_store(self, repo):
        assert repo.read() == []

    def test_read_non_existent(self, repo):
        new_todo(repo)
        assert repo.read(999) == []

    @pytest.mark.parametrize("todo_id", [0, -1, -42])
    def test_non_positive_id_reads_all(self, repo, todo_id):
        new_todo(repo, description="A")
        new_todo(repo, description="B")
        assert repo.read(todo_id) == repo.read()

    def test_ids_not_reused_after_delete(self, repo):
        first = new_todo(repo)
        second = new_todo(repo)
        assert repo.delete(second["id"]) is True

        third = new_todo(repo)
        assert third["id"] > second["id"] > first["id"]


class TestUpdate:
    def test_update_description(self, repo):
        todo = new_todo(repo, description="Original description")
        assert repo.update(todo["id"], TodoUpdate(description="Updated description")) is True

        row = repo.read(todo["id"])[0]
        assert row["description"] == "Updated description"
        # created_date untouched
        assert row["created_date"] == "2024-01-01T00:00:00Z"

    def test_update_created_date_with_other_offset(self, repo):
        todo = new_todo(repo)
        new_date = "2024-01-02T09:30:00.5-07:00"
        assert repo.update(todo["id"], TodoUpdate(created_date=new_date)) is True

        row = repo.read(todo["id"])[0]
        assert row["created_date"] == new_date
        assert row["description"] == "Test todo"

    @pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
    def test_blank_description_is_ignored(self, repo, blank):
        todo = new_todo(repo, description="Original description")
        assert repo.update(todo["id"], TodoUpdate(description=blank)) is True
        assert repo.read(todo["id"])[0]["description"] == "Original description"

    def test_empty_update_on_existing_row(self, repo):
        todo = new_todo(repo)
        before = repo.read(todo["id"])
        assert repo.update(todo["id"], TodoUpdate()) is True
        assert repo.read(todo["id"]) == before

    @pytest.mark.parametrize(
        "update",
        [
            TodoUpdate(),
            TodoUpdate(description="x"),
            TodoUpdate(created_date="2024-01-01T00:00:00Z"),
            TodoUpdate(description="x", created_date="2024-01-01T00:00:00Z"),
        ],
    )
    def test_update_non_existent(self, repo, update):
        new_todo(repo)
        assert repo.update(999, update) is False


class TestDelete:
    def test_delete_then_delete_again(self, repo):
        todo = new_todo(repo)
        assert repo.delete(todo["id"]) is True
        assert repo.read(todo["id"]) == []
        assert repo.delete(todo["id"]) is False

    def test_delete_non_existent(self, repo):
        assert repo.delete(999) is False

    def test_delete_leaves_other_rows(self, repo):
        keep = new_todo(repo, description="keep")
        drop = new_todo(repo, description="drop")
        repo.delete(drop["id"])
        assert [r["id"] for r in repo.read()] == [keep["id"]]


class TestConcurrentMutations:
    WORKERS = 16

    def run_together(self, *calls):
        barrier = threading.Barrier(len(calls), timeout=10)

        def run(call):
            barrier.wait()
            return call()

        with ThreadPoolExecutor(max_workers=len(calls)) as pool:
            return [f.result() for f in [pool.submit(run, c) for c in calls]]

    def test_racing_deletes_and_updates(self, repo):
        todo = new_todo(repo)
        tid = todo["id"]
        half = self.WORKERS // 2

        results = self.run_together(
            *[lambda: ("delete", repo.delete(tid)) for _ in range(half)],
            *[lambda i=i: ("update", repo.update(tid, TodoUpdate(description=f"v{i}"))) for i in range(half)],
        )

        deletes = [ok for kind, ok in results if kind == "delete"]
        updates = [ok for kind, ok in results if kind == "update"]
        assert deletes.count(True) == 1
        assert all(isinstance(ok, bool) for ok in updates)
        # The row is gone, so no later mutation can report success
        assert repo.read(tid) == []
        assert repo.update(tid, TodoUpdate(description="late")) is False
        assert repo.update(tid, TodoUpdate()) is False
        assert repo.delete(tid) is False

    def test_racing_updates_all_succeed(self, repo):
        todo = new_todo(repo)
        written = [f"v{i}" for i in range(self.WORKERS)]

        results = self.run_together(
            *[lambda d=d: repo.update(todo["id"], TodoUpdate(description=d)) for d in written]
        )

        assert results == [True] * self.WORKERS
        assert repo.read(todo["id"])[0]["description"] in written

    def test_racing_creates_get_distinct_ids(self, repo):
        results = self.run_together(
            *[lambda i=i: new_todo(repo, description=f"t{i}") for i in range(self.WORKERS)]
        )

        ids = [t["id"] for t in results]
        assert len(set(ids)) == self.WORKERS
        assert [t["id"] for t in repo.read()] == sorted(ids)


class TestSQLiteRepository:
    def test_data_survives_new_repository_instance(self, tmp_path):
        path = str(tmp_path / "todos.db")
        todo = new_todo(SQLiteRepository(path), description="Persisted")

        rows = SQLiteRepository(path).read()
        assert rows == [todo]

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "todos.db"
        SQLiteRepository(str(path))
        assert path.exists()

    def test_storage_failure_raises_persistence_error(self, tmp_path):
        path = str(tmp_path / "todos.db")
        repo = SQLiteRepository(path)
        with sqlite3.connect(path) as conn:
            conn.execute("DROP TABLE todos")

        with pytest.raises(PersistenceError):
            repo.read()
