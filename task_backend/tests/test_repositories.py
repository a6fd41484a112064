import sqlite3
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.api.db import SQLiteRepository
from src.api.errors import StoreError
from src.api.repositories import InMemoryRepository, get_repository, reset_repository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRepository(str(tmp_path / "data" / "tasks.db"))
    return InMemoryRepository()


def test_create_applies_defaults_and_owner(repo):
    task = repo.create("alice", {"title": "t"})
    assert len(task["id"]) == 32
    assert task["owner"] == "alice"
    assert task["description"] == ""
    assert task["status"] == "pending"
    assert task["priority"] == "medium"
    assert task["created_at"] == task["updated_at"]
    assert task["created_at"].tzinfo is not None


def test_ids_are_unique(repo):
    ids = {repo.create("alice", {"title": f"t{i}"})["id"] for i in range(20)}
    assert len(ids) == 20


def test_get_returns_copy(repo):
    task = repo.create("alice", {"title": "t"})
    fetched = repo.get(task["id"])
    assert fetched == task
    fetched["title"] = "changed"
    assert repo.get(task["id"])["title"] == "t"
    assert repo.get("missing") is None


def test_update_replaces_only_mutable_fields(repo):
    task = repo.create("alice", {"title": "t", "description": "d", "priority": "high"})
    updated = repo.update(
        task["id"],
        {"title": "t2", "status": "completed", "owner": "bob", "id": "x", "created_at": None},
    )
    assert updated["id"] == task["id"]
    assert updated["title"] == "t2"
    assert updated["status"] == "completed"
    assert updated["description"] == "d"
    assert updated["priority"] == "high"
    assert updated["owner"] == "alice"
    assert updated["created_at"] == task["created_at"]
    assert updated["updated_at"] >= task["updated_at"]
    assert repo.get(task["id"]) == updated


def test_update_missing_returns_none(repo):
    assert repo.update("missing", {"title": "x"}) is None


def test_delete(repo):
    task = repo.create("alice", {"title": "t"})
    assert repo.delete(task["id"]) is True
    assert repo.get(task["id"]) is None
    assert repo.delete(task["id"]) is False


def test_list_by_owner_is_scoped_and_newest_first(repo):
    a1 = repo.create("alice", {"title": "a1"})
    repo.create("bob", {"title": "b1"})
    a2 = repo.create("alice", {"title": "a2"})
    a3 = repo.create("alice", {"title": "a3"})

    listed = repo.list_by_owner("alice")
    assert [t["id"] for t in listed] == [a3["id"], a2["id"], a1["id"]]
    assert [t["title"] for t in repo.list_by_owner("bob")] == ["b1"]
    assert repo.list_by_owner("carol") == []


def test_sqlite_persists_across_instances(tmp_path):
    path = str(tmp_path / "tasks.db")
    task = SQLiteRepository(path).create("alice", {"title": "durable"})
    assert SQLiteRepository(path).get(task["id"]) == task


def test_sqlite_driver_errors_become_store_errors(tmp_path):
    path = str(tmp_path / "tasks.db")
    repo = SQLiteRepository(path)
    with sqlite3.connect(path) as conn:
        conn.execute("DROP TABLE tasks")

    with pytest.raises(StoreError) as excinfo:
        repo.list_by_owner("alice")
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)
    assert excinfo.value.to_dict() == {"error": "StoreError", "message": "Server error"}


def test_get_repository_is_cached_per_backend(monkeypatch, tmp_path):
    assert get_repository() is get_repository()
    assert isinstance(get_repository(), InMemoryRepository)

    monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
    monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "tasks.db"))
    reset_repository()
    assert isinstance(get_repository(), SQLiteRepository)


def test_get_repository_builds_one_instance_under_concurrency(monkeypatch):
    original_init = InMemoryRepository.__init__
    builds = []

    def slow_init(self):
        builds.append(threading.get_ident())
        time.sleep(0.05)
        original_init(self)

    monkeypatch.setattr(InMemoryRepository, "__init__", slow_init)
    reset_repository()

    with ThreadPoolExecutor(max_workers=4) as pool:
        repos = list(pool.map(lambda _: get_repository(), range(4)))

    assert len({id(r) for r in repos}) == 1
    assert len(builds) == 1
