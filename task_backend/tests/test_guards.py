import pytest

from src.api.errors import TaskForbiddenError, TaskNotFoundError
from src.api.guards import load_owned_task, owns
from src.api.repositories import InMemoryRepository


@pytest.fixture
def repo():
    return InMemoryRepository()


def test_owns_compares_owner_identity(repo):
    task = repo.create("alice", {"title": "t"})
    assert owns(task, "alice")
    assert not owns(task, "bob")
    assert not owns(task, "")


def test_owner_gets_the_task(repo):
    task = repo.create("alice", {"title": "t"})
    assert load_owned_task(repo, task["id"], "alice") == task


def test_missing_task_is_not_found_for_any_caller(repo):
    repo.create("alice", {"title": "t"})
    for caller in ("alice", "bob", ""):
        with pytest.raises(TaskNotFoundError):
            load_owned_task(repo, "does-not-exist", caller)


def test_foreign_task_is_forbidden_with_action_in_message(repo):
    task = repo.create("alice", {"title": "t"})
    with pytest.raises(TaskForbiddenError) as excinfo:
        load_owned_task(repo, task["id"], "bob", action="delete")
    assert excinfo.value.message == "Not authorized to delete this task"
    assert excinfo.value.http_status == 403


def test_denied_access_is_logged(repo, caplog):
    task = repo.create("alice", {"title": "t"})
    with pytest.raises(TaskForbiddenError):
        load_owned_task(repo, task["id"], "bob")
    assert any("denied update" in r.getMessage() for r in caplog.records)
