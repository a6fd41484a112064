import os

import pytest

# Memory backend and two known users, set before the app module is imported
os.environ["PERSISTENCE_BACKEND"] = "memory"
os.environ["AUTH_TOKENS"] = "alice-token:alice,bob-token:bob"

from src.api.repositories import reset_repository  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_repository():
    """Give every test an empty in-memory store."""
    reset_repository()
    yield
    reset_repository()
