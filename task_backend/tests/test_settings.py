from src.api.auth import Identity, resolve_token
from src.api.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "CORS_ALLOW_ORIGINS", "AUTH_TOKENS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.persistence_backend == "memory"
    assert s.sqlite_db_path == "./data/tasks.db"
    assert s.cors_allow_origins == ["*"]
    assert s.auth_tokens == {}
    assert s.log_level == "INFO"


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "mongo")
    assert get_settings().persistence_backend == "memory"


def test_origins_and_tokens_parsing(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("AUTH_TOKENS", " t1:alice , broken, :nobody, t2:bob ")
    s = get_settings()
    assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.auth_tokens == {"t1": "alice", "t2": "bob"}


def test_resolve_token():
    tokens = {"t1": "alice"}
    assert resolve_token("t1", tokens) == Identity(user_id="alice")
    assert resolve_token("t2", tokens) is None
