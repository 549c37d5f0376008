"""Pytest bootstrap for project imports and an isolated database."""

from pathlib import Path
import os
import sys

# Ensure project root is on sys.path so `import cityfix` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

# Settings are read at import time, so these must be set first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BOOTSTRAP_ON_STARTUP"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ANON_KEY", "test-anon-key")

import pytest

from cityfix import models  # noqa: F401
from cityfix.config import settings
from cityfix.database import Base, SessionLocal, engine


class FakeKV:
    """In-memory stand-in for KVStore.

    Prefix scans hand back ``{"key", "value"}`` wrappers, like the SQL store.
    """

    def __init__(self, wrap_scans: bool = True):
        self.data = {}
        self.calls = []
        self.wrap_scans = wrap_scans

    def get(self, key):
        self.calls.append(("get", key))
        return self.data.get(key)

    def set(self, key, value):
        self.calls.append(("set", key))
        self.data[key] = value

    def mset(self, items):
        for key, value in items:
            self.set(key, value)

    def delete(self, key):
        self.calls.append(("delete", key))
        self.data.pop(key, None)

    def get_by_prefix(self, prefix):
        self.calls.append(("scan", prefix))
        matches = [(k, v) for k, v in self.data.items() if k.startswith(prefix)]
        if self.wrap_scans:
            return [{"key": k, "value": v} for k, v in matches]
        return [v for _, v in matches]


@pytest.fixture(autouse=True)
def reset_database(tmp_path, monkeypatch):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "STORAGE_ROOT", str(tmp_path / "storage"))
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_kv():
    return FakeKV()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from cityfix.main import app

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides = {}


def _token_for(db, email: str, role: str) -> str:
    from cityfix.services.identity import LocalIdentityProvider

    identity = LocalIdentityProvider(db)
    identity.create_user(email=email, password="Password123", role=role, name=role.title())
    return identity.sign_in(email, "Password123").session.access_token


@pytest.fixture
def admin_token(db_session):
    return _token_for(db_session, "admin@example.com", "admin")


@pytest.fixture
def user_token(db_session):
    return _token_for(db_session, "resident@example.com", "user")
