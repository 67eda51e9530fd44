import os
import tempfile
from pathlib import Path

# Must be set before pipeline_jobs is imported: the engine is built at import time
_TMP = Path(tempfile.mkdtemp(prefix="pipeline-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PUBLIC_BASE_URL"] = "https://jobs.example.com"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from pipeline_jobs.auth import hash_password  # noqa: E402
from pipeline_jobs.db import Base, SessionLocal, engine  # noqa: E402
from pipeline_jobs.main import app  # noqa: E402
from pipeline_jobs.models import Job, User  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def other_session():
    """A second connection, standing in for a concurrent request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def make_user(db):
    def _make(username: str = "alice", **kw) -> User:
        defaults = {
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": hash_password(PASSWORD),
            "timezone": "America/New_York",
            "banked_credits": 0,
        }
        defaults.update(kw)
        user = User(**defaults)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_job(db):
    def _make(title: str = "Backend Engineer", **kw) -> Job:
        defaults = {
            "title": title,
            "company": "Acme",
            "location": "New York, NY",
            "salary": "$120k",
            "description": "Build APIs",
            "requirements": "Python",
            "type": "Full-time",
        }
        defaults.update(kw)
        job = Job(**defaults)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make


@pytest.fixture()
def make_client():
    """A TestClient per user so each keeps its own session cookie."""
    clients = []

    def _make(username: str | None = None) -> TestClient:
        client = TestClient(app)
        clients.append(client)
        if username:
            res = client.post("/api/login", json={"username": username, "password": PASSWORD})
            assert res.status_code == 200, res.text
        return client

    yield _make
    for c in clients:
        c.close()


@pytest.fixture()
def client(make_client):
    return make_client()
