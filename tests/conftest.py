"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

_TMP_DIR = Path(tempfile.mkdtemp(prefix="dao-notifications-tests-"))

os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["LOG_DIR"] = str(_TMP_DIR / "logs")
os.environ["SMTP_DISABLE"] = "true"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("NOTIFICATION_SCOPE", None)

from dao_notifications.logging_config import configure_logging

configure_logging()

from dao_notifications.database import SessionLocal, init_db
from dao_notifications.main import app
from dao_notifications.models.database_models import Notification, UserAccount
from dao_notifications.models.schemas import Project, Task, TeamMember, User

init_db()


@pytest.fixture(autouse=True)
def clean_tables() -> Iterator[None]:
    """Start each test with empty tables."""

    yield
    db = SessionLocal()
    try:
        db.query(Notification).delete()
        db.query(UserAccount).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def test_client() -> Iterator[TestClient]:
    """Provide a FastAPI test client."""

    with TestClient(app) as client:
        yield client


@pytest.fixture
def roster() -> list[User]:
    """Users shared by the resolver and dispatcher tests."""

    return [
        User(id="user-chef", name="Chef Test", email="chef@test.com"),
        User(id="user-admin", name="Admin", email="admin@example.com", role="admin"),
        User(id="user-assigned", name="Assigned Member", email="assigned@test.com"),
        User(id="user-manual", name="Manual Match", email="manual@test.com"),
        User(id="user-extra", name="Actor", email="actor@test.com"),
    ]


@pytest.fixture
def sample_project() -> Project:
    return Project(
        id="dao-1",
        team=[
            TeamMember(id="user-chef", name="Chef Test", role="chef_equipe", email="chef@test.com"),
            TeamMember(id="membre-temp", name="Manual Match", role="membre_equipe", email="manual@test.com"),
        ],
        tasks=[Task(id=1, name="Tâche 1", assigned_to=["user-assigned"])],
    )
