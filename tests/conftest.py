"""Root conftest: isolated settings, an in-memory store and API helpers."""

import os

# Settings are read at import time, so they must be in place first
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from task_tracker.database import create_tables, get_db, make_engine
from task_tracker.main import app
from task_tracker.models import Task

PASSWORD = "password123"

SIX_TASKS = [
    # (title, description, status, created_at)
    ("Task A (Pending)", None, "pending", datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)),
    ("Task B (Completed)", None, "completed", datetime(2025, 1, 2, 11, 0, tzinfo=timezone.utc)),
    ("Task C (Pending) - Searchable", "This is a test description.", "pending", datetime(2025, 1, 3, 12, 0, tzinfo=timezone.utc)),
    ("Task D (In Progress)", None, "in_progress", datetime(2025, 1, 4, 13, 0, tzinfo=timezone.utc)),
    ("Another Task E", "Another searchable keyword.", "pending", datetime(2025, 1, 5, 14, 0, tzinfo=timezone.utc)),
    ("Zebra Task (Completed)", None, "completed", datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc)),
]


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email, name="Test User", password=PASSWORD):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def login(client, email, password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})


def auth_headers_for(client, email, name="Test User"):
    assert register(client, email, name=name).status_code == 201
    response = login(client, email)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def alice(client):
    """Auth headers and id of a registered user."""
    headers = auth_headers_for(client, "alice@example.com", name="Alice")
    user_id = client.get("/auth/me", headers=headers).json()["id"]
    return {"headers": headers, "id": user_id}


@pytest.fixture
def bob(client):
    headers = auth_headers_for(client, "bob@example.com", name="Bob")
    user_id = client.get("/auth/me", headers=headers).json()["id"]
    return {"headers": headers, "id": user_id}


def seed_tasks(session, owner_id, rows):
    """Insert tasks with explicit timestamps so ordering is fully known."""
    tasks = []
    for title, description, status, created_at in rows:
        task = Task(
            title=title,
            description=description,
            status=status,
            owner_id=owner_id,
            created_at=created_at,
            updated_at=created_at + timedelta(minutes=5),
        )
        session.add(task)
        tasks.append(task)
    session.commit()
    for task in tasks:
        session.refresh(task)
    return tasks


@pytest.fixture
def six_tasks(db_session, alice):
    return seed_tasks(db_session, alice["id"], SIX_TASKS)
