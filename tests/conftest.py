from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from consultant_ledger.db.base import Base
from consultant_ledger.db.dependencies import get_db_session
from consultant_ledger.db.session import build_engine, enable_sqlite_foreign_keys
import consultant_ledger.models.entities  # noqa: F401
from consultant_ledger.main import create_app

API = "/api/v1"


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def file_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """File-backed database for tests that need one session per thread."""

    engine = build_engine(f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_role(client: TestClient, *, name: str = "Consultant Level 1", rate: str = "50.00") -> dict:
    response = client.post(f"{API}/roles", json={"name": name, "rate_per_hour": rate})
    assert response.status_code == 201, response.text
    return response.json()


def create_consultant(
    client: TestClient,
    *,
    role_id: int,
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    email: str = "ada@example.test",
) -> dict:
    response = client.post(
        f"{API}/consultants",
        json={"first_name": first_name, "last_name": last_name, "email": email, "role_id": role_id},
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_task(client: TestClient, *, name: str = "Discovery", duration_hours: str = "40") -> dict:
    response = client.post(
        f"{API}/tasks",
        json={"name": name, "description": "Client workshop", "duration_hours": duration_hours},
    )
    assert response.status_code == 201, response.text
    return response.json()


def assign(client: TestClient, *, consultant_id: int, task_id: int) -> None:
    response = client.post(f"{API}/tasks/{task_id}/assign", json={"consultant_id": consultant_id})
    assert response.status_code == 201, response.text
