from __future__ import annotations

import os
import tempfile
from typing import Any, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from welth import models
from welth.core.database import Base, get_db
from welth.core.deps import get_rate_gate
from welth.main import app
from welth.services.rate_limit import AllowAllGate


USER_HEADER = {"X-User-Id": "user_test"}


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # Temporary SQLite file so the developer database is never touched
    fd, path = tempfile.mkstemp(prefix="welth_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_rate_gate] = lambda: AllowAllGate()
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app, headers=USER_HEADER) as c:
        yield c


@pytest.fixture()
def user(db_session) -> models.User:
    row = models.User(clerk_user_id="user_test", email="test@example.com", name="Test")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture()
def make_account(client):
    def _make(name: str = "Main", balance: Any = "0", **extra: Any) -> dict:
        res = client.post(
            "/api/accounts",
            json={"name": name, "type": "CURRENT", "balance": balance, **extra},
        )
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _make


@pytest.fixture()
def make_transaction(client):
    def _make(account_id: int, amount: Any, type: str = "EXPENSE", **extra: Any) -> dict:
        body = {
            "account_id": account_id,
            "type": type,
            "amount": amount,
            "date": "2024-01-15T10:00:00",
            "category": "food",
            **extra,
        }
        res = client.post("/api/transactions", json=body)
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _make
