from __future__ import annotations

import os
import tempfile
from pathlib import Path

os.environ.setdefault(
    "DASHBOARD_DATABASE_URL",
    f"sqlite:///{Path(tempfile.gettempdir()) / 'dashboard-tests.sqlite3'}",
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401  registers the tables on Base.metadata
from auth import create_user
from database import Base, build_engine, get_db


@pytest.fixture()
def session_factory(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.sqlite3'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    from app import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(email: str, role: str | None, password: str = "password123"):
        return create_user(db, name=email.split("@")[0], email=email, password=password, role=role)

    return _make_user
