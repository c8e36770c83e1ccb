"""
Pytest fixtures for the tap funnel service.

Provides an in-memory database, a test client wired to it, an admin
session, and small factories for reps and events.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_DB", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ["RESEND_API_KEY"] = ""
os.environ["LEADS_NOTIFY_EMAIL"] = ""

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taptrack.auth.security import get_password_hash  # noqa: E402
from taptrack.db import Base, get_db  # noqa: E402
from taptrack.main import create_app  # noqa: E402
from taptrack.models.models import Event, Rep, User  # noqa: E402


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(scope='function')
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope='function')
def app(session_factory):
    app = create_app(enable_metrics=False)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture(scope='function')
def client(app):
    return TestClient(app)


@pytest.fixture(scope='function')
def admin(db_session):
    user = User(email=ADMIN_EMAIL, password_hash=get_password_hash(ADMIN_PASSWORD), name="Admin", role="SUPER_ADMIN")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def auth_headers(client, admin):
    r = client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture(scope='function')
def make_rep(db_session):
    def _make(rep_id=7, name="Rep Seven", **fields):
        rep = Rep(id=rep_id, name=name, is_active=fields.pop("is_active", True), **fields)
        db_session.add(rep)
        db_session.commit()
        return rep

    return _make


@pytest.fixture(scope='function')
def make_event(db_session):
    def _make(rep_id, type, created_at=None, meta=None):
        event = Event(
            rep_id=rep_id,
            type=type,
            meta=meta,
            created_at=created_at or datetime.now(timezone.utc),
        )
        db_session.add(event)
        db_session.commit()
        return event

    return _make


@pytest.fixture(scope='function')
def stored_events(db_session):
    def _load(rep_id=None):
        db_session.expire_all()
        q = db_session.query(Event)
        if rep_id is not None:
            q = q.filter(Event.rep_id == rep_id)
        return q.order_by(Event.created_at.asc()).all()

    return _load
