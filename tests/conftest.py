import os
from datetime import date

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_PASSWORD", "letmein")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("REMINDER_OFFSETS", "-30,-7,-3,-1,1")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from renewals.db.session import Base, get_db
from renewals.core.security import create_admin_token
from renewals.main import app
from renewals.models.customer import Customer
from renewals.models.reminder import Reminder  # noqa: F401
from renewals.models.send_log import SendLog  # noqa: F401

@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    client.headers["Authorization"] = f"Bearer {create_admin_token()}"
    return client


@pytest.fixture
def make_customer(db):
    def _make(email="ops@acme.io", expires_on=date(2025, 1, 15), **kw):
        c = Customer(primary_email=email, expires_on=expires_on, paused=kw.pop("paused", False), **kw)
        db.add(c)
        db.commit()
        db.refresh(c)
        return c
    return _make
