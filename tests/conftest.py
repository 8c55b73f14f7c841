"""Pytest fixtures for async FastAPI testing.

Sets test configuration before any ``hercycle`` module reads settings,
creates the schema once per session on a SQLite file, empties every table
after each test and captures outgoing email instead of sending it.
"""
import os
import pathlib
import tempfile
import uuid
from datetime import datetime, timedelta

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

# .env.test wins when present; otherwise fall back to throwaway defaults
if (ROOT / ".env.test").exists():
    load_dotenv(dotenv_path=str(ROOT / ".env.test"), override=True)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{ROOT / 'tests' / 'hercycle_test.db'}")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ALGORITHM", "HS256")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="hercycle-uploads-"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DOCTOR_APPROVAL_REQUIRED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

PASSWORD = "StrongPass1!"
DOCTOR_NIC = "200419201396"


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from hercycle.core.database import engine, Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    from hercycle.core.database import SessionLocal, Base
    from hercycle.dependencies.rate_limit import reset_rate_limits

    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()
        reset_rate_limits()


@pytest.fixture
def sent_emails(monkeypatch):
    """Every email the app tried to send, as dicts with to/subject/body."""
    import hercycle.services.email_service as email_service

    outbox = []

    def _capture(to_email, subject, body, html=None):
        outbox.append({"to": to_email, "subject": subject, "body": body})
        return True

    monkeypatch.setattr(email_service, "send_email", _capture)
    return outbox


@pytest.fixture
async def async_client(sent_emails, db_session):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import AsyncClient, ASGITransport
    from hercycle.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


def _session_headers(db_session, user) -> dict:
    from hercycle.core.security import create_access_token, create_refresh_token, hash_token
    from hercycle.models.session import UserSession

    access_token, access_jti = create_access_token(
        user_id=user.id, nic=user.nic, email=user.email, role=user.role
    )
    refresh_token, refresh_jti = create_refresh_token(user.id)
    db_session.add(
        UserSession(
            user_id=user.id,
            token_jti=access_jti,
            refresh_jti=refresh_jti,
            refresh_token_hash=hash_token(refresh_token),
            expires_at=datetime.utcnow() + timedelta(minutes=30),
            refresh_expires_at=datetime.utcnow() + timedelta(days=7),
        )
    )
    db_session.commit()
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def make_admin(db_session):
    """Create an admin with a live session; returns (headers, user)."""
    from hercycle.core.security import hash_password
    from hercycle.models.user import User

    def _make(nic: str = "198512345678"):
        admin = User(
            nic=nic,
            email=f"admin-{uuid.uuid4().hex[:8]}@example.com",
            full_name="Site Admin",
            password_hash=hash_password(PASSWORD),
            role="admin",
            account_status="active",
        )
        db_session.add(admin)
        db_session.commit()
        return _session_headers(db_session, admin), admin

    return _make


@pytest.fixture
def make_member(db_session):
    """Create a regular community member with a live session."""
    from hercycle.models.user import User

    def _make(nic: str = "199556712345"):
        user = User(
            nic=nic,
            email=f"member-{uuid.uuid4().hex[:8]}@example.com",
            full_name="Community Member",
            role="user",
            account_status="active",
        )
        db_session.add(user)
        db_session.commit()
        return _session_headers(db_session, user), user

    return _make


def doctor_payload(nic: str = DOCTOR_NIC, email: str | None = None, **overrides) -> dict:
    payload = {
        "NIC": nic,
        "full_name": "Nadeesha Perera",
        "email": email or f"doc-{nic}@example.com",
        "password": PASSWORD,
        "contact_number": "0771234567",
        "user_type": "doctor",
        "specialty": "gynecology",
        "qualifications": "MBBS, MD (Obstetrics)",
        "clinic_or_hospital": "Castle Street Hospital",
        "license_document_url": "http://testserver/uploads/license-abc.pdf",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register_doctor(async_client):
    """Register a doctor through the API; returns (auth headers, response data)."""

    async def _register(nic: str = DOCTOR_NIC, **overrides):
        r = await async_client.post("/api/auth/register", json=doctor_payload(nic, **overrides))
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return {"Authorization": f"Bearer {data['tokens']['access_token']}"}, data

    return _register
