"""Integration tests for authentication routes.

Email sending is captured by the ``sent_emails`` fixture so no SMTP is required.
"""
import re

from conftest import DOCTOR_NIC, PASSWORD, doctor_payload
from hercycle.models.doctor import Doctor
from hercycle.models.user import User
from hercycle.models.verification import DoctorVerification


async def test_register_doctor_creates_pending_account_and_verification(async_client, db_session):
    r = await async_client.post("/api/auth/register", json=doctor_payload())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["tokens"]["access_token"]
    assert data["user"]["NIC"] == DOCTOR_NIC
    assert data["user"]["role"] == "doctor"
    assert data["user"]["account_status"] == "pending"
    # Derived from the NIC: day code 192 in leap year 2004
    assert data["user"]["gender"] == "male"
    assert data["user"]["date_of_birth"] == "2004-07-10"
    assert data["doctor"]["qualifications"] == ["MBBS", "MD (Obstetrics)"]
    assert data["doctor"]["is_approved"] is False
    assert data["verification_status"] == "pending"

    records = db_session.query(DoctorVerification).filter(DoctorVerification.doctor_nic == DOCTOR_NIC).all()
    assert len(records) == 1
    record = records[0]
    assert record.status == "pending"
    assert record.verification_id.startswith("VER_") and record.verification_id.endswith(DOCTOR_NIC)
    assert record.registration_details.startswith("Registered on ")
    assert "Qualifications: MBBS, MD (Obstetrics)" in record.registration_details
    assert record.reviewed_at is None and record.reviewed_by is None


async def test_register_doctor_without_license_creates_nothing(async_client, db_session):
    payload = doctor_payload(license_document_url=None)

    r = await async_client.post("/api/auth/register", json=payload)
    assert r.status_code == 400, r.text
    body = r.json()
    assert body["success"] is False
    assert "License document URL is required" in body["message"]
    assert body["errors"]

    assert db_session.query(User).count() == 0
    assert db_session.query(Doctor).count() == 0
    assert db_session.query(DoctorVerification).count() == 0


async def test_register_rejects_invalid_nic(async_client, db_session):
    r = await async_client.post("/api/auth/register", json=doctor_payload(nic="12345"))
    assert r.status_code == 400
    assert "Invalid NIC format" in r.json()["message"]


async def test_register_duplicate_nic_or_email_conflicts(async_client, db_session, register_doctor):
    await register_doctor()

    r = await async_client.post("/api/auth/register", json=doctor_payload(email="other@example.com"))
    assert r.status_code == 409
    assert r.json() == {"success": False, "message": "User with this NIC already exists"}

    r = await async_client.post(
        "/api/auth/register",
        json=doctor_payload(nic="199512345678", email=f"doc-{DOCTOR_NIC}@example.com"),
    )
    assert r.status_code == 409
    assert "email" in r.json()["message"]

    assert db_session.query(User).count() == 1
    assert db_session.query(DoctorVerification).count() == 1


async def test_register_community_member_is_active(async_client, db_session):
    payload = {
        "NIC": "855234567V",
        "full_name": "Kumari Silva",
        "email": "kumari@example.com",
        "password": PASSWORD,
        "user_type": "user",
    }
    r = await async_client.post("/api/auth/register", json=payload)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["user"]["account_status"] == "active"
    assert data["user"]["gender"] == "female"
    assert data["doctor"] is None
    assert data["verification_status"] is None
    assert db_session.query(DoctorVerification).count() == 0


async def test_login_me_refresh_logout(async_client, db_session, register_doctor):
    await register_doctor()
    email = f"doc-{DOCTOR_NIC}@example.com"

    # Pending applicants can log in to follow their review
    r = await async_client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["verification_status"] == "pending"
    tokens = data["tokens"]

    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    r = await async_client.get("/api/auth/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["user"]["email"] == email

    r = await async_client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200, r.text
    new_tokens = r.json()["data"]["tokens"]
    assert new_tokens["refresh_token"] != tokens["refresh_token"]

    # Rotated refresh token cannot be reused
    r = await async_client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 401

    new_headers = {"Authorization": f"Bearer {new_tokens['access_token']}"}
    r = await async_client.post("/api/auth/logout", headers=new_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Logged out successfully"

    r = await async_client.get("/api/auth/me", headers=new_headers)
    assert r.status_code == 401
    assert r.json()["success"] is False


async def test_login_invalid_credentials(async_client, db_session, register_doctor):
    await register_doctor()
    r = await async_client.post(
        "/api/auth/login",
        json={"email": f"doc-{DOCTOR_NIC}@example.com", "password": "WrongPass1!"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


async def test_login_blocked_for_suspended_account(async_client, db_session, register_doctor):
    await register_doctor()
    user = db_session.query(User).filter(User.nic == DOCTOR_NIC).one()
    user.account_status = "suspended"
    db_session.commit()

    r = await async_client.post(
        "/api/auth/login",
        json={"email": f"doc-{DOCTOR_NIC}@example.com", "password": PASSWORD},
    )
    assert r.status_code == 403


async def test_missing_token_is_unauthorized(async_client, db_session):
    r = await async_client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Not authenticated"}


async def test_password_reset_flow(async_client, db_session, sent_emails):
    payload = {
        "NIC": "199512345678",
        "full_name": "Reset Me",
        "email": "reset@example.com",
        "password": PASSWORD,
    }
    r = await async_client.post("/api/auth/register", json=payload)
    assert r.status_code == 201
    old_headers = {"Authorization": f"Bearer {r.json()['data']['tokens']['access_token']}"}

    r = await async_client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    assert r.status_code == 200
    assert len(sent_emails) == 1
    code = re.search(r"reset code is: (\d+)", sent_emails[0]["body"]).group(1)
    assert len(code) == 6

    r = await async_client.post(
        "/api/auth/verify-reset-code", json={"email": "reset@example.com", "reset_code": "000000" if code != "000000" else "111111"}
    )
    assert r.status_code == 400
    assert "attempts remaining" in r.json()["message"]

    r = await async_client.post("/api/auth/verify-reset-code", json={"email": "reset@example.com", "reset_code": code})
    assert r.status_code == 200, r.text
    token = r.json()["data"]["token"]

    new_password = "EvenStronger2@"
    r = await async_client.post(
        "/api/auth/reset-password",
        json={"token": token, "new_password": new_password, "confirm_password": new_password},
    )
    assert r.status_code == 200, r.text

    # Existing sessions are signed out
    r = await async_client.get("/api/auth/me", headers=old_headers)
    assert r.status_code == 401

    r = await async_client.post("/api/auth/login", json={"email": "reset@example.com", "password": new_password})
    assert r.status_code == 200


async def test_forgot_password_unknown_email_still_succeeds(async_client, db_session, sent_emails):
    r = await async_client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert sent_emails == []


async def test_reset_code_voided_after_max_attempts(async_client, db_session, sent_emails, monkeypatch):
    from hercycle.core.config import settings

    monkeypatch.setattr(settings, "RESET_CODE_MAX_ATTEMPTS", 2)
    payload = {"NIC": "199512345678", "full_name": "Reset Me", "email": "reset@example.com", "password": PASSWORD}
    await async_client.post("/api/auth/register", json=payload)
    await async_client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    code = re.search(r"reset code is: (\d+)", sent_emails[0]["body"]).group(1)
    wrong = "000000" if code != "000000" else "111111"

    for _ in range(2):
        r = await async_client.post("/api/auth/verify-reset-code", json={"email": "reset@example.com", "reset_code": wrong})
        assert r.status_code == 400

    r = await async_client.post("/api/auth/verify-reset-code", json={"email": "reset@example.com", "reset_code": code})
    assert r.status_code == 403


async def test_rate_limit_returns_429(async_client, db_session, monkeypatch):
    from hercycle.core.config import settings

    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)

    body = {"email": "nobody@example.com", "password": "WrongPass1!"}
    statuses = [(await async_client.post("/api/auth/login", json=body)).status_code for _ in range(3)]
    assert statuses == [401, 401, 429]


async def test_login_creates_missing_doctor_profile(async_client, db_session, make_member):
    from hercycle.core.security import hash_password

    _, user = make_member()
    user.role = "doctor"
    user.password_hash = hash_password(PASSWORD)
    db_session.commit()

    r = await async_client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["doctor"]["specialty"] == "General"
    assert data["doctor"]["is_approved"] is False
    assert data["verification_status"] is None

    db_session.expire_all()
    assert db_session.query(Doctor).filter(Doctor.user_id == user.id).count() == 1


async def test_forgot_password_for_pending_doctor_looks_like_success(async_client, db_session, register_doctor, sent_emails):
    await register_doctor()

    r = await async_client.post("/api/auth/forgot-password", json={"email": f"doc-{DOCTOR_NIC}@example.com"})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert sent_emails == []

    db_session.expire_all()
    assert db_session.query(User).filter(User.nic == DOCTOR_NIC).one().reset_code_hash is None


async def test_forgot_password_survives_email_failure(async_client, db_session, monkeypatch):
    import hercycle.services.email_service as email_service

    payload = {"NIC": "199512345678", "full_name": "Reset Me", "email": "reset@example.com", "password": PASSWORD}
    r = await async_client.post("/api/auth/register", json=payload)
    assert r.status_code == 201

    def _broken(*args, **kwargs):
        raise email_service.EmailDeliveryError("smtp down")

    monkeypatch.setattr(email_service, "send_email", _broken)

    r = await async_client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    assert r.status_code == 200
    assert r.json()["success"] is True

    db_session.expire_all()
    assert db_session.query(User).filter(User.email == "reset@example.com").one().reset_code_hash is None
