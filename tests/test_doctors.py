"""Doctor endpoints integration tests: status lookup, resubmission and the approval gate."""
from conftest import DOCTOR_NIC
from hercycle.core.config import settings
from hercycle.models.doctor import Doctor
from hercycle.models.notification import Notification
from hercycle.models.user import User
from hercycle.models.verification import DoctorVerification


async def test_pending_doctor_is_gated(async_client, db_session, register_doctor):
    headers, _ = await register_doctor()

    for path in ("/api/doctor/profile", "/api/doctor/stats", "/api/doctor/notifications"):
        r = await async_client.get(path, headers=headers)
        assert r.status_code == 403, path
        assert r.json()["message"] == "Doctor verification is pending; approval required"


async def test_rejected_doctor_is_gated(async_client, db_session, register_doctor, make_admin):
    admin_headers, _ = make_admin()
    headers, _ = await register_doctor()
    await async_client.post(
        f"/api/admin/reject-doctor/{DOCTOR_NIC}", headers=admin_headers, json={"reason": "Expired license"}
    )

    r = await async_client.get("/api/doctor/profile", headers=headers)
    assert r.status_code == 403


async def test_gate_can_be_disabled(async_client, db_session, register_doctor, monkeypatch):
    monkeypatch.setattr(settings, "DOCTOR_APPROVAL_REQUIRED", False)
    headers, _ = await register_doctor()

    r = await async_client.get("/api/doctor/profile", headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["nic"] == DOCTOR_NIC


async def test_approved_doctor_reaches_profile_and_stats(async_client, db_session, register_doctor, make_admin):
    admin_headers, _ = make_admin()
    headers, _ = await register_doctor()
    r = await async_client.post(f"/api/admin/approve-doctor/{DOCTOR_NIC}", headers=admin_headers)
    assert r.status_code == 200

    r = await async_client.get("/api/doctor/profile", headers=headers)
    assert r.status_code == 200, r.text
    profile = r.json()["data"]
    assert profile["is_approved"] is True
    assert profile["verified"] is True

    r = await async_client.put(
        "/api/doctor/profile",
        headers=headers,
        json={"bio": "Women's health specialist", "qualifications": "MBBS, MD, MRCOG", "experience_years": 8},
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["bio"] == "Women's health specialist"
    assert data["qualifications"] == ["MBBS", "MD", "MRCOG"]
    assert data["experience_years"] == 8

    r = await async_client.get("/api/doctor/stats", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"] == {
        "total_articles": 0,
        "total_views": 0,
        "rating": 0.0,
        "verified": True,
        "verification_status": "approved",
    }


async def test_member_cannot_use_doctor_area(async_client, db_session, make_member):
    headers, _ = make_member()
    r = await async_client.get("/api/doctor/profile", headers=headers)
    assert r.status_code == 403
    assert r.json()["message"] == "Only doctors can access this resource"


async def test_doctor_without_profile_is_not_found(async_client, db_session, make_member):
    headers, user = make_member()
    user.role = "doctor"
    db_session.commit()

    r = await async_client.get("/api/doctor/profile", headers=headers)
    assert r.status_code == 404


async def test_verification_status_visibility(async_client, db_session, register_doctor, make_admin):
    admin_headers, _ = make_admin()
    headers, _ = await register_doctor()
    other_headers, _ = await register_doctor(nic="199565412345")

    r = await async_client.get(f"/api/doctor/verification/{DOCTOR_NIC}", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "pending"

    r = await async_client.get(f"/api/doctor/verification/{DOCTOR_NIC}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["doctor_nic"] == DOCTOR_NIC

    r = await async_client.get(f"/api/doctor/verification/{DOCTOR_NIC}", headers=other_headers)
    assert r.status_code == 403


async def test_verification_status_without_record(async_client, db_session, make_admin):
    admin_headers, _ = make_admin()

    r = await async_client.get("/api/doctor/verification/199912345678", headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"] is None
    assert body["message"] == "No verification record found"


async def test_resubmit_after_rejection(async_client, db_session, register_doctor, make_admin):
    admin_headers, _ = make_admin()
    headers, _ = await register_doctor()

    new_doc = {"license_document_url": "http://testserver/uploads/license-new.pdf"}

    # Pending applications cannot be resubmitted
    r = await async_client.post("/api/doctor/verification/resubmit", headers=headers, json=new_doc)
    assert r.status_code == 409

    await async_client.post(
        f"/api/admin/reject-doctor/{DOCTOR_NIC}", headers=admin_headers, json={"reason": "Illegible document"}
    )

    r = await async_client.post("/api/doctor/verification/resubmit", headers=headers, json=new_doc)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["status"] == "pending"
    assert data["license_document_url"] == new_doc["license_document_url"]
    assert data["rejection_reason"] is None

    db_session.expire_all()
    records = (
        db_session.query(DoctorVerification)
        .filter(DoctorVerification.doctor_nic == DOCTOR_NIC)
        .order_by(DoctorVerification.id)
        .all()
    )
    assert [v.status for v in records] == ["rejected", "pending"]

    r = await async_client.get(f"/api/doctor/verification/{DOCTOR_NIC}", headers=headers)
    assert r.json()["data"]["verification_id"] == records[1].verification_id


async def test_notifications_are_scoped_to_caller(async_client, db_session, register_doctor, make_admin):
    admin_headers, _ = make_admin()
    headers, _ = await register_doctor()
    await async_client.post(f"/api/admin/approve-doctor/{DOCTOR_NIC}", headers=admin_headers)

    other = db_session.query(User).filter(User.role == "admin").one()
    foreign = Notification(user_id=other.id, notification_type="system", title="Hi", body="Not yours")
    db_session.add(foreign)
    db_session.commit()

    r = await async_client.get("/api/doctor/notifications", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 1
    mine = body["data"][0]
    assert mine["notification_type"] == "verification_approved"
    assert mine["is_read"] is False

    r = await async_client.put(f"/api/doctor/notifications/{foreign.id}/read", headers=headers)
    assert r.status_code == 404

    r = await async_client.put(f"/api/doctor/notifications/{mine['id']}/read", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["is_read"] is True

    r = await async_client.put("/api/doctor/notifications/read-all", headers=headers)
    assert r.json()["data"] == {"updated": 0}

    r = await async_client.delete("/api/doctor/notifications/clear", headers=headers)
    assert r.json()["data"] == {"deleted": 1}

    db_session.expire_all()
    doctor = db_session.query(Doctor).filter(Doctor.nic == DOCTOR_NIC).one()
    assert db_session.query(Notification).filter(Notification.user_id == doctor.user_id).count() == 0
    assert db_session.query(Notification).count() == 1
