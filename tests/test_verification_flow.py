"""End-to-end walk through registration, review, rejection, resubmission and approval."""
from conftest import DOCTOR_NIC

LICENSE = b"%PDF-1.4\n%%EOF\n"


async def test_doctor_verification_lifecycle(async_client, db_session, make_admin, sent_emails):
    admin_headers, admin = make_admin()

    # Upload the license, then register with the returned URL
    r = await async_client.post(
        "/api/upload/license",
        files={"licenseDocument": ("license.pdf", LICENSE, "application/pdf")},
    )
    assert r.status_code == 200
    license_url = r.json()["url"]

    r = await async_client.post(
        "/api/auth/register",
        json={
            "NIC": DOCTOR_NIC,
            "full_name": "Nadeesha Perera",
            "email": "nadeesha@example.com",
            "password": "StrongPass1!",
            "user_type": "doctor",
            "specialty": "gynecology",
            "qualifications": "MBBS",
            "license_document_url": license_url,
        },
    )
    assert r.status_code == 201, r.text
    doctor_headers = {"Authorization": f"Bearer {r.json()['data']['tokens']['access_token']}"}

    r = await async_client.get("/api/admin/pending-doctors", headers=admin_headers)
    assert r.json()["count"] == 1
    assert r.json()["data"][0]["license_document_url"] == license_url

    r = await async_client.get("/api/doctor/profile", headers=doctor_headers)
    assert r.status_code == 403

    r = await async_client.post(
        f"/api/admin/reject-doctor/{DOCTOR_NIC}",
        headers=admin_headers,
        json={"reason": "Illegible document"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["rejection_reason"] == "Illegible document"

    r = await async_client.get(f"/api/doctor/verification/{DOCTOR_NIC}", headers=doctor_headers)
    status = r.json()["data"]
    assert status["status"] == "rejected"
    assert status["reviewed_by"] == admin.nic

    r = await async_client.get("/api/admin/pending-doctors", headers=admin_headers)
    assert r.json()["count"] == 0

    r = await async_client.post(
        "/api/doctor/verification/resubmit",
        headers=doctor_headers,
        json={"license_document_url": license_url},
    )
    assert r.status_code == 201

    r = await async_client.post(f"/api/admin/approve-doctor/{DOCTOR_NIC}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["rejection_reason"] is None

    r = await async_client.get("/api/doctor/profile", headers=doctor_headers)
    assert r.status_code == 200
    assert r.json()["data"]["is_approved"] is True

    r = await async_client.get("/api/doctor/notifications", headers=doctor_headers)
    types = [n["notification_type"] for n in r.json()["data"]]
    assert sorted(types) == ["verification_approved", "verification_rejected"]

    r = await async_client.get("/api/admin/all-doctor-verifications?status=all", headers=admin_headers)
    assert [v["status"] for v in r.json()["data"]] == ["approved", "rejected"]

    assert [m["to"] for m in sent_emails] == ["nadeesha@example.com", "nadeesha@example.com"]


async def test_health(async_client, db_session):
    r = await async_client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "OK"
    assert body["database"] == "connected"
    assert body["timestamp"]
