"""Doctor endpoints: verification status, resubmission and the gated doctor area."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from hercycle.core.constants import UserRole
from hercycle.core.database import get_db
from hercycle.dependencies.auth import get_current_doctor, get_current_user, get_doctor_user
from hercycle.dependencies.rate_limit import rate_limit
from hercycle.models.doctor import Doctor
from hercycle.schemas.common import Envelope
from hercycle.schemas.doctor import DoctorProfileUpdate, DoctorRead, DoctorStats
from hercycle.schemas.notification import ClearedNotifications, MarkedNotifications, NotificationRead
from hercycle.schemas.verification import ResubmitVerificationRequest, VerificationRead
from hercycle.services.doctor_service import DoctorService
from hercycle.services.notification_service import NotificationService
from hercycle.services.verification_service import VerificationService
from hercycle.utils.errors import ForbiddenError
from hercycle.utils.validators import normalize_nic

router = APIRouter(prefix="/api/doctor", tags=["doctors"])


@router.get("/verification/{nic}", response_model=Envelope[VerificationRead])
async def verification_status(
    nic: str,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current verification record for a doctor. Open to that doctor and to admins."""
    nic = normalize_nic(nic)
    if current_user["role"] != UserRole.ADMIN.value and current_user["nic"] != nic:
        raise ForbiddenError("You can only view your own verification status")

    verification = VerificationService.get_current_for_nic(db, nic)
    if verification is None:
        return Envelope(message="No verification record found", data=None)
    return Envelope(data=VerificationRead.model_validate(verification))


@router.post("/verification/resubmit", response_model=Envelope[VerificationRead], status_code=201)
async def resubmit_verification(
    payload: ResubmitVerificationRequest,
    current_user = Depends(get_doctor_user),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    doctor = DoctorService.ensure_doctor(db, current_user["sub"])
    verification = VerificationService.resubmit(
        db,
        doctor,
        license_document_url=payload.license_document_url,
        registration_details=payload.registration_details,
        terms_accepted=payload.terms_accepted,
    )
    return Envelope(
        message="Verification resubmitted. Your credentials are pending admin verification.",
        data=VerificationRead.model_validate(verification),
    )


@router.get("/profile", response_model=Envelope[DoctorRead])
async def get_profile(doctor: Doctor = Depends(get_current_doctor)):
    return Envelope(data=DoctorRead.model_validate(doctor))


@router.put("/profile", response_model=Envelope[DoctorRead])
async def update_profile(
    payload: DoctorProfileUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    doctor = DoctorService.update_profile(db, doctor, payload.model_dump(exclude_none=True))
    return Envelope(message="Profile updated successfully", data=DoctorRead.model_validate(doctor))


@router.get("/stats", response_model=Envelope[DoctorStats])
async def get_stats(
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    return Envelope(data=DoctorService.stats(db, doctor))


@router.get("/notifications", response_model=Envelope[list[NotificationRead]])
async def list_notifications(
    unread_only: bool = False,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    items = NotificationService.list_for_user(db, doctor.user_id, unread_only=unread_only)
    return Envelope(
        data=[NotificationRead.model_validate(n) for n in items],
        count=len(items),
    )


@router.put("/notifications/read-all", response_model=Envelope[MarkedNotifications])
async def mark_all_notifications_read(
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    updated = NotificationService.mark_all_read(db, doctor.user_id)
    return Envelope(message="All notifications marked as read", data=MarkedNotifications(updated=updated))


@router.put("/notifications/{notification_id}/read", response_model=Envelope[NotificationRead])
async def mark_notification_read(
    notification_id: int,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    notification = NotificationService.mark_read(db, doctor.user_id, notification_id)
    return Envelope(message="Notification marked as read", data=NotificationRead.model_validate(notification))


@router.delete("/notifications/clear", response_model=Envelope[ClearedNotifications])
async def clear_notifications(
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    deleted = NotificationService.clear(db, doctor.user_id)
    return Envelope(message="Notifications cleared", data=ClearedNotifications(deleted=deleted))
