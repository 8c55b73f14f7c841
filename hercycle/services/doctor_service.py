from datetime import datetime, timezone
from sqlalchemy.orm import Session
from hercycle.models.doctor import Doctor
from hercycle.schemas.doctor import DoctorStats
from hercycle.services.verification_service import VerificationService
from hercycle.utils.errors import NotFoundError

PROFILE_FIELDS = (
    "specialty",
    "qualifications",
    "clinic_or_hospital",
    "bio",
    "contact_number",
    "experience_years",
)


class DoctorService:
    @staticmethod
    def ensure_doctor(db: Session, user_id: int) -> Doctor:
        doctor = db.query(Doctor).filter(Doctor.user_id == int(user_id)).first()
        if not doctor:
            raise NotFoundError("Doctor profile not found")
        return doctor

    @staticmethod
    def update_profile(db: Session, doctor: Doctor, payload: dict) -> Doctor:
        for field in PROFILE_FIELDS:
            if field in payload and payload[field] is not None:
                setattr(doctor, field, payload[field])

        # Name and phone live on the account as well
        if payload.get("full_name"):
            doctor.user.full_name = payload["full_name"]
        if payload.get("contact_number"):
            doctor.user.contact_number = payload["contact_number"]

        doctor.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def stats(db: Session, doctor: Doctor) -> DoctorStats:
        latest = VerificationService.get_current_for_nic(db, doctor.nic)
        return DoctorStats(
            total_articles=doctor.total_articles or 0,
            total_views=doctor.total_views or 0,
            rating=doctor.rating or 0.0,
            verified=bool(doctor.verified),
            verification_status=latest.status if latest else None,
        )
