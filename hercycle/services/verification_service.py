"""Doctor credential verification: submission, review queue, decisions and history.

Approve and reject write the verification record, the doctor's profile, the
doctor's account status, an in-app notification and an admin audit entry in
one commit. Revoke touches only the profile, a notification and the audit
trail. Emails go out only after the commit succeeds; a failed email is
logged and never rolls the decision back.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from hercycle.core.constants import (
    ACTIVE_VERIFICATION_STATUSES,
    AccountStatus,
    UserRole,
    VerificationStatus,
)
from hercycle.models.audit import AdminActivityLog
from hercycle.models.doctor import Doctor
from hercycle.models.user import User
from hercycle.models.verification import DoctorVerification, build_verification_id
from hercycle.schemas.admin import DashboardStats
from hercycle.schemas.verification import (
    ApplicantInfo,
    AuditEntry,
    DoctorInfo,
    ReviewResult,
    RevocationResult,
    VerificationHistoryItem,
    VerificationListItem,
    VerificationRead,
)
from hercycle.services import email_service
from hercycle.services.notification_service import NotificationService
from hercycle.utils.errors import ConflictError, NotFoundError, ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)

RELATED_ENTITY = "doctor_verification"
DEFAULT_REVOKE_REASON = "Revoked by admin"


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _audit(reviewer_nic: str, nic: str, action: str) -> AdminActivityLog:
    return AdminActivityLog(admin_id=reviewer_nic, activity=f"doctor:{nic}:{action}")


@dataclass
class Page:
    items: list
    total: int
    page: int
    limit: int


def parse_status_filter(value: Optional[str]) -> Optional[VerificationStatus]:
    """Map a ``status`` query value to a lifecycle state; blank or ``all`` means no filter."""
    if value is None or not value.strip() or value.strip().lower() == "all":
        return None
    try:
        return VerificationStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in VerificationStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed values: {allowed}")


def default_registration_details(qualifications: list[str], at: datetime) -> str:
    quals = ", ".join(qualifications) if qualifications else "Not provided"
    return f"Registered on {at.isoformat()}. Qualifications: {quals}"


class VerificationService:
    @staticmethod
    def get_current_for_nic(db: Session, nic: str) -> Optional[DoctorVerification]:
        """Latest record for a doctor, which is the one that decides access."""
        return (
            db.query(DoctorVerification)
            .filter(DoctorVerification.doctor_nic == nic)
            .order_by(DoctorVerification.submitted_at.desc(), DoctorVerification.id.desc())
            .first()
        )

    @staticmethod
    def submit(
        db: Session,
        nic: str,
        license_document_url: str,
        registration_details: Optional[str] = None,
        terms_accepted: bool = True,
        open_statuses=ACTIVE_VERIFICATION_STATUSES,
    ) -> DoctorVerification:
        """Stage a new pending record. The caller commits.

        Refuses when the doctor already holds a record in ``open_statuses``.
        """
        if not license_document_url or not license_document_url.strip():
            raise ValidationError("License document URL is required")

        open_record = (
            db.query(DoctorVerification)
            .filter(
                DoctorVerification.doctor_nic == nic,
                DoctorVerification.status.in_([s.value for s in open_statuses]),
            )
            .first()
        )
        if open_record:
            raise ConflictError(f"Doctor already has a {open_record.status} verification")

        verification = DoctorVerification(
            verification_id=build_verification_id(nic),
            doctor_nic=nic,
            license_document_url=license_document_url.strip(),
            registration_details=registration_details,
            terms_accepted=terms_accepted,
            status=VerificationStatus.PENDING.value,
        )
        db.add(verification)
        return verification

    @staticmethod
    def resubmit(
        db: Session,
        doctor: Doctor,
        license_document_url: str,
        registration_details: Optional[str] = None,
        terms_accepted: bool = True,
    ) -> DoctorVerification:
        """Start a new review after a rejection or a revoked approval."""
        latest = VerificationService.get_current_for_nic(db, doctor.nic)
        revoked = doctor.revoked_at is not None
        if latest is not None and latest.status != VerificationStatus.REJECTED.value and not revoked:
            raise ConflictError(
                f"Verification is {latest.status}; only rejected or revoked applications can be resubmitted"
            )

        verification = VerificationService.submit(
            db,
            nic=doctor.nic,
            license_document_url=license_document_url,
            registration_details=registration_details
            or default_registration_details(doctor.qualifications or [], _now()),
            terms_accepted=terms_accepted,
            open_statuses=(VerificationStatus.PENDING,) if revoked else ACTIVE_VERIFICATION_STATUSES,
        )
        doctor.user.account_status = AccountStatus.PENDING.value
        db.commit()
        db.refresh(verification)
        logger.info("Doctor %s resubmitted verification %s", doctor.nic, verification.verification_id)
        return verification

    @staticmethod
    def _joined_query(db: Session):
        return (
            db.query(DoctorVerification, Doctor, User)
            .outerjoin(Doctor, Doctor.nic == DoctorVerification.doctor_nic)
            .outerjoin(User, User.nic == DoctorVerification.doctor_nic)
        )

    @staticmethod
    def _list_item(verification: DoctorVerification, doctor: Optional[Doctor], user: Optional[User]) -> VerificationListItem:
        item = VerificationListItem.model_validate(verification)
        if doctor is not None:
            item.doctor_info = DoctorInfo.model_validate(doctor)
        if user is not None:
            item.user_info = ApplicantInfo.model_validate(user)
        return item

    @staticmethod
    def list_pending(db: Session) -> list[VerificationListItem]:
        rows = (
            VerificationService._joined_query(db)
            .filter(DoctorVerification.status == VerificationStatus.PENDING.value)
            .order_by(DoctorVerification.submitted_at.desc(), DoctorVerification.id.desc())
            .all()
        )
        return [VerificationService._list_item(v, d, u) for v, d, u in rows]

    @staticmethod
    def list_all(db: Session, status: Optional[str] = None, page: int = 1, limit: int = 20) -> Page:
        status_filter = parse_status_filter(status)

        query = VerificationService._joined_query(db)
        count_query = db.query(func.count(DoctorVerification.id))
        if status_filter is not None:
            query = query.filter(DoctorVerification.status == status_filter.value)
            count_query = count_query.filter(DoctorVerification.status == status_filter.value)

        total = count_query.scalar() or 0
        rows = (
            query.order_by(DoctorVerification.submitted_at.desc(), DoctorVerification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        items = [VerificationService._list_item(v, d, u) for v, d, u in rows]
        return Page(items=items, total=total, page=page, limit=limit)

    @staticmethod
    def _record_for_review(db: Session, nic: str) -> DoctorVerification:
        verification = VerificationService.get_current_for_nic(db, nic)
        if verification is None:
            raise NotFoundError("No verification found for this doctor")
        return verification

    @staticmethod
    def _doctor_with_user(db: Session, nic: str) -> tuple[Optional[Doctor], Optional[User]]:
        doctor = db.query(Doctor).filter(Doctor.nic == nic).first()
        return doctor, (doctor.user if doctor else None)

    @staticmethod
    def approve(db: Session, nic: str, reviewer_nic: str, notes: Optional[str] = None) -> ReviewResult:
        verification = VerificationService._record_for_review(db, nic)
        reviewed_at = verification.approve(reviewer_nic, notes)

        doctor, user = VerificationService._doctor_with_user(db, nic)
        if doctor is not None:
            doctor.is_approved = True
            doctor.verified = True
            doctor.activated_at = reviewed_at
            doctor.revoked_at = None
            doctor.revoke_reason = None
            user.account_status = AccountStatus.ACTIVE.value
            NotificationService.create(
                db,
                user_id=user.id,
                notification_type="verification_approved",
                title="Verification approved",
                body="Your doctor account has been approved. You can now access doctor features.",
                related_entity_type=RELATED_ENTITY,
                related_entity_id=verification.verification_id,
            )
        else:
            logger.warning("Approved verification %s has no doctor profile", verification.verification_id)

        db.add(_audit(reviewer_nic, nic, "approved"))
        db.commit()
        db.refresh(verification)
        logger.info("Verification %s approved by %s", verification.verification_id, reviewer_nic)

        if user is not None:
            try:
                email_service.send_doctor_approval_email(user.email, user.full_name, verification.notes)
            except email_service.EmailDeliveryError:
                logger.exception("Approval email to %s failed", user.email)

        return ReviewResult.model_validate(verification, from_attributes=True)

    @staticmethod
    def reject(
        db: Session,
        nic: str,
        reviewer_nic: str,
        reason: str,
        notes: Optional[str] = None,
    ) -> ReviewResult:
        verification = VerificationService._record_for_review(db, nic)
        verification.reject(reviewer_nic, reason, notes)

        doctor, user = VerificationService._doctor_with_user(db, nic)
        if doctor is not None:
            doctor.is_approved = False
            doctor.verified = False
            user.account_status = AccountStatus.PENDING.value
            NotificationService.create(
                db,
                user_id=user.id,
                notification_type="verification_rejected",
                title="Verification rejected",
                body=f"Your doctor verification was rejected. Reason: {reason}",
                related_entity_type=RELATED_ENTITY,
                related_entity_id=verification.verification_id,
            )
        else:
            logger.warning("Rejected verification %s has no doctor profile", verification.verification_id)

        db.add(_audit(reviewer_nic, nic, "rejected"))
        db.commit()
        db.refresh(verification)
        logger.info("Verification %s rejected by %s", verification.verification_id, reviewer_nic)

        if user is not None:
            try:
                email_service.send_doctor_rejection_email(user.email, user.full_name, reason, notes)
            except email_service.EmailDeliveryError:
                logger.exception("Rejection email to %s failed", user.email)

        return ReviewResult.model_validate(verification, from_attributes=True)

    @staticmethod
    def revoke(db: Session, nic: str, reviewer_nic: str, reason: Optional[str] = None) -> RevocationResult:
        """Withdraw an approved doctor's access. The approved record itself stays as history."""
        doctor, user = VerificationService._doctor_with_user(db, nic)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        if not doctor.is_approved:
            raise ConflictError("Doctor is not currently verified")

        reason = (reason or "").strip() or DEFAULT_REVOKE_REASON
        doctor.is_approved = False
        doctor.verified = False
        doctor.revoked_at = _now()
        doctor.revoke_reason = reason
        NotificationService.create(
            db,
            user_id=user.id,
            notification_type="verification_revoked",
            title="Verification revoked",
            body=f"Your doctor verification has been revoked. Reason: {reason}",
            related_entity_type="doctor",
            related_entity_id=nic,
        )
        db.add(_audit(reviewer_nic, nic, "revoked"))
        db.commit()
        logger.info("Doctor %s verification revoked by %s", nic, reviewer_nic)

        try:
            email_service.send_doctor_revocation_email(user.email, user.full_name, reason)
        except email_service.EmailDeliveryError:
            logger.exception("Revocation email to %s failed", user.email)

        return RevocationResult(
            doctor_nic=nic,
            is_approved=doctor.is_approved,
            verified=doctor.verified,
            revoked_at=doctor.revoked_at,
            revoked_by=reviewer_nic,
            revoke_reason=reason,
        )

    @staticmethod
    def history(db: Session, page: int = 1, limit: int = 20) -> Page:
        """Every doctor, newest first, with the latest verification and the admin actions taken."""
        total = db.query(func.count(Doctor.id)).scalar() or 0
        doctors = (
            db.query(Doctor)
            .order_by(Doctor.created_at.desc(), Doctor.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        nics = [d.nic for d in doctors]
        activity: dict[str, list[AuditEntry]] = {nic: [] for nic in nics}
        if nics:
            rows = (
                db.query(AdminActivityLog)
                .filter(or_(*[AdminActivityLog.activity.like(f"doctor:{nic}:%") for nic in nics]))
                .order_by(AdminActivityLog.created_at.desc(), AdminActivityLog.id.desc())
                .all()
            )
            for row in rows:
                _, nic, action = row.activity.split(":", 2)
                activity[nic].append(AuditEntry(admin_id=row.admin_id, action=action, created_at=row.created_at))

        items = []
        for doctor in doctors:
            latest = doctor.verifications[0] if doctor.verifications else None
            user = doctor.user
            items.append(
                VerificationHistoryItem(
                    doctor_nic=doctor.nic,
                    user_name=user.full_name if user else "Unknown",
                    user_email=user.email if user else None,
                    specialty=doctor.specialty,
                    is_approved=bool(doctor.is_approved),
                    verified=bool(doctor.verified),
                    verified_at=doctor.activated_at,
                    revoked_at=doctor.revoked_at,
                    revoke_reason=doctor.revoke_reason,
                    latest_verification=VerificationRead.model_validate(latest) if latest else None,
                    activity=activity[doctor.nic],
                )
            )
        return Page(items=items, total=total, page=page, limit=limit)

    @staticmethod
    def dashboard_stats(db: Session) -> DashboardStats:
        counts = dict(
            db.query(DoctorVerification.status, func.count(DoctorVerification.id))
            .group_by(DoctorVerification.status)
            .all()
        )
        return DashboardStats(
            pending_doctors=counts.get(VerificationStatus.PENDING.value, 0),
            approved_doctors=counts.get(VerificationStatus.APPROVED.value, 0),
            rejected_doctors=counts.get(VerificationStatus.REJECTED.value, 0),
            total_users=db.query(User).filter(User.role != UserRole.ADMIN.value).count(),
            total_doctors=db.query(Doctor).count(),
            total_community_members=db.query(User).filter(User.role == UserRole.USER.value).count(),
        )

    @staticmethod
    def request_info(db: Session, nic: str, reviewer_nic: str, message: str) -> None:
        doctor, user = VerificationService._doctor_with_user(db, nic)
        if doctor is None:
            raise NotFoundError("Doctor not found")

        latest = VerificationService.get_current_for_nic(db, nic)
        NotificationService.create(
            db,
            user_id=user.id,
            notification_type="verification_info_requested",
            title="More information needed",
            body=message,
            related_entity_type=RELATED_ENTITY,
            related_entity_id=latest.verification_id if latest else None,
        )
        db.add(_audit(reviewer_nic, nic, "info_requested"))
        db.commit()

        try:
            email_service.send_doctor_info_request_email(user.email, user.full_name, message)
        except email_service.EmailDeliveryError:
            logger.exception("Information request email to %s failed", user.email)
            raise ServiceUnavailableError("Failed to send information request email")
