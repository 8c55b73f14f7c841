"""Doctor credential verification record and its review lifecycle."""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime
from hercycle.core.database import Base
from hercycle.core.constants import VerificationStatus, VERIFICATION_TRANSITIONS
from hercycle.utils.errors import InvalidTransitionError, ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_verification_id(nic: str, at: datetime | None = None) -> str:
    at = at or datetime.now(timezone.utc)
    return f"VER_{int(at.timestamp() * 1000)}_{nic}"


class DoctorVerification(Base):
    __tablename__ = "doctor_verifications"

    id = Column(Integer, primary_key=True, index=True)
    verification_id = Column(String(64), unique=True, nullable=False)
    doctor_nic = Column(String(12), index=True, nullable=False)

    license_document_url = Column(Text, nullable=False)
    registration_details = Column(Text, nullable=True)
    terms_accepted = Column(Boolean, default=False)

    status = Column(String(20), default=VerificationStatus.PENDING.value, index=True, nullable=False)
    submitted_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(12), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<DoctorVerification {self.verification_id} {self.status}>"

    @property
    def current_status(self) -> VerificationStatus:
        return VerificationStatus(self.status)

    def can_transition_to(self, target: VerificationStatus) -> bool:
        return target in VERIFICATION_TRANSITIONS[self.current_status]

    def _transition(self, target: VerificationStatus, reviewer: str) -> datetime:
        if not self.can_transition_to(target):
            raise InvalidTransitionError(
                f"Verification is already {self.current_status.value}; cannot move to {target.value}"
            )
        now = _utcnow()
        self.status = target.value
        self.reviewed_at = now
        self.reviewed_by = reviewer
        return now

    def approve(self, reviewer: str, notes: str | None = None) -> datetime:
        reviewed_at = self._transition(VerificationStatus.APPROVED, reviewer)
        self.rejection_reason = None
        self.notes = notes or "Approved by admin"
        return reviewed_at

    def reject(self, reviewer: str, reason: str, notes: str | None = None) -> datetime:
        if not reason or not reason.strip():
            raise ValidationError("Rejection reason is required")
        reviewed_at = self._transition(VerificationStatus.REJECTED, reviewer)
        self.rejection_reason = reason
        self.notes = notes or ""
        return reviewed_at
