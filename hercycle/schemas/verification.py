from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VerificationRead(BaseModel):
    id: int
    verification_id: str
    doctor_nic: str
    license_document_url: str
    registration_details: Optional[str] = None
    terms_accepted: bool = False
    status: str
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DoctorInfo(BaseModel):
    specialty: Optional[str] = None
    qualifications: List[str] = []
    clinic_or_hospital: Optional[str] = None
    is_approved: bool = False

    model_config = ConfigDict(from_attributes=True)


class ApplicantInfo(BaseModel):
    full_name: str
    email: str
    contact_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    account_status: str

    model_config = ConfigDict(from_attributes=True)


class VerificationListItem(VerificationRead):
    """Verification joined with the applicant's doctor profile and account."""
    doctor_info: Optional[DoctorInfo] = None
    user_info: Optional[ApplicantInfo] = None


class ApproveDoctorRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class RejectDoctorRequest(BaseModel):
    reason: str = Field(..., max_length=1000)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("reason")
    def reason_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Rejection reason is required")
        return v


class ResubmitVerificationRequest(BaseModel):
    license_document_url: str = Field(..., min_length=1)
    registration_details: Optional[str] = None
    terms_accepted: bool = True

    @field_validator("license_document_url")
    def url_not_blank(cls, v):
        if not v.strip():
            raise ValueError("License document URL is required")
        return v.strip()


class ReviewResult(BaseModel):
    """Returned by approve and reject."""
    doctor_nic: str
    verification_id: str
    status: str
    reviewed_at: datetime
    reviewed_by: str
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None


class RevokeDoctorRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class RevocationResult(BaseModel):
    doctor_nic: str
    is_approved: bool
    verified: bool
    revoked_at: datetime
    revoked_by: str
    revoke_reason: str


class AuditEntry(BaseModel):
    """One admin action taken on a doctor."""
    admin_id: str
    action: str
    created_at: datetime


class VerificationHistoryItem(BaseModel):
    """A doctor with their latest verification and the admin actions on their account."""
    doctor_nic: str
    user_name: str = "Unknown"
    user_email: Optional[str] = None
    specialty: Optional[str] = None
    is_approved: bool = False
    verified: bool = False
    verified_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    revoke_reason: Optional[str] = None
    latest_verification: Optional[VerificationRead] = None
    activity: List[AuditEntry] = []
