import re
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from hercycle.schemas.doctor import DoctorRead
from hercycle.utils.errors import InvalidNICError
from hercycle.utils.validators import parse_nic


def _check_password_strength(v: str) -> str:
    """Password must contain uppercase, lowercase, digit, special char"""
    if not re.search(r'[A-Z]', v):
        raise ValueError('Password must contain uppercase letter')
    if not re.search(r'[a-z]', v):
        raise ValueError('Password must contain lowercase letter')
    if not re.search(r'[0-9]', v):
        raise ValueError('Password must contain digit')
    if not re.search(r'[!@#$%^&*]', v):
        raise ValueError('Password must contain special character')
    return v


class RegisterRequest(BaseModel):
    """Account registration; doctors submit their credentials in the same call."""
    model_config = ConfigDict(populate_by_name=True)

    nic: str = Field(..., alias="NIC")
    full_name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)
    contact_number: Optional[str] = Field(None, max_length=20)
    user_type: str = Field("user", pattern="^(user|doctor)$")
    gender: Optional[str] = Field(None, pattern="^(male|female|prefer-not-to-say)$")
    date_of_birth: Optional[date] = None

    # Doctor applicants
    specialty: Optional[str] = Field(None, max_length=100)
    qualifications: List[str] = Field(default_factory=list)
    clinic_or_hospital: Optional[str] = Field(None, max_length=200)
    license_document_url: Optional[str] = None
    registration_details: Optional[str] = None
    terms_accepted: bool = True

    @field_validator("nic")
    def validate_nic(cls, v):
        try:
            return parse_nic(v).nic
        except InvalidNICError as exc:
            raise ValueError(exc.detail)

    @field_validator("password")
    def password_strength(cls, v):
        return _check_password_strength(v)

    @field_validator("qualifications", mode="before")
    def split_qualifications(cls, v: Union[str, List[str], None]):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [q.strip() for q in v if q and q.strip()]

    @field_validator("specialty", "license_document_url", "clinic_or_hospital")
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @model_validator(mode="after")
    def require_doctor_credentials(self):
        if self.user_type == "doctor":
            if not self.license_document_url:
                raise ValueError("License document URL is required for doctor registration")
            if not self.specialty and not self.qualifications:
                raise ValueError("Specialty or qualifications are required for doctor registration")
        return self


class LoginRequest(BaseModel):
    """Email/password login request"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    """Request to refresh access token"""
    refresh_token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyResetCodeRequest(BaseModel):
    email: EmailStr
    reset_code: str = Field(..., min_length=4, max_length=10)


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., min_length=8)
    confirm_password: str

    @field_validator("new_password")
    def password_strength(cls, v):
        return _check_password_strength(v)

    @field_validator('confirm_password')
    def passwords_match(cls, v, info):
        new_password = info.data.get('new_password') if info and info.data else None
        if new_password and v != new_password:
            raise ValueError('Passwords must match')
        return v


class UserSummary(BaseModel):
    """Public view of a user account"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    user_id: int = Field(validation_alias="id")
    NIC: str = Field(validation_alias="nic")
    full_name: str
    email: str
    role: str
    account_status: str
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    contact_number: Optional[str] = None
    created_at: Optional[datetime] = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class AuthResult(BaseModel):
    """Payload returned by register, login and refresh"""
    tokens: TokenPair
    user: UserSummary
    doctor: Optional[DoctorRead] = None
    verification_status: Optional[str] = None


class AccountView(BaseModel):
    user: UserSummary
    doctor: Optional[DoctorRead] = None
    verification_status: Optional[str] = None


class ResetTokenResult(BaseModel):
    token: str
    expires_in: int
