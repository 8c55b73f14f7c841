"""Doctor profile schemas."""
from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List, Union
from datetime import datetime


class DoctorProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=200)
    specialty: Optional[str] = Field(None, min_length=1, max_length=100)
    qualifications: Optional[List[str]] = None
    clinic_or_hospital: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=500)
    contact_number: Optional[str] = Field(None, max_length=20)
    experience_years: Optional[int] = Field(None, ge=0)

    @field_validator("qualifications", mode="before")
    def split_qualifications(cls, v: Union[str, List[str], None]):
        if v is None:
            return None
        if isinstance(v, str):
            v = v.split(",")
        return [q.strip() for q in v if q and q.strip()]


class DoctorRead(BaseModel):
    id: int
    user_id: int
    nic: str
    specialty: str
    qualifications: List[str] = []
    clinic_or_hospital: Optional[str] = None
    bio: Optional[str] = None
    contact_number: Optional[str] = None
    experience_years: Optional[int] = 0
    is_approved: bool = False
    verified: bool = False
    activated_at: Optional[datetime] = None
    rating: Optional[float] = 0.0
    total_articles: int = 0
    total_views: int = 0

    model_config = ConfigDict(from_attributes=True)


class DoctorStats(BaseModel):
    total_articles: int
    total_views: int
    rating: float
    verified: bool
    verification_status: Optional[str] = None
