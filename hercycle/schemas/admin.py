"""Admin schemas."""
from pydantic import BaseModel, Field, field_validator

from hercycle.utils.validators import normalize_nic


class DashboardStats(BaseModel):
    pending_doctors: int
    approved_doctors: int
    rejected_doctors: int
    total_users: int
    total_doctors: int
    total_community_members: int


class InfoRequest(BaseModel):
    """Ask an applicant for more information about their submission."""
    nic: str = Field(..., alias="NIC")
    message: str = Field(..., min_length=1, max_length=2000)

    model_config = {"populate_by_name": True}

    @field_validator("nic")
    def clean_nic(cls, v):
        return normalize_nic(v)

    @field_validator("message")
    def message_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Message is required")
        return v.strip()
