from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, DateTime, Float, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from hercycle.core.database import Base
from hercycle.models.verification import DoctorVerification


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    nic = Column(String(12), unique=True, index=True, nullable=False)

    # Professional details
    specialty = Column(String(100), nullable=False, default="General")
    qualifications = Column(JSON, nullable=False, default=list)
    clinic_or_hospital = Column(String(200), nullable=True)
    bio = Column(Text, nullable=True)
    contact_number = Column(String(20), nullable=True)
    experience_years = Column(Integer, default=0)

    # Written by the approve transition
    is_approved = Column(Boolean, default=False, index=True)
    verified = Column(Boolean, default=False)
    activated_at = Column(DateTime, nullable=True)
    revoked_at = Column(DateTime, nullable=True)
    revoke_reason = Column(Text, nullable=True)

    # Dashboard counters
    rating = Column(Float, default=0.0)
    total_articles = Column(Integer, default=0)
    total_views = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="doctor")
    verifications = relationship(
        "DoctorVerification",
        primaryjoin="Doctor.nic==foreign(DoctorVerification.doctor_nic)",
        order_by=lambda: [DoctorVerification.submitted_at.desc(), DoctorVerification.id.desc()],
        viewonly=True,
    )
