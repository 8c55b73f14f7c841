from sqlalchemy import Column, Integer, String, DateTime, Date
from sqlalchemy.orm import relationship, validates
from datetime import datetime
from hercycle.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    nic = Column(String(12), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=True)
    contact_number = Column(String(20), nullable=True)

    # Profile
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)

    # Account status
    role = Column(String(20), index=True, nullable=False, default="user")
    account_status = Column(String(20), default="active", index=True, nullable=False)

    # Password reset
    reset_code_hash = Column(String(64), nullable=True)
    reset_code_expires_at = Column(DateTime, nullable=True)
    reset_code_attempts = Column(Integer, default=0)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    doctor = relationship(
        "Doctor",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"

    @validates("email")
    def normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("contact_number")
    def normalize_contact(self, key, value):
        return value or None
