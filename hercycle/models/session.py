"""Server-side record of an issued access/refresh token pair."""
from datetime import datetime, timezone
import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey
from sqlalchemy.orm import relationship
from hercycle.core.database import Base


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    token_jti = Column(String(128), nullable=False, index=True)
    refresh_jti = Column(String(128), nullable=False, index=True)
    refresh_token_hash = Column(String(128), nullable=False)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    expires_at = Column(DateTime, nullable=True)
    refresh_expires_at = Column(DateTime, nullable=True)

    is_revoked = Column(Boolean, default=False, index=True)
    revoked_at = Column(DateTime, nullable=True)
    revoked_reason = Column(String(255), nullable=True)

    user = relationship("User", back_populates="sessions")

    def access_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        return bool(self.expires_at and self.expires_at < now)

    def revoke(self, reason: str) -> None:
        self.is_revoked = True
        self.revoked_at = datetime.now(timezone.utc).replace(tzinfo=None)
        self.revoked_reason = reason
        self.refresh_token_hash = ""
