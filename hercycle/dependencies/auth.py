from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from hercycle.core.config import settings
from hercycle.core.constants import AccountStatus, BLOCKED_ACCOUNT_STATUSES, UserRole, VerificationStatus
from hercycle.core.database import get_db
from hercycle.core.security import decode_token
from hercycle.models.doctor import Doctor
from hercycle.models.user import User
from hercycle.models.session import UserSession
from hercycle.services.verification_service import VerificationService
from hercycle.utils.errors import AuthError, ForbiddenError, NotFoundError

security = HTTPBearer(auto_error=False)

BLOCKED_VALUES = {s.value for s in BLOCKED_ACCOUNT_STATUSES}


def get_current_user_from_token(
    token: str,
    db: Session,
):
    """
    Verify JWT token string and return the token payload.

    The access token must map to a live session and to an account that is
    neither suspended nor deleted.
    """
    payload = decode_token(token)

    if payload is None or payload.get("type") is not None:
        raise AuthError("Invalid token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthError("Invalid token payload")
    jti = payload.get("jti")

    # Check if token is revoked
    session = db.query(UserSession).filter(
        UserSession.user_id == user_id,
        UserSession.token_jti == jti,
        UserSession.is_revoked == False,
    ).first()

    if not session:
        raise AuthError("Token revoked or invalid")

    if session.access_expired():
        raise AuthError("Token expired")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthError("User not found")

    if user.account_status in BLOCKED_VALUES:
        raise ForbiddenError(f"Account is {user.account_status}")

    return {
        **payload,
        "jti": jti,
        "role": user.role,
        "nic": user.nic,
    }


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
):
    """Verify JWT token and return current user"""
    if credentials is None:
        raise AuthError("Not authenticated")
    return get_current_user_from_token(credentials.credentials, db)


async def get_current_admin(
    current_user = Depends(get_current_user),
):
    """Verify current user is an admin"""
    if current_user.get("role") != UserRole.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return current_user


async def get_doctor_user(
    current_user = Depends(get_current_user),
):
    """Verify current user holds the doctor role, approved or not"""
    if current_user.get("role") != UserRole.DOCTOR.value:
        raise ForbiddenError("Only doctors can access this resource")
    return current_user


def get_current_doctor(
    current_user = Depends(get_doctor_user),
    db: Session = Depends(get_db),
) -> Doctor:
    """Return the caller's doctor profile once their credentials are approved.

    With ``DOCTOR_APPROVAL_REQUIRED`` off, any doctor with a profile passes
    unless an admin has revoked their verification.
    """
    doctor = db.query(Doctor).filter(Doctor.user_id == int(current_user["sub"])).first()
    if not doctor:
        raise NotFoundError("Doctor profile not found")

    if doctor.revoked_at is not None:
        raise ForbiddenError("Doctor verification has been revoked")

    if settings.DOCTOR_APPROVAL_REQUIRED:
        latest = VerificationService.get_current_for_nic(db, doctor.nic)
        if latest is None or latest.status != VerificationStatus.APPROVED.value:
            status_label = latest.status if latest else "missing"
            raise ForbiddenError(f"Doctor verification is {status_label}; approval required")
        if doctor.user.account_status != AccountStatus.ACTIVE.value:
            raise ForbiddenError("Doctor account is not active")

    return doctor
