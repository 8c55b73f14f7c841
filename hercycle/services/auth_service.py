from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from hercycle.models.user import User
from hercycle.models.doctor import Doctor
from hercycle.models.session import UserSession
from hercycle.core.constants import AccountStatus, BLOCKED_ACCOUNT_STATUSES, UserRole
from hercycle.core.security import (
    hash_password, verify_password, create_access_token,
    create_refresh_token, create_password_reset_token,
    decode_password_reset_token, decode_refresh_token,
    hash_token, generate_reset_code, verify_reset_code,
)
from hercycle.core.config import settings
from hercycle.schemas.auth import (
    AccountView, AuthResult, RegisterRequest, ResetTokenResult, TokenPair, UserSummary,
)
from hercycle.schemas.doctor import DoctorRead
from hercycle.services import email_service
from hercycle.services.verification_service import VerificationService, default_registration_details
from hercycle.utils.errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from hercycle.utils.validators import parse_nic
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)

BLOCKED_VALUES = {s.value for s in BLOCKED_ACCOUNT_STATUSES}


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuthService:

    @staticmethod
    def register(db: Session, payload: RegisterRequest, ip_address: str = "", user_agent: str = "") -> AuthResult:
        """
        Create an account. Doctor applicants also get a doctor profile and a
        pending verification record; all rows are written in one commit.
        """
        existing = db.query(User).filter(
            or_(User.nic == payload.nic, User.email == payload.email.lower())
        ).first()
        if existing:
            if existing.nic == payload.nic:
                raise ConflictError("User with this NIC already exists")
            raise ConflictError("User with this email already exists")

        nic_info = parse_nic(payload.nic)
        is_doctor = payload.user_type == UserRole.DOCTOR.value
        now = _now()

        user = User(
            nic=nic_info.nic,
            email=payload.email,
            full_name=payload.full_name,
            password_hash=hash_password(payload.password),
            contact_number=payload.contact_number,
            gender=payload.gender or nic_info.gender,
            date_of_birth=payload.date_of_birth or nic_info.date_of_birth,
            role=UserRole.DOCTOR.value if is_doctor else UserRole.USER.value,
            account_status=AccountStatus.PENDING.value if is_doctor else AccountStatus.ACTIVE.value,
        )
        db.add(user)

        if is_doctor:
            user.doctor = Doctor(
                nic=nic_info.nic,
                specialty=payload.specialty or "general_practice",
                qualifications=payload.qualifications,
                clinic_or_hospital=payload.clinic_or_hospital,
                contact_number=payload.contact_number,
            )
            VerificationService.submit(
                db,
                nic=nic_info.nic,
                license_document_url=payload.license_document_url,
                registration_details=payload.registration_details
                or default_registration_details(payload.qualifications, now),
                terms_accepted=payload.terms_accepted,
            )

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User with this NIC or email already exists")
        db.refresh(user)

        logger.info("Registered %s account %s", user.role, user.nic)
        return AuthService._issue_tokens(db, user, ip_address, user_agent)

    @staticmethod
    def login(db: Session, email: str, password: str, ip_address: str = "", user_agent: str = "") -> AuthResult:
        """
        Email/password login
        - Verify credentials
        - Create access & refresh tokens
        - Track session

        Doctors awaiting review may log in; the doctor routes decide what they see.
        """
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.password_hash or ""):
            raise AuthError("Invalid email or password")

        if user.account_status in BLOCKED_VALUES:
            raise ForbiddenError(f"Account is {user.account_status}. Contact support.")

        if user.role == UserRole.DOCTOR.value and user.doctor is None:
            user.doctor = Doctor(nic=user.nic, specialty="General", contact_number=user.contact_number)
            logger.info("Created placeholder doctor profile for %s", user.nic)

        user.last_login = _now()
        return AuthService._issue_tokens(db, user, ip_address, user_agent)

    @staticmethod
    def refresh_tokens(
        db: Session,
        refresh_token: str,
        ip_address: str = "",
        user_agent: str = "",
    ) -> AuthResult:
        """
        Refresh access token using a valid refresh token with rotation.
        - Validate refresh JWT and session record
        - Rotate refresh token (new jti, hashed storage)
        - Issue new access token
        """
        payload = decode_refresh_token(refresh_token)
        if not payload or not payload.get("jti"):
            raise AuthError("Invalid refresh token")

        user_id = int(payload.get("sub"))
        session = (
            db.query(UserSession)
            .filter(
                UserSession.user_id == user_id,
                UserSession.refresh_jti == payload["jti"],
                UserSession.is_revoked == False,
            )
            .first()
        )
        if not session:
            raise AuthError("Invalid or revoked refresh token")

        now = _now()
        if session.refresh_expires_at and session.refresh_expires_at < now:
            session.revoke("refresh_expired")
            db.commit()
            raise AuthError("Refresh token expired")

        if session.refresh_token_hash != hash_token(refresh_token):
            session.revoke("refresh_mismatch")
            db.commit()
            raise AuthError("Invalid refresh token")

        user = session.user
        if user.account_status in BLOCKED_VALUES:
            session.revoke(f"account_{user.account_status}")
            db.commit()
            raise ForbiddenError(f"Account is {user.account_status}. Contact support.")

        tokens = AuthService._rotate_session(session, user, ip_address, user_agent)
        db.commit()
        return AuthService._auth_result(db, user, tokens)

    @staticmethod
    def logout(db: Session, user_id: int, jti: str) -> None:
        session = (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.token_jti == jti)
            .first()
        )
        if session and not session.is_revoked:
            session.revoke("logout")
            db.commit()

    @staticmethod
    def me(db: Session, user_id: int) -> AccountView:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        view = AuthService._account_view(db, user)
        return AccountView(**view)

    @staticmethod
    def forgot_password(db: Session, email: str) -> None:
        """Email a one-time reset code.

        Unknown addresses, inactive accounts and delivery failures all get the
        same response as a successful send.
        """
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        if user.account_status != AccountStatus.ACTIVE.value:
            logger.info("Password reset requested for %s account %s", user.account_status, user.id)
            return

        code = generate_reset_code()
        user.reset_code_hash = hash_token(code)
        user.reset_code_expires_at = _now() + timedelta(minutes=settings.RESET_CODE_EXPIRE_MINUTES)
        user.reset_code_attempts = 0
        db.commit()

        try:
            email_service.send_password_reset_code_email(user.email, user.full_name, code)
        except email_service.EmailDeliveryError:
            logger.exception("Failed to send password reset code to user %s", user.id)
            # The code never reached the user
            user.reset_code_hash = None
            user.reset_code_expires_at = None
            db.commit()

    @staticmethod
    def verify_reset_code(db: Session, email: str, code: str) -> ResetTokenResult:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not user.reset_code_hash:
            raise ValidationError("Invalid or expired reset code")

        if user.reset_code_expires_at is None or user.reset_code_expires_at < _now():
            user.reset_code_hash = None
            db.commit()
            raise ValidationError("Invalid or expired reset code")

        if (user.reset_code_attempts or 0) >= settings.RESET_CODE_MAX_ATTEMPTS:
            user.reset_code_hash = None
            db.commit()
            raise ForbiddenError("Too many invalid attempts. Request a new code.")

        if not verify_reset_code(user.reset_code_hash, code):
            user.reset_code_attempts = (user.reset_code_attempts or 0) + 1
            db.commit()
            remaining = max(settings.RESET_CODE_MAX_ATTEMPTS - user.reset_code_attempts, 0)
            raise ValidationError(f"Invalid reset code. {remaining} attempts remaining.")

        user.reset_code_hash = None
        user.reset_code_expires_at = None
        user.reset_code_attempts = 0
        db.commit()

        token, _ = create_password_reset_token(user.id)
        return ResetTokenResult(token=token, expires_in=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES * 60)

    @staticmethod
    def reset_password(db: Session, token: str, new_password: str) -> None:
        """Reset the user's password and sign out every session."""
        payload = decode_password_reset_token(token)
        if not payload:
            raise AuthError("Invalid or expired reset token")

        user = db.query(User).filter(User.id == int(payload.get("sub"))).first()
        if not user:
            raise NotFoundError("User not found")

        user.password_hash = hash_password(new_password)
        for session in user.sessions:
            if not session.is_revoked:
                session.revoke("password_reset")
        db.commit()
        logger.info("Password reset for user %s", user.id)

    @staticmethod
    def _rotate_session(session: UserSession, user: User, ip_address: str, user_agent: str) -> TokenPair:
        access_token, access_jti = create_access_token(
            user_id=user.id,
            nic=user.nic,
            email=user.email,
            role=user.role,
        )
        refresh_token, refresh_jti = create_refresh_token(user.id)

        now = _now()
        session.token_jti = access_jti
        session.refresh_jti = refresh_jti
        session.refresh_token_hash = hash_token(refresh_token)
        session.expires_at = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session.refresh_expires_at = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        session.ip_address = ip_address
        session.user_agent = user_agent
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    @staticmethod
    def _issue_tokens(db: Session, user: User, ip_address: str, user_agent: str) -> AuthResult:
        session = UserSession(user_id=user.id)
        tokens = AuthService._rotate_session(session, user, ip_address, user_agent)
        db.add(session)
        db.commit()
        return AuthService._auth_result(db, user, tokens)

    @staticmethod
    def _account_view(db: Session, user: User) -> dict:
        view = {"user": UserSummary.model_validate(user), "doctor": None, "verification_status": None}
        if user.doctor is not None:
            view["doctor"] = DoctorRead.model_validate(user.doctor)
            latest = VerificationService.get_current_for_nic(db, user.nic)
            view["verification_status"] = latest.status if latest else None
        return view

    @staticmethod
    def _auth_result(db: Session, user: User, tokens: TokenPair) -> AuthResult:
        return AuthResult(tokens=tokens, **AuthService._account_view(db, user))
