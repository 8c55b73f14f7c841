from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from hercycle.core.database import get_db
from hercycle.schemas.auth import (
    AccountView, AuthResult, ForgotPasswordRequest, LoginRequest, RefreshTokenRequest,
    RegisterRequest, ResetPasswordRequest, ResetTokenResult, VerifyResetCodeRequest,
)
from hercycle.schemas.common import Envelope
from hercycle.services.auth_service import AuthService
from hercycle.dependencies.auth import get_current_user
from hercycle.dependencies.rate_limit import rate_limit
from hercycle.utils.helpers import client_meta

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/register", response_model=Envelope[AuthResult], status_code=201)
async def register(
    payload: RegisterRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """
    Create a user or doctor account.

    Doctor applicants must include a license document URL; they start with a
    pending account and a pending verification record.
    """
    ip_address, user_agent = client_meta(http_request)
    result = AuthService.register(db, payload, ip_address=ip_address, user_agent=user_agent)
    if result.doctor is not None:
        message = "Doctor registration submitted. Your credentials are pending admin verification."
    else:
        message = "Registration successful"
    return Envelope(message=message, data=result)


@router.post("/login", response_model=Envelope[AuthResult])
async def login(
    payload: LoginRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Email/password login returning a JWT pair"""
    ip_address, user_agent = client_meta(http_request)
    result = AuthService.login(
        db=db,
        email=payload.email,
        password=payload.password,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return Envelope(message="Login successful", data=result)


@router.post("/refresh", response_model=Envelope[AuthResult])
async def refresh_tokens(
    payload: RefreshTokenRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Exchange a valid refresh token for a new access + refresh token pair (rotation)."""
    ip_address, user_agent = client_meta(http_request)
    result = AuthService.refresh_tokens(
        db=db,
        refresh_token=payload.refresh_token,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return Envelope(message="Token refreshed", data=result)


@router.get("/me", response_model=Envelope[AccountView])
async def me(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return Envelope(data=AuthService.me(db, int(current_user["sub"])))


@router.post("/logout", response_model=Envelope)
async def logout(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Logout user (revoke current session)"""
    AuthService.logout(db, int(current_user["sub"]), current_user["jti"])
    return Envelope(message="Logged out successfully")


@router.post("/forgot-password", response_model=Envelope)
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Email a reset code. The response does not reveal whether the address exists."""
    AuthService.forgot_password(db, payload.email)
    return Envelope(message="If an account exists for this email, a reset code has been sent.")


@router.post("/verify-reset-code", response_model=Envelope[ResetTokenResult])
async def verify_reset_code(
    payload: VerifyResetCodeRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    result = AuthService.verify_reset_code(db, payload.email, payload.reset_code)
    return Envelope(message="Reset code verified", data=result)


@router.post("/reset-password", response_model=Envelope)
async def reset_password(
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Set a new password using the token from verify-reset-code."""
    AuthService.reset_password(db, payload.token, payload.new_password)
    return Envelope(message="Password updated successfully")
