"""Admin review endpoints for doctor verification."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from hercycle.core.database import get_db
from hercycle.dependencies.auth import get_current_admin
from hercycle.dependencies.rate_limit import rate_limit
from hercycle.schemas.admin import DashboardStats, InfoRequest
from hercycle.schemas.common import Envelope, Pagination
from hercycle.schemas.verification import (
    ApproveDoctorRequest, RejectDoctorRequest, ReviewResult, RevocationResult, RevokeDoctorRequest,
    VerificationHistoryItem, VerificationListItem,
)
from hercycle.services.verification_service import VerificationService
from hercycle.utils.validators import normalize_nic

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/pending-doctors", response_model=Envelope[list[VerificationListItem]])
async def pending_doctors(
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Every pending verification, newest first."""
    items = VerificationService.list_pending(db)
    return Envelope(data=items, count=len(items))


@router.get("/all-doctor-verifications", response_model=Envelope[list[VerificationListItem]])
async def all_doctor_verifications(
    status: Optional[str] = Query(None, description="pending, approved or rejected"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    result = VerificationService.list_all(db, status=status, page=page, limit=limit)
    return Envelope(
        data=result.items,
        count=len(result.items),
        pagination=Pagination.build(page=result.page, limit=result.limit, total=result.total),
    )


@router.post("/approve-doctor/{nic}", response_model=Envelope[ReviewResult])
async def approve_doctor(
    nic: str,
    payload: Optional[ApproveDoctorRequest] = None,
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    notes = payload.notes if payload else None
    result = VerificationService.approve(db, normalize_nic(nic), current_admin["nic"], notes)
    return Envelope(message="Doctor approved successfully", data=result)


@router.post("/reject-doctor/{nic}", response_model=Envelope[ReviewResult])
async def reject_doctor(
    nic: str,
    payload: RejectDoctorRequest,
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    result = VerificationService.reject(
        db, normalize_nic(nic), current_admin["nic"], payload.reason, payload.notes
    )
    return Envelope(message="Doctor rejected", data=result)


@router.get("/dashboard-stats", response_model=Envelope[DashboardStats])
async def dashboard_stats(
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return Envelope(data=VerificationService.dashboard_stats(db))


@router.post("/doctor/request-info", response_model=Envelope)
async def request_info(
    payload: InfoRequest,
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Email the applicant asking for more information."""
    VerificationService.request_info(db, payload.nic, current_admin["nic"], payload.message)
    return Envelope(message="Information request sent to doctor")


@router.post("/revoke-doctor/{nic}", response_model=Envelope[RevocationResult])
async def revoke_doctor(
    nic: str,
    payload: Optional[RevokeDoctorRequest] = None,
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    """Withdraw an approved doctor's verification. The doctor may resubmit afterwards."""
    reason = payload.reason if payload else None
    result = VerificationService.revoke(db, normalize_nic(nic), current_admin["nic"], reason)
    return Envelope(message="Doctor verification revoked", data=result)


@router.get("/doctor-verifications", response_model=Envelope[list[VerificationHistoryItem]])
async def verification_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Audit view: each doctor with their latest verification and admin actions."""
    result = VerificationService.history(db, page=page, limit=limit)
    return Envelope(
        data=result.items,
        count=len(result.items),
        pagination=Pagination.build(page=result.page, limit=result.limit, total=result.total),
    )
