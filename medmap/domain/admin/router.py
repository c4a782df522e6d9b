"""Admin router - endpoints restricted to the admin role"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import Profile
from .schemas import (
    AdminMembershipResponse,
    ApprovalResponse,
    PendingDoctorResponse,
    PlatformStats,
    RejectionResponse,
)
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


# ============================================================================
# DOCTOR APPROVALS
# ============================================================================


@router.get("/pending-doctors", response_model=list[PendingDoctorResponse])
async def get_pending_doctors(
    _: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Get practice applications awaiting review"""
    return service.get_pending_doctors()


@router.post("/pending-doctors/{application_id}/approve", response_model=ApprovalResponse)
async def approve_doctor(
    application_id: str,
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Approve a practice application"""
    return await service.approve_doctor(application_id, admin)


@router.post("/pending-doctors/{application_id}/reject", response_model=RejectionResponse)
async def reject_doctor(
    application_id: str,
    admin: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Reject a practice application"""
    return service.reject_doctor(application_id, admin)


# ============================================================================
# PLATFORM OVERVIEW
# ============================================================================


@router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(
    _: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Get platform counters"""
    return service.get_stats()


@router.get("/memberships", response_model=list[AdminMembershipResponse])
async def get_memberships(
    _: Profile = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Get all memberships"""
    return service.get_memberships()
