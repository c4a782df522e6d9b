"""Doctor router - FastAPI endpoints for discovery, enrollment and schedules"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_doctor
from ...database import get_db
from ...models import Profile
from ...rate_limiter import create_rate_limiter
from .schemas import (
    DoctorBookingResponse,
    DoctorResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    ScheduleRuleResponse,
    ScheduleUpdate,
)
from .service import DoctorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])

rate_limit_enrollments = create_rate_limiter(limit=5, window_seconds=300, key_prefix="enrollments")


def get_doctor_service(db: Session = Depends(get_db)) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db)


# ============================================================================
# DOCTOR PORTAL
# ============================================================================


@router.get("/me/schedule", response_model=list[ScheduleRuleResponse])
async def get_my_schedule(
    user: Profile = Depends(require_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Get the current doctor's weekly schedule"""
    return service.get_schedule(user)


@router.put("/me/schedule", response_model=list[ScheduleRuleResponse])
async def replace_my_schedule(
    body: ScheduleUpdate,
    user: Profile = Depends(require_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Replace the current doctor's weekly schedule"""
    return service.replace_schedule(body, user)


@router.get("/me/bookings", response_model=list[DoctorBookingResponse])
async def get_my_practice_bookings(
    status: Optional[str] = Query(None, description="pending, confirmed, cancelled or completed"),
    user: Profile = Depends(require_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Get bookings for the current doctor's practice"""
    return service.get_bookings(user, status)


# ============================================================================
# ENROLLMENT
# ============================================================================


@router.post("/enrollments", response_model=EnrollmentResponse, status_code=201)
async def submit_enrollment(
    body: EnrollmentCreate,
    response: Response,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    user: Profile = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
    _: None = Depends(rate_limit_enrollments),
):
    """Apply to list a practice. Safe to retry with the same Idempotency-Key."""
    application, created = await service.submit_enrollment(body, user, idempotency_key)
    if not created:
        response.status_code = 200
    return application


# ============================================================================
# PUBLIC DISCOVERY
# ============================================================================


@router.get("", response_model=list[DoctorResponse])
async def search_doctors(
    speciality: Optional[str] = None,
    city: Optional[str] = None,
    province: Optional[str] = None,
    search: Optional[str] = None,
    service: DoctorService = Depends(get_doctor_service),
):
    """Search available doctors"""
    return service.search_doctors(speciality, city, province, search)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: str, service: DoctorService = Depends(get_doctor_service)):
    """Get a doctor's public profile"""
    return service.get_doctor(doctor_id)
