"""Availability router - public slot lookup"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.validators import parse_iso_date
from .schemas import AvailabilityResult
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("/{doctor_id}", response_model=AvailabilityResult)
async def get_available_slots(
    doctor_id: str,
    date: str = Query(..., description="Appointment date (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get the 30-minute slots for a doctor on a date"""
    try:
        appointment_date = parse_iso_date(date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD") from e

    return service.resolve_available_slots(doctor_id, appointment_date)
