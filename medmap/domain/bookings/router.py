"""Booking router - FastAPI endpoints for patient reservations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Profile
from ...rate_limiter import create_rate_limiter
from .schemas import BookingCreate, BookingCreatedResponse, BookingResponse, PaymentUrlResponse
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

rate_limit_bookings = create_rate_limiter(limit=10, window_seconds=60, key_prefix="bookings")


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# RESERVATIONS
# ============================================================================


@router.post("", response_model=BookingCreatedResponse, status_code=201)
async def create_booking(
    body: BookingCreate,
    user: Profile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_bookings),
):
    """Reserve a slot and get the PayFast checkout URL"""
    return service.create_booking(body, user)


@router.post("/{booking_id}/payment", response_model=PaymentUrlResponse)
async def retry_booking_payment(
    booking_id: str,
    user: Profile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
    _: None = Depends(rate_limit_bookings),
):
    """Request a fresh checkout URL for a pending booking"""
    return service.retry_payment(booking_id, user)


# ============================================================================
# HISTORY
# ============================================================================


@router.get("/me", response_model=list[BookingResponse])
async def get_my_bookings(
    user: Profile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Get the current patient's bookings"""
    return service.get_bookings(user)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    user: Profile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Get one of the current patient's bookings"""
    return service.get_booking(booking_id, user)
