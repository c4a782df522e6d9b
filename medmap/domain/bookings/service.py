"""Booking service - reservation workflow up to the payment redirect"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import BOOKING_FEE_CENTS
from ...models import Booking, Profile
from ..payments.payfast_service import BOOKING_PAYMENT, PaymentGatewayError, payfast_service
from .repository import BookingRepository
from .schemas import BookingCreate, BookingCreatedResponse, PaymentUrlResponse

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def create_reservation(
        self,
        patient_id: str,
        doctor_id: str,
        appointment_date: date,
        appointment_time: str,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Insert a pending reservation for a slot.

        The slot is not re-checked against existing bookings here, so two
        patients racing for the same time both get a row.
        """
        doctor = self.repo.get_doctor_by_id(self.db, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")

        logger.info(
            f"📥 Creating booking for patient {patient_id} with doctor {doctor_id} "
            f"on {appointment_date} at {appointment_time}"
        )
        try:
            booking = self.repo.create_booking(
                self.db,
                user_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                consultation_fee=doctor.consultation_fee,
                booking_fee=BOOKING_FEE_CENTS,
                patient_notes=notes,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create booking for patient {patient_id}: {e}")
            raise HTTPException(
                status_code=500, detail="Booking failed, please try again"
            ) from e

        logger.info(f"✅ Booking {booking.id} created, total {booking.total_amount} cents")
        return booking

    def request_payment_redirect(self, booking: Booking, patient: Profile) -> str:
        """
        Get a signed PayFast URL for a pending booking and record its reference.

        A gateway failure leaves the booking pending with no reference.
        """
        doctor = booking.doctor
        try:
            redirect = payfast_service.create_payment_redirect(
                reference_id=booking.id,
                payer=patient,
                amount_cents=booking.total_amount,
                item_name=f"Consultation - {doctor.practice_name}",
                item_description=(
                    f"{doctor.speciality} appointment on "
                    f"{booking.appointment_date.isoformat()} at {booking.appointment_time}"
                ),
                payment_type=BOOKING_PAYMENT,
                return_path=f"/booking/success?booking_id={booking.id}",
                cancel_path=f"/booking/cancelled?booking_id={booking.id}",
            )
        except PaymentGatewayError as e:
            logger.error(f"❌ Payment redirect failed for booking {booking.id}: {e}")
            raise HTTPException(
                status_code=503, detail="Payment service unavailable. Booking failed, please try again"
            ) from e

        self.repo.set_payment_reference(self.db, booking, redirect.reference)
        return redirect.redirect_url

    def create_booking(self, data: BookingCreate, patient: Profile) -> BookingCreatedResponse:
        """Reserve a slot and return where the patient should pay for it"""
        booking = self.create_reservation(
            patient_id=patient.id,
            doctor_id=data.doctor_id,
            appointment_date=data.appointment_date,
            appointment_time=data.appointment_time,
            notes=data.patient_notes,
        )
        payment_url = self.request_payment_redirect(booking, patient)
        return BookingCreatedResponse(
            booking_id=booking.id, total_amount=booking.total_amount, payment_url=payment_url
        )

    def retry_payment(self, booking_id: str, patient: Profile) -> PaymentUrlResponse:
        """New payment redirect for an own booking that is still pending"""
        booking = self.get_booking(booking_id, patient)
        if booking.status != "pending" or booking.payment_status != "pending":
            raise HTTPException(
                status_code=409, detail=f"Booking is already {booking.status}"
            )

        payment_url = self.request_payment_redirect(booking, patient)
        return PaymentUrlResponse(
            booking_id=booking.id,
            payment_url=payment_url,
            payment_reference=booking.payment_reference,
        )

    def get_bookings(self, patient: Profile) -> list[Booking]:
        return self.repo.get_user_bookings(self.db, patient.id)

    def get_booking(self, booking_id: str, patient: Profile) -> Booking:
        """Get one of the patient's bookings"""
        booking = self.repo.get_user_booking(self.db, booking_id, patient.id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        return booking
