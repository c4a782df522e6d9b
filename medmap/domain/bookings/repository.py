"""Booking repository - Database operations for reservations"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, Doctor


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: str) -> Optional[Doctor]:
        """Get doctor by ID"""
        return db.query(Doctor).filter(Doctor.id == doctor_id).first()

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: str) -> Optional[Booking]:
        """Get booking by ID"""
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_user_booking(db: Session, booking_id: str, user_id: str) -> Optional[Booking]:
        """Get a booking owned by a patient"""
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_user_bookings(db: Session, user_id: str) -> list[Booking]:
        """Get a patient's bookings, newest appointment first"""
        return (
            db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.appointment_date.desc(), Booking.appointment_time.desc())
            .all()
        )

    @staticmethod
    def create_booking(
        db: Session,
        user_id: str,
        doctor_id: str,
        appointment_date: date,
        appointment_time: str,
        consultation_fee: int,
        booking_fee: int,
        patient_notes: Optional[str] = None,
    ) -> Booking:
        """Insert a pending reservation"""
        booking = Booking(
            user_id=user_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            patient_notes=patient_notes,
            consultation_fee=consultation_fee,
            booking_fee=booking_fee,
            total_amount=consultation_fee + booking_fee,
            status="pending",
            payment_status="pending",
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def set_payment_reference(db: Session, booking: Booking, reference: str) -> Booking:
        booking.payment_reference = reference
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_status(db: Session, booking: Booking, status: str, payment_status: str) -> Booking:
        """Move a booking to a new lifecycle/payment status"""
        booking.status = status
        booking.payment_status = payment_status
        db.commit()
        db.refresh(booking)
        return booking
