"""Availability repository - schedule and booking reads"""

from datetime import date

from sqlalchemy.orm import Session

from ...models import Booking, DoctorSchedule


class AvailabilityRepository:
    """Repository for availability database operations"""

    @staticmethod
    def get_active_rules(db: Session, doctor_id: str, day_of_week: int) -> list[DoctorSchedule]:
        """Get active weekly rules for a doctor on a weekday"""
        return (
            db.query(DoctorSchedule)
            .filter(
                DoctorSchedule.doctor_id == doctor_id,
                DoctorSchedule.day_of_week == day_of_week,
                DoctorSchedule.is_available.is_(True),
            )
            .all()
        )

    @staticmethod
    def get_occupied_times(db: Session, doctor_id: str, appointment_date: date) -> set[str]:
        """Get times already held by non-cancelled bookings on a date"""
        rows = (
            db.query(Booking.appointment_time)
            .filter(
                Booking.doctor_id == doctor_id,
                Booking.appointment_date == appointment_date,
                Booking.status != "cancelled",
            )
            .all()
        )
        return {row[0] for row in rows}
