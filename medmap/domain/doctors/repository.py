"""Doctor repository - Database operations for doctors, applications and schedules"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Booking, Doctor, DoctorSchedule, PendingDoctor, Profile


class DoctorRepository:
    """Repository for doctor database operations"""

    @staticmethod
    def search_doctors(
        db: Session,
        speciality: Optional[str] = None,
        city: Optional[str] = None,
        province: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Doctor]:
        """Available doctors matching the filters, best rated first"""
        query = db.query(Doctor).outerjoin(Doctor.profile).filter(Doctor.is_available.is_(True))

        if speciality:
            query = query.filter(Doctor.speciality.ilike(speciality))
        if city:
            query = query.filter(Doctor.city.ilike(city))
        if province:
            query = query.filter(Doctor.province.ilike(province))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Doctor.practice_name.ilike(pattern),
                    Doctor.speciality.ilike(pattern),
                    Profile.first_name.ilike(pattern),
                    Profile.last_name.ilike(pattern),
                )
            )

        return query.order_by(Doctor.rating.desc(), Doctor.practice_name).all()

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: str) -> Optional[Doctor]:
        """Get doctor by ID"""
        return db.query(Doctor).filter(Doctor.id == doctor_id).first()

    @staticmethod
    def get_doctor_by_user_id(db: Session, user_id: str) -> Optional[Doctor]:
        """Get the practice owned by a user"""
        return db.query(Doctor).filter(Doctor.user_id == user_id).first()

    @staticmethod
    def get_application_by_key(db: Session, idempotency_key: str) -> Optional[PendingDoctor]:
        return (
            db.query(PendingDoctor).filter(PendingDoctor.idempotency_key == idempotency_key).first()
        )

    @staticmethod
    def create_application(db: Session, user_id: str, idempotency_key: str, **fields) -> PendingDoctor:
        """Insert a pending practice application"""
        application = PendingDoctor(
            user_id=user_id, idempotency_key=idempotency_key, status="pending", **fields
        )
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    @staticmethod
    def get_schedule(db: Session, doctor_id: str) -> list[DoctorSchedule]:
        return (
            db.query(DoctorSchedule)
            .filter(DoctorSchedule.doctor_id == doctor_id)
            .order_by(DoctorSchedule.day_of_week, DoctorSchedule.start_time)
            .all()
        )

    @staticmethod
    def replace_schedule(db: Session, doctor_id: str, rules: list[dict]) -> list[DoctorSchedule]:
        """Delete every rule for the doctor and insert the new set in one commit"""
        db.query(DoctorSchedule).filter(DoctorSchedule.doctor_id == doctor_id).delete(
            synchronize_session=False
        )
        for rule in rules:
            db.add(DoctorSchedule(doctor_id=doctor_id, **rule))
        db.commit()
        return DoctorRepository.get_schedule(db, doctor_id)

    @staticmethod
    def get_doctor_bookings(db: Session, doctor_id: str, status: Optional[str] = None) -> list[Booking]:
        query = db.query(Booking).filter(Booking.doctor_id == doctor_id)
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.appointment_date, Booking.appointment_time).all()
