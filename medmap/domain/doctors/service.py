"""Doctor service - Business logic for discovery, enrollment and schedules"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import email_service
from ...models import Booking, Doctor, DoctorSchedule, PendingDoctor, Profile
from .repository import DoctorRepository
from .schemas import EnrollmentCreate, ScheduleUpdate

logger = logging.getLogger(__name__)


class DoctorService:
    """Service layer for doctor business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository()

    def search_doctors(
        self,
        speciality: Optional[str] = None,
        city: Optional[str] = None,
        province: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Doctor]:
        return self.repo.search_doctors(
            self.db,
            speciality=speciality,
            city=city,
            province=province,
            search=search.strip() if search else None,
        )

    def get_doctor(self, doctor_id: str) -> Doctor:
        """Get a specific doctor"""
        doctor = self.repo.get_doctor_by_id(self.db, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    def get_own_practice(self, user: Profile) -> Doctor:
        doctor = self.repo.get_doctor_by_user_id(self.db, user.id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor profile not found")
        return doctor

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    def _replay(self, application: PendingDoctor, user: Profile) -> PendingDoctor:
        if application.user_id != user.id:
            logger.warning(f"⚠️ Idempotency key reused by another user: {user.id}")
            raise HTTPException(
                status_code=409, detail="Idempotency-Key already used for a different application"
            )
        logger.info(f"♻️ Returning existing application {application.id} for {user.email}")
        return application

    async def submit_enrollment(
        self, data: EnrollmentCreate, user: Profile, idempotency_key: Optional[str]
    ) -> tuple[PendingDoctor, bool]:
        """
        Submit a practice application exactly once per idempotency key.

        Returns:
            Tuple of (application, created). Resubmissions with the same key by
            the same user return the stored application with created=False.
        """
        if not idempotency_key or not idempotency_key.strip():
            raise HTTPException(status_code=400, detail="Idempotency-Key header is required")
        idempotency_key = idempotency_key.strip()

        existing = self.repo.get_application_by_key(self.db, idempotency_key)
        if existing:
            return self._replay(existing, user), False

        if user.role == "doctor" or self.repo.get_doctor_by_user_id(self.db, user.id):
            raise HTTPException(status_code=409, detail="You are already registered as a doctor")

        logger.info(f"📥 New practice application from {user.email}: {data.practice_name}")
        try:
            application = self.repo.create_application(
                self.db,
                user.id,
                idempotency_key,
                practice_name=data.practice_name,
                speciality=data.speciality,
                qualification=data.qualification,
                license_number=data.license_number,
                years_experience=data.years_experience,
                consultation_fee=data.consultation_fee_cents,
                address=data.address,
                city=data.city,
                province=data.province,
                postal_code=data.postal_code,
                bio=data.bio,
            )
        except IntegrityError:
            # Concurrent submission with the same key won the insert
            self.db.rollback()
            existing = self.repo.get_application_by_key(self.db, idempotency_key)
            if not existing:
                raise
            return self._replay(existing, user), False

        try:
            await email_service.send_doctor_pending_email(application, user)
        except Exception as e:
            logger.error(f"❌ Failed to send application email to {user.email}: {e}")

        logger.info(f"✅ Application {application.id} submitted for review")
        return application, True

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def get_schedule(self, user: Profile) -> list[DoctorSchedule]:
        doctor = self.get_own_practice(user)
        return self.repo.get_schedule(self.db, doctor.id)

    def replace_schedule(self, data: ScheduleUpdate, user: Profile) -> list[DoctorSchedule]:
        """Replace the doctor's whole weekly schedule"""
        doctor = self.get_own_practice(user)
        rules = [rule.model_dump() for rule in data.rules]
        schedule = self.repo.replace_schedule(self.db, doctor.id, rules)
        logger.info(f"📅 Schedule updated for doctor {doctor.id}: {len(schedule)} rules")
        return schedule

    def get_bookings(self, user: Profile, status: Optional[str] = None) -> list[Booking]:
        doctor = self.get_own_practice(user)
        return self.repo.get_doctor_bookings(self.db, doctor.id, status)
