"""Admin repository - Database operations for reviews and platform stats"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Doctor, Membership, PendingDoctor, Profile


class AdminRepository:
    """Repository for admin database operations"""

    @staticmethod
    def get_pending_applications(db: Session) -> list[PendingDoctor]:
        """Get applications awaiting review, oldest first"""
        return (
            db.query(PendingDoctor)
            .filter(PendingDoctor.status == "pending")
            .order_by(PendingDoctor.created_at)
            .all()
        )

    @staticmethod
    def get_application(db: Session, application_id: str) -> Optional[PendingDoctor]:
        return db.query(PendingDoctor).filter(PendingDoctor.id == application_id).first()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == user_id).first()

    @staticmethod
    def approve_application(
        db: Session, application: PendingDoctor, applicant: Profile, admin_id: str
    ) -> Doctor:
        """Create the Doctor, promote the applicant and close the application in one commit"""
        now = datetime.utcnow()
        doctor = Doctor(
            user_id=application.user_id,
            practice_name=application.practice_name,
            speciality=application.speciality,
            qualification=application.qualification,
            license_number=application.license_number,
            years_experience=application.years_experience,
            consultation_fee=application.consultation_fee,
            address=application.address,
            city=application.city,
            province=application.province,
            postal_code=application.postal_code,
            bio=application.bio,
            is_available=True,
            approved_at=now,
            approved_by=admin_id,
        )
        db.add(doctor)
        applicant.role = "doctor"
        application.status = "approved"
        application.reviewed_at = now
        application.reviewed_by = admin_id
        db.commit()
        db.refresh(doctor)
        return doctor

    @staticmethod
    def reject_application(db: Session, application: PendingDoctor, admin_id: str) -> PendingDoctor:
        application.status = "rejected"
        application.reviewed_at = datetime.utcnow()
        application.reviewed_by = admin_id
        db.commit()
        db.refresh(application)
        return application

    @staticmethod
    def get_stats(db: Session) -> dict:
        """Platform-wide counters"""
        revenue = (
            db.query(func.coalesce(func.sum(Booking.total_amount), 0))
            .filter(Booking.payment_status == "paid")
            .scalar()
        )
        return {
            "total_doctors": db.query(func.count(Doctor.id)).scalar() or 0,
            "pending_applications": db.query(func.count(PendingDoctor.id))
            .filter(PendingDoctor.status == "pending")
            .scalar()
            or 0,
            "total_bookings": db.query(func.count(Booking.id)).scalar() or 0,
            "total_profiles": db.query(func.count(Profile.id)).scalar() or 0,
            "active_premium_memberships": db.query(func.count(Membership.id))
            .filter(Membership.membership_type == "premium", Membership.is_active.is_(True))
            .scalar()
            or 0,
            "total_revenue": int(revenue or 0),
        }

    @staticmethod
    def get_memberships(db: Session) -> list[Membership]:
        return db.query(Membership).order_by(Membership.created_at.desc()).all()
