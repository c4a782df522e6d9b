"""Admin service - doctor approvals and platform overview"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import email_service
from ...models import Membership, PendingDoctor, Profile
from .repository import AdminRepository
from .schemas import ApprovalResponse, PlatformStats, RejectionResponse

logger = logging.getLogger(__name__)


class AdminService:
    """Service layer for admin operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository()

    def get_pending_doctors(self) -> list[PendingDoctor]:
        return self.repo.get_pending_applications(self.db)

    def _get_pending(self, application_id: str) -> PendingDoctor:
        application = self.repo.get_application(self.db, application_id)
        if not application:
            raise HTTPException(status_code=404, detail="Application not found")
        if application.status != "pending":
            raise HTTPException(
                status_code=409, detail=f"Application already {application.status}"
            )
        return application

    async def approve_doctor(self, application_id: str, admin: Profile) -> ApprovalResponse:
        """Turn a pending application into a listed doctor"""
        application = self._get_pending(application_id)
        applicant = self.repo.get_profile(self.db, application.user_id)
        if not applicant:
            raise HTTPException(status_code=404, detail="Applicant profile not found")

        try:
            doctor = self.repo.approve_application(self.db, application, applicant, admin.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to approve application {application_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to approve doctor") from e

        logger.info(f"✅ Application {application_id} approved by {admin.email}, doctor {doctor.id}")

        try:
            await email_service.send_doctor_approved_email(doctor, applicant)
        except Exception as e:
            logger.error(f"❌ Failed to send approval email to {applicant.email}: {e}")

        return ApprovalResponse(application_id=application.id, doctor_id=doctor.id, status="approved")

    def reject_doctor(self, application_id: str, admin: Profile) -> RejectionResponse:
        application = self._get_pending(application_id)
        self.repo.reject_application(self.db, application, admin.id)
        logger.info(f"🚫 Application {application_id} rejected by {admin.email}")
        return RejectionResponse(application_id=application.id, status="rejected")

    def get_stats(self) -> PlatformStats:
        return PlatformStats(**self.repo.get_stats(self.db))

    def get_memberships(self) -> list[Membership]:
        return self.repo.get_memberships(self.db)
