"""Admin domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ApplicantSummary(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class PendingDoctorResponse(BaseModel):
    """Practice application awaiting review"""

    id: str
    user_id: str
    practice_name: str
    speciality: str
    qualification: Optional[str] = None
    license_number: str
    years_experience: int
    consultation_fee: int  # cents
    city: Optional[str] = None
    province: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    # None when the applicant profile no longer exists
    applicant: Optional[ApplicantSummary] = None

    class Config:
        from_attributes = True


class ApprovalResponse(BaseModel):
    application_id: str
    doctor_id: str
    status: str


class RejectionResponse(BaseModel):
    application_id: str
    status: str


class PlatformStats(BaseModel):
    total_doctors: int
    pending_applications: int
    total_bookings: int
    total_profiles: int
    active_premium_memberships: int
    total_revenue: int  # cents, paid bookings only


class AdminMembershipResponse(BaseModel):
    id: str
    user_id: str
    membership_type: str
    is_active: bool
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    free_bookings_remaining: int
    # None when the membership has no linked profile
    profile: Optional[ApplicantSummary] = None

    class Config:
        from_attributes = True
