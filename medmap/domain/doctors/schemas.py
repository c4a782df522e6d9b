"""Doctor domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import normalize_time, time_to_minutes


class ProfileSummary(BaseModel):
    """Public part of a linked profile"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        from_attributes = True


class DoctorResponse(BaseModel):
    """Schema for doctor response"""

    id: str
    practice_name: str
    speciality: str
    qualification: Optional[str] = None
    years_experience: int
    consultation_fee: int  # cents
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    bio: Optional[str] = None
    is_available: bool
    rating: float
    total_bookings: int
    # None when the doctor has no linked profile
    profile: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True


class EnrollmentCreate(BaseModel):
    """Schema for a practice application"""

    practice_name: str = Field(..., min_length=1, max_length=255)
    speciality: str = Field(..., min_length=1, max_length=100)
    qualification: Optional[str] = None
    license_number: str = Field(..., min_length=1, max_length=100)
    years_experience: int = Field(0, ge=0)
    consultation_fee: Decimal = Field(..., gt=0, description="Fee in rands, e.g. 500.00")
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("practice_name", "speciality", "license_number")
    @classmethod
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @property
    def consultation_fee_cents(self) -> int:
        return int((self.consultation_fee * 100).quantize(Decimal("1")))


class EnrollmentResponse(BaseModel):
    id: str
    user_id: str
    practice_name: str
    speciality: str
    license_number: str
    consultation_fee: int  # cents
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScheduleRule(BaseModel):
    """One weekly availability window"""

    day_of_week: int = Field(..., ge=1, le=7, description="1=Monday .. 7=Sunday")
    start_time: str
    end_time: str
    is_available: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return normalize_time(v)

    @model_validator(mode="after")
    def check_window(self):
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError("start_time must be before end_time")
        return self


class ScheduleRuleResponse(ScheduleRule):
    id: str

    class Config:
        from_attributes = True


class ScheduleUpdate(BaseModel):
    """Full replacement of a doctor's weekly schedule"""

    rules: list[ScheduleRule]


class PatientSummary(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class DoctorBookingResponse(BaseModel):
    """A booking as seen by the doctor"""

    id: str
    appointment_date: date
    appointment_time: str
    patient_notes: Optional[str] = None
    total_amount: int
    status: str
    payment_status: str
    patient: Optional[PatientSummary] = None

    class Config:
        from_attributes = True
