"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_time


class BookingCreate(BaseModel):
    """Schema for reserving a slot"""

    doctor_id: str
    appointment_date: date
    appointment_time: str
    patient_notes: Optional[str] = None

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, v):
        return normalize_time(v)

    @field_validator("patient_notes")
    @classmethod
    def strip_notes(cls, v):
        if v is not None:
            v = v.strip()
            return v or None
        return v


class BookingCreatedResponse(BaseModel):
    """A new pending reservation and where to pay for it"""

    booking_id: str
    total_amount: int  # cents
    payment_url: str


class PaymentUrlResponse(BaseModel):
    booking_id: str
    payment_url: str
    payment_reference: str


class DoctorSummary(BaseModel):
    id: str
    practice_name: str
    speciality: str
    city: Optional[str] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: str
    user_id: str
    doctor_id: str
    appointment_date: date
    appointment_time: str
    patient_notes: Optional[str] = None
    consultation_fee: int
    booking_fee: int
    total_amount: int
    status: str
    payment_status: str
    payment_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    doctor: Optional[DoctorSummary] = None

    class Config:
        from_attributes = True
