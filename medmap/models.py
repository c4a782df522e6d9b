import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    """Generate a UUID string primary key"""
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the hosted auth provider's user (JWT "sub" claim)
    id = Column(String(36), primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), default="patient", nullable=False)  # patient, doctor, admin
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    doctor = relationship("Doctor", back_populates="profile", uselist=False, foreign_keys="Doctor.user_id")
    bookings = relationship("Booking", back_populates="patient")
    membership = relationship("Membership", back_populates="profile", uselist=False)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(String(36), primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), unique=True, nullable=False)
    practice_name = Column(String(255), nullable=False)
    speciality = Column(String(100), nullable=False, index=True)
    qualification = Column(String(255), nullable=True)
    license_number = Column(String(100), nullable=False)
    years_experience = Column(Integer, default=0, nullable=False)
    consultation_fee = Column(Integer, nullable=False)  # cents
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True, index=True)
    province = Column(String(100), nullable=True, index=True)
    postal_code = Column(String(20), nullable=True)
    bio = Column(Text, nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)
    total_bookings = Column(Integer, default=0, nullable=False)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="doctor", foreign_keys=[user_id])
    schedules = relationship(
        "DoctorSchedule", back_populates="doctor", cascade="all, delete-orphan"
    )
    bookings = relationship("Booking", back_populates="doctor")


class PendingDoctor(Base):
    """Doctor enrollment application awaiting admin review"""

    __tablename__ = "pending_doctors"

    id = Column(String(36), primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    # Client-generated key; resubmissions with the same key return the same application
    idempotency_key = Column(String(255), unique=True, index=True, nullable=False)
    practice_name = Column(String(255), nullable=False)
    speciality = Column(String(100), nullable=False)
    qualification = Column(String(255), nullable=True)
    license_number = Column(String(100), nullable=False)
    years_experience = Column(Integer, default=0, nullable=False)
    consultation_fee = Column(Integer, nullable=False)  # cents
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    bio = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, approved, rejected
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    applicant = relationship("Profile", foreign_keys=[user_id])


class DoctorSchedule(Base):
    """One recurring weekly availability window"""

    __tablename__ = "doctor_schedules"

    id = Column(String(36), primary_key=True, default=generate_uuid, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 1=Monday .. 7=Sunday
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    doctor = relationship("Doctor", back_populates="schedules")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM
    patient_notes = Column(Text, nullable=True)
    consultation_fee = Column(Integer, nullable=False)  # cents
    booking_fee = Column(Integer, nullable=False)  # cents
    total_amount = Column(Integer, nullable=False)  # cents
    status = Column(String(20), default="pending", nullable=False)  # pending, confirmed, cancelled, completed
    payment_status = Column(String(20), default="pending", nullable=False)  # pending, paid, failed
    payment_reference = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("Profile", back_populates="bookings")
    doctor = relationship("Doctor", back_populates="bookings")


class Membership(Base):
    __tablename__ = "memberships"

    id = Column(String(36), primary_key=True, default=generate_uuid, index=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), unique=True, nullable=False)
    membership_type = Column(String(20), default="basic", nullable=False)  # basic, premium
    is_active = Column(Boolean, default=True, nullable=False)
    current_period_start = Column(DateTime, nullable=True)
    current_period_end = Column(DateTime, nullable=True)
    free_bookings_remaining = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="membership")
