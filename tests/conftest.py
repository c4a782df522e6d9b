"""Shared fixtures: in-memory database, API client, tokens and sample data."""

import os
import time

# Configuration is read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ["PAYFAST_MERCHANT_ID"] = "10000100"
os.environ["PAYFAST_MERCHANT_KEY"] = "46f0cd694581a"
os.environ["PAYFAST_PASSPHRASE"] = "jt7NOE43FZPn"
os.environ["PAYFAST_VERIFY_SIGNATURE"] = "true"
os.environ["PAYFAST_VALIDATE_WITH_SERVER"] = "false"
os.environ["BOOKING_FEE_CENTS"] = "1000"
os.environ["RESEND_API_KEY"] = ""

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from medmap import email_service  # noqa: E402
from medmap.database import Base, SessionLocal, engine  # noqa: E402
from medmap.main import app  # noqa: E402
from medmap.models import Doctor, DoctorSchedule, Profile  # noqa: E402

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]
PASSPHRASE = os.environ["PAYFAST_PASSPHRASE"]


def make_token(user_id: str, email: str, expires_in: int = 3600, **metadata) -> str:
    """Mint an access token the way the hosted auth provider does."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        "user_metadata": metadata,
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def auth_headers(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {make_token(profile.id, profile.email)}"}


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Replace outgoing email with mocks; returns them by name."""
    mocks = {
        "booking_confirmed": AsyncMock(return_value={"id": "email-1"}),
        "membership_upgraded": AsyncMock(return_value={"id": "email-2"}),
        "doctor_pending": AsyncMock(return_value={"id": "email-3"}),
        "doctor_approved": AsyncMock(return_value={"id": "email-4"}),
    }
    monkeypatch.setattr(email_service, "send_booking_confirmed_email", mocks["booking_confirmed"])
    monkeypatch.setattr(email_service, "send_membership_upgraded_email", mocks["membership_upgraded"])
    monkeypatch.setattr(email_service, "send_doctor_pending_email", mocks["doctor_pending"])
    monkeypatch.setattr(email_service, "send_doctor_approved_email", mocks["doctor_approved"])
    return mocks


def create_profile(db, user_id: str, email: str, role: str = "patient", **fields) -> Profile:
    profile = Profile(id=user_id, email=email, role=role, **fields)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def patient(db):
    return create_profile(
        db, "patient-1", "thandi@example.com", first_name="Thandi", last_name="Nkosi"
    )


@pytest.fixture
def admin(db):
    return create_profile(db, "admin-1", "admin@medmap.co.za", role="admin", first_name="Ops")


@pytest.fixture
def doctor_profile(db):
    return create_profile(
        db, "doctor-user-1", "dr.naidoo@example.com", role="doctor", first_name="Priya", last_name="Naidoo"
    )


@pytest.fixture
def doctor(db, doctor_profile):
    """A listed GP charging R500 with Monday 09:00-11:00 hours."""
    doctor = Doctor(
        user_id=doctor_profile.id,
        practice_name="Naidoo Family Practice",
        speciality="General Practitioner",
        license_number="MP0123456",
        years_experience=12,
        consultation_fee=50000,
        city="Durban",
        province="KwaZulu-Natal",
        rating=4.8,
    )
    db.add(doctor)
    db.commit()
    db.add(DoctorSchedule(doctor_id=doctor.id, day_of_week=1, start_time="09:00", end_time="11:00"))
    db.commit()
    db.refresh(doctor)
    return doctor


@pytest.fixture
def headers_for():
    """Bearer headers for a profile."""
    return auth_headers


@pytest.fixture
def signed_itn():
    """Build a PayFast notification body signed like PayFast signs it."""
    from medmap.domain.payments.payfast_service import generate_signature

    def build(**fields) -> dict:
        data = {
            "m_payment_id": "MM-0001",
            "pf_payment_id": "1089250",
            "payment_status": "COMPLETE",
            "item_name": "Consultation",
            "amount_gross": "510.00",
            "custom_str1": "unknown",
            "custom_str2": "unknown",
            "custom_str3": "booking_payment",
            "merchant_id": "10000100",
        }
        data.update(fields)
        data["signature"] = generate_signature(data, PASSPHRASE, sort_keys=False, skip_empty=False)
        return data

    return build
