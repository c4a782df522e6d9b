"""
Email Service using Resend
Emails are written as MJML templates and compiled to responsive HTML
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from .email_templates import (
    booking_confirmed_template,
    doctor_approved_template,
    doctor_pending_template,
    membership_upgraded_template,
)
from .models import Booking, Doctor, Membership, PendingDoctor, Profile

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def send_booking_confirmed_email(booking: Booking) -> dict:
    """Tell the patient their paid booking is confirmed"""
    patient = booking.patient
    doctor = booking.doctor
    doctor_name = f"Dr. {doctor.profile.full_name}" if doctor.profile else doctor.practice_name

    mjml_content = booking_confirmed_template(
        patient_name=patient.first_name or patient.email,
        doctor_name=doctor_name,
        practice_name=doctor.practice_name,
        appointment_date=booking.appointment_date.strftime("%A, %d %B %Y"),
        appointment_time=booking.appointment_time,
        total_amount=booking.total_amount,
        cta_url=f"{FRONTEND_URL}/dashboard",
    )
    return await send_email(
        to=patient.email,
        subject=f"Appointment confirmed - {booking.appointment_date.isoformat()} at {booking.appointment_time}",
        mjml_content=mjml_content,
    )


async def send_membership_upgraded_email(membership: Membership) -> dict:
    profile = membership.profile
    period_end = (
        membership.current_period_end.strftime("%d %B %Y") if membership.current_period_end else "-"
    )
    mjml_content = membership_upgraded_template(
        user_name=profile.first_name or profile.email,
        period_end=period_end,
        free_bookings=membership.free_bookings_remaining,
    )
    return await send_email(
        to=profile.email,
        subject="Your MedMap Premium membership is active",
        mjml_content=mjml_content,
    )


async def send_doctor_pending_email(application: PendingDoctor, applicant: Profile) -> dict:
    mjml_content = doctor_pending_template(
        doctor_name=applicant.full_name or applicant.email,
        practice_name=application.practice_name,
        speciality=application.speciality,
        license_number=application.license_number,
    )
    return await send_email(
        to=applicant.email,
        subject="Your practice application is under review - MedMap",
        mjml_content=mjml_content,
    )


async def send_doctor_approved_email(doctor: Doctor, applicant: Profile) -> dict:
    mjml_content = doctor_approved_template(
        doctor_name=applicant.full_name or applicant.email,
        practice_name=doctor.practice_name,
        speciality=doctor.speciality,
        cta_url=f"{FRONTEND_URL}/doctor/dashboard",
    )
    return await send_email(
        to=applicant.email,
        subject="🎉 Congratulations! Your practice has been approved",
        mjml_content=mjml_content,
    )
