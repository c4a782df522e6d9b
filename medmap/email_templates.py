"""
MJML Email Templates
Transactional emails for patients and doctors
"""

from typing import Optional

# App theme colors - medical blue/slate
THEME = {
    "primary": "#0ea5e9",
    "primary_dark": "#0284c7",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
}

BRAND_NAME = "MedMap"


def format_rands(cents: int) -> str:
    return f"R{cents / 100:,.2f}"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {BRAND_NAME}. This is an automated message, please do not reply.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmed_template(
    patient_name: str,
    doctor_name: str,
    practice_name: str,
    appointment_date: str,
    appointment_time: str,
    total_amount: int,
    cta_url: str,
) -> str:
    """Booking confirmation for the patient once payment completes"""
    content = f"""
    <mj-text>
      Hi {patient_name},
    </mj-text>

    <mj-text>
      Your payment was received and your appointment with <strong>{doctor_name}</strong>
      at {practice_name} is confirmed.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="20px 0">
      Date: {appointment_date}<br/>
      Time: {appointment_time}<br/>
      Amount paid: {format_rands(total_amount)}
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmed",
        preview_text=f"✅ Your appointment on {appointment_date} at {appointment_time} is confirmed",
        content_sections=content,
        cta_url=cta_url,
        cta_label="View My Bookings",
    )


def membership_upgraded_template(user_name: str, period_end: str, free_bookings: int) -> str:
    """Premium membership activated"""
    content = f"""
    <mj-text>
      Hi {user_name},
    </mj-text>

    <mj-text>
      Welcome to {BRAND_NAME} Premium. Your membership is active until <strong>{period_end}</strong>
      and includes {free_bookings} booking-fee-free appointments.
    </mj-text>
    """

    return get_base_template(
        title="Premium Membership Activated",
        preview_text="🎉 Your premium membership is active",
        content_sections=content,
    )


def doctor_pending_template(
    doctor_name: str, practice_name: str, speciality: str, license_number: str
) -> str:
    """Enrollment received, awaiting admin review"""
    content = f"""
    <mj-text>
      Hi {doctor_name},
    </mj-text>

    <mj-text>
      Thank you for applying to list <strong>{practice_name}</strong> on {BRAND_NAME}.
      Our team is reviewing your application and will let you know once it is approved.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="20px 0">
      Speciality: {speciality}<br/>
      License number: {license_number}
    </mj-text>
    """

    return get_base_template(
        title="Application Under Review",
        preview_text="Your practice application is under review",
        content_sections=content,
    )


def doctor_approved_template(
    doctor_name: str, practice_name: str, speciality: str, cta_url: str
) -> str:
    """Enrollment approved by an admin"""
    content = f"""
    <mj-text>
      Hi {doctor_name},
    </mj-text>

    <mj-text>
      Congratulations! <strong>{practice_name}</strong> ({speciality}) has been approved and is now
      visible to patients. Set up your weekly schedule so patients can start booking.
    </mj-text>
    """

    return get_base_template(
        title="Your Practice Has Been Approved",
        preview_text="🎉 Your practice has been approved",
        content_sections=content,
        cta_url=cta_url,
        cta_label="Set Up My Schedule",
    )
