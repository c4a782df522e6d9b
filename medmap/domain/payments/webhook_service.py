"""PayFast ITN processing - applies payment outcomes to bookings and memberships"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import email_service
from ...models import Booking
from ..bookings.repository import BookingRepository
from ..memberships.service import MembershipService
from .payfast_service import BOOKING_PAYMENT, MEMBERSHIP_PAYMENT, cents_to_amount
from .schemas import WebhookResult

logger = logging.getLogger(__name__)

STATUS_COMPLETE = "COMPLETE"
FAILURE_STATUSES = ("CANCELLED", "FAILED")


def amounts_match(amount_gross: str, total_cents: int) -> bool:
    """Compare PayFast's major-unit amount string with a total in cents"""
    try:
        return Decimal(amount_gross.strip()) == Decimal(cents_to_amount(total_cents))
    except InvalidOperation:
        return False


class PayFastWebhookService:
    """
    Applies one verified PayFast notification.

    Never raises for persistence problems: PayFast only needs a 200, so
    failures are logged and reported in the returned WebhookResult.
    """

    def __init__(self, db: Session):
        self.db = db
        self.booking_repo = BookingRepository()
        self.membership_service = MembershipService(db)

    async def process_notification(self, fields: dict[str, str]) -> WebhookResult:
        payment_status = fields.get("payment_status", "")
        reference_id = fields.get("custom_str1") or None
        user_id = fields.get("custom_str2") or None
        payment_type = fields.get("custom_str3") or None

        result = WebhookResult(
            payment_status=payment_status or None,
            payment_type=payment_type,
            reference_id=reference_id,
            action="ignored",
        )

        logger.info(
            f"📨 PayFast notification: status={payment_status}, type={payment_type}, "
            f"reference={reference_id}, pf_payment_id={fields.get('pf_payment_id')}"
        )

        try:
            if payment_status == STATUS_COMPLETE and payment_type == BOOKING_PAYMENT:
                booking = self._transition_booking(
                    reference_id, "confirmed", "paid", amount_gross=fields.get("amount_gross", "")
                )
                if booking:
                    result.action = "confirmed"
                    await self._send_booking_confirmation(booking)
            elif payment_status == STATUS_COMPLETE and payment_type == MEMBERSHIP_PAYMENT:
                membership = self.membership_service.upgrade_to_premium(user_id) if user_id else None
                if membership:
                    result.action = "membership_upgraded"
                    await self._send_membership_confirmation(membership)
            elif payment_status in FAILURE_STATUSES and payment_type == BOOKING_PAYMENT:
                if self._transition_booking(reference_id, "cancelled", "failed"):
                    result.action = "cancelled"
            else:
                logger.info(f"ℹ️ Ignoring PayFast status {payment_status or '<none>'} for {payment_type}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to apply PayFast {payment_status} for {reference_id}: {e}")
            result.action = "failed"

        return result

    def _transition_booking(
        self,
        booking_id: Optional[str],
        status: str,
        payment_status: str,
        amount_gross: Optional[str] = None,
    ) -> Optional[Booking]:
        """
        Move a pending booking to a terminal state; terminal bookings stay put.

        When `amount_gross` is given it must equal the booking total.
        """
        if not booking_id:
            logger.warning("⚠️ PayFast booking notification without custom_str1")
            return None

        booking = self.booking_repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            logger.warning(f"⚠️ PayFast notification for unknown booking {booking_id}")
            return None

        if booking.status != "pending":
            logger.info(
                f"ℹ️ Booking {booking_id} already {booking.status}/{booking.payment_status}, "
                f"not applying {status}"
            )
            return None

        if amount_gross is not None and not amounts_match(amount_gross, booking.total_amount):
            logger.warning(
                f"⚠️ PayFast amount {amount_gross} for booking {booking_id} does not match "
                f"{cents_to_amount(booking.total_amount)}, leaving it {booking.status}"
            )
            return None

        booking = self.booking_repo.update_status(self.db, booking, status, payment_status)
        logger.info(f"✅ Booking {booking_id} is now {status}/{payment_status}")
        return booking

    async def _send_booking_confirmation(self, booking: Booking) -> None:
        try:
            await email_service.send_booking_confirmed_email(booking)
        except Exception as e:
            logger.error(f"❌ Booking confirmation email failed for {booking.id}: {e}")

    async def _send_membership_confirmation(self, membership) -> None:
        try:
            await email_service.send_membership_upgraded_email(membership)
        except Exception as e:
            logger.error(f"❌ Membership email failed for user {membership.user_id}: {e}")
