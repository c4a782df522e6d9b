"""Membership service - premium checkout and activation on payment"""

import logging
import time
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import MEMBERSHIP_FREE_BOOKINGS, MEMBERSHIP_PERIOD_MONTHS, MEMBERSHIP_PRICE_CENTS
from ...models import Membership, Profile
from ..payments.payfast_service import MEMBERSHIP_PAYMENT, PaymentGatewayError, payfast_service
from .repository import MembershipRepository
from .schemas import MembershipCheckoutResponse, MembershipResponse

logger = logging.getLogger(__name__)


class MembershipService:
    """Service layer for membership business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MembershipRepository()

    def get_membership(self, user: Profile) -> MembershipResponse:
        """Current membership; users who never paid see the basic plan"""
        membership = self.repo.get_by_user_id(self.db, user.id)
        if not membership:
            return MembershipResponse(user_id=user.id)
        return MembershipResponse.model_validate(membership)

    def create_checkout(self, user: Profile) -> MembershipCheckoutResponse:
        """Build the PayFast redirect for the premium plan"""
        reference_id = f"membership_{user.id}_{int(time.time() * 1000)}"
        self.repo.ensure_membership(self.db, user.id)

        try:
            redirect = payfast_service.create_payment_redirect(
                reference_id=reference_id,
                payer=user,
                amount_cents=MEMBERSHIP_PRICE_CENTS,
                item_name="MedMap Premium Membership",
                item_description=(
                    f"{MEMBERSHIP_PERIOD_MONTHS} months premium access with "
                    f"{MEMBERSHIP_FREE_BOOKINGS} free bookings"
                ),
                payment_type=MEMBERSHIP_PAYMENT,
                return_path="/membership/success",
                cancel_path="/membership",
            )
        except PaymentGatewayError as e:
            logger.error(f"❌ Membership checkout failed for {user.email}: {e}")
            raise HTTPException(status_code=503, detail="Payment service unavailable") from e

        logger.info(f"💳 Membership checkout created for {user.email}")
        return MembershipCheckoutResponse(
            payment_url=redirect.redirect_url, reference_id=reference_id, amount=redirect.amount
        )

    def upgrade_to_premium(self, user_id: str, now: Optional[datetime] = None) -> Optional[Membership]:
        """
        Activate premium for a paid membership.

        Returns None when the user id does not match a profile.
        """
        if not self.repo.get_profile(self.db, user_id):
            logger.warning(f"⚠️ Membership payment for unknown user {user_id}")
            return None

        period_start = now or datetime.utcnow()
        period_end = period_start + relativedelta(months=MEMBERSHIP_PERIOD_MONTHS)

        membership = self.repo.ensure_membership(self.db, user_id)
        membership = self.repo.activate_premium(
            self.db,
            membership,
            period_start=period_start,
            period_end=period_end,
            free_bookings=MEMBERSHIP_FREE_BOOKINGS,
        )
        logger.info(f"✅ Membership upgraded to premium for user {user_id} until {period_end.date()}")
        return membership
