"""Membership repository - Database operations for memberships"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Membership, Profile


class MembershipRepository:
    """Repository for membership database operations"""

    @staticmethod
    def get_by_user_id(db: Session, user_id: str) -> Optional[Membership]:
        return db.query(Membership).filter(Membership.user_id == user_id).first()

    @staticmethod
    def get_profile(db: Session, user_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == user_id).first()

    @staticmethod
    def ensure_membership(db: Session, user_id: str) -> Membership:
        """Get the user's membership, creating a basic one if missing"""
        membership = db.query(Membership).filter(Membership.user_id == user_id).first()
        if membership:
            return membership

        membership = Membership(
            user_id=user_id, membership_type="basic", is_active=True, free_bookings_remaining=0
        )
        db.add(membership)
        db.commit()
        db.refresh(membership)
        return membership

    @staticmethod
    def activate_premium(
        db: Session,
        membership: Membership,
        period_start: datetime,
        period_end: datetime,
        free_bookings: int,
    ) -> Membership:
        """Start a premium period"""
        membership.membership_type = "premium"
        membership.is_active = True
        membership.current_period_start = period_start
        membership.current_period_end = period_end
        membership.free_bookings_remaining = free_bookings
        db.commit()
        db.refresh(membership)
        return membership
