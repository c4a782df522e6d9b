"""Membership router - premium plan endpoints"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Profile
from .schemas import MembershipCheckoutResponse, MembershipResponse
from .service import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships", tags=["Memberships"])


def get_membership_service(db: Session = Depends(get_db)) -> MembershipService:
    """Dependency injection for MembershipService"""
    return MembershipService(db)


@router.get("/me", response_model=MembershipResponse)
async def get_my_membership(
    user: Profile = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
):
    """Get the current user's membership"""
    return service.get_membership(user)


@router.post("/checkout", response_model=MembershipCheckoutResponse)
async def create_membership_checkout(
    user: Profile = Depends(get_current_user),
    service: MembershipService = Depends(get_membership_service),
):
    """Start a premium membership payment"""
    return service.create_checkout(user)
