"""Membership domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MembershipResponse(BaseModel):
    """Schema for membership response"""

    user_id: str
    membership_type: str = "basic"
    is_active: bool = True
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    free_bookings_remaining: int = 0

    class Config:
        from_attributes = True


class MembershipCheckoutResponse(BaseModel):
    payment_url: str
    reference_id: str
    amount: int  # cents
