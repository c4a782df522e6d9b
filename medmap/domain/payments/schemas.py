"""Payment domain schemas"""

from typing import Optional

from pydantic import BaseModel


class PaymentRedirect(BaseModel):
    """A prepared payment attempt at the gateway"""

    reference: str
    amount: int  # cents
    currency: str
    redirect_url: str
    correlation_id: str


class WebhookResult(BaseModel):
    """Outcome of processing one gateway notification"""

    payment_status: Optional[str] = None
    payment_type: Optional[str] = None
    reference_id: Optional[str] = None
    action: str  # confirmed, cancelled, membership_upgraded, ignored, failed
