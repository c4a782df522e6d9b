"""PayFast service - signed redirects to the hosted PayFast checkout"""

import hashlib
import logging
import time
from decimal import Decimal
from typing import Optional
from urllib.parse import quote_plus, urlencode

from ...config import (
    API_BASE_URL,
    FRONTEND_URL,
    PAYFAST_CURRENCY,
    PAYFAST_MERCHANT_ID,
    PAYFAST_MERCHANT_KEY,
    PAYFAST_PASSPHRASE,
    PAYFAST_PROCESS_URL,
)
from ...models import Profile
from .schemas import PaymentRedirect

logger = logging.getLogger(__name__)

BOOKING_PAYMENT = "booking_payment"
MEMBERSHIP_PAYMENT = "membership_payment"

WEBHOOK_PATH = "/webhooks/payfast"


class PaymentGatewayError(Exception):
    """Raised when a payment redirect cannot be produced"""

    pass


def cents_to_amount(cents: int) -> str:
    """Integer cents -> 2dp major-unit string, e.g. 51000 -> '510.00'"""
    return str((Decimal(cents) / 100).quantize(Decimal("0.01")))


def build_param_string(data: dict, sort_keys: bool = True, skip_empty: bool = True) -> str:
    """
    Build the key=value&... string PayFast signs.

    Outbound requests sign every non-empty field sorted by key. Incoming
    notifications are checked against the fields in the order they were posted.
    """
    keys = sorted(data) if sort_keys else list(data)
    pairs = []
    for key in keys:
        if key == "signature":
            continue
        value = data[key]
        if value is None or (skip_empty and str(value) == ""):
            continue
        pairs.append(f"{key}={quote_plus(str(value).strip())}")
    return "&".join(pairs)


def generate_signature(
    data: dict,
    passphrase: Optional[str] = None,
    sort_keys: bool = True,
    skip_empty: bool = True,
) -> str:
    """MD5 signature of the parameter string, salted with the merchant passphrase"""
    payload = build_param_string(data, sort_keys=sort_keys, skip_empty=skip_empty)
    if passphrase:
        payload = f"{payload}&passphrase={quote_plus(passphrase.strip())}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


class PayFastService:
    """Service for building signed PayFast payment requests"""

    def __init__(self):
        self.merchant_id = PAYFAST_MERCHANT_ID
        self.merchant_key = PAYFAST_MERCHANT_KEY
        self.passphrase = PAYFAST_PASSPHRASE
        self.process_url = PAYFAST_PROCESS_URL

        if not self.is_available():
            logger.warning(
                "PAYFAST_MERCHANT_ID/PAYFAST_MERCHANT_KEY not set; payment redirects will fail until configured"
            )

    def is_available(self) -> bool:
        """Check if merchant credentials are configured"""
        return bool(self.merchant_id and self.merchant_key)

    @property
    def notify_url(self) -> str:
        return f"{API_BASE_URL.rstrip('/')}{WEBHOOK_PATH}"

    def create_payment_redirect(
        self,
        reference_id: str,
        payer: Profile,
        amount_cents: int,
        item_name: str,
        item_description: str,
        payment_type: str,
        return_path: str,
        cancel_path: str,
    ) -> PaymentRedirect:
        """
        Build the signed checkout URL for one payment attempt.

        custom_str1..3 carry the correlation keys (reference id, payer id, payment
        type) that PayFast echoes back in its notification.
        """
        if not self.is_available():
            raise PaymentGatewayError("PayFast credentials not configured")

        payment_data = {
            "merchant_id": self.merchant_id,
            "merchant_key": self.merchant_key,
            "return_url": f"{FRONTEND_URL}{return_path}",
            "cancel_url": f"{FRONTEND_URL}{cancel_path}",
            "notify_url": self.notify_url,
            "name_first": payer.first_name or "",
            "name_last": payer.last_name or "",
            "email_address": payer.email,
            "amount": cents_to_amount(amount_cents),
            "item_name": item_name[:100],
            "item_description": item_description[:255],
            "custom_str1": reference_id,
            "custom_str2": payer.id,
            "custom_str3": payment_type,
        }
        # PayFast rejects empty fields in the posted data
        payment_data = {k: v for k, v in payment_data.items() if v not in ("", None)}
        payment_data["signature"] = generate_signature(payment_data, self.passphrase)

        redirect_url = f"{self.process_url}?{urlencode(payment_data)}"
        reference = f"PF_{reference_id}_{int(time.time() * 1000)}"

        logger.info(f"💳 PayFast redirect prepared for {payment_type} {reference_id}")

        return PaymentRedirect(
            reference=reference,
            amount=amount_cents,
            currency=PAYFAST_CURRENCY,
            redirect_url=redirect_url,
            correlation_id=reference_id,
        )


# Singleton instance
payfast_service = PayFastService()
