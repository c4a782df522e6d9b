"""
Webhook Security Module

Verification of PayFast ITN (instant transaction notification) callbacks:
- Signature recomputed over the posted fields and compared in constant time
- Optional server-side confirmation against PayFast's validate endpoint
"""

import hmac
import logging
from typing import Optional

import httpx

from .config import (
    PAYFAST_PASSPHRASE,
    PAYFAST_VALIDATE_URL,
    PAYFAST_VALIDATE_WITH_SERVER,
    PAYFAST_VERIFY_SIGNATURE,
)
from .domain.payments.payfast_service import build_param_string, generate_signature

logger = logging.getLogger(__name__)

VALIDATE_TIMEOUT_SECONDS = 10.0


class WebhookSignatureError(Exception):
    """Raised when webhook verification fails"""

    pass


def constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks"""
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)


def verify_payfast_signature(fields: dict[str, str], passphrase: Optional[str]) -> bool:
    """Recompute the ITN signature over the posted fields in their posted order"""
    received = fields.get("signature", "")
    if not received:
        logger.warning("🚫 PayFast notification without signature")
        return False

    expected = generate_signature(fields, passphrase, sort_keys=False, skip_empty=False)
    if constant_time_compare(expected, received):
        return True

    logger.warning(
        f"⚠️ PayFast signature mismatch - Expected: {expected[:8]}..., Got: {received[:8]}..."
    )
    return False


async def validate_with_payfast(fields: dict[str, str]) -> bool:
    """Ask PayFast to confirm the notification data is genuine (response body 'VALID')"""
    param_string = build_param_string(fields, sort_keys=False, skip_empty=False)
    try:
        async with httpx.AsyncClient(timeout=VALIDATE_TIMEOUT_SECONDS) as client:
            response = await client.post(
                PAYFAST_VALIDATE_URL,
                content=param_string,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ PayFast validation request failed: {e}")
        return False

    if response.status_code != 200:
        logger.error(f"❌ PayFast validation returned HTTP {response.status_code}")
        return False

    return response.text.strip() == "VALID"


async def verify_payfast_itn(fields: dict[str, str]) -> None:
    """
    Run the configured ITN checks.

    Raises:
        WebhookSignatureError: if any enabled check fails
    """
    # Without a passphrase PayFast still signs, just without the passphrase suffix
    if PAYFAST_VERIFY_SIGNATURE and not verify_payfast_signature(fields, PAYFAST_PASSPHRASE):
        raise WebhookSignatureError("Invalid PayFast signature")

    if PAYFAST_VALIDATE_WITH_SERVER and not await validate_with_payfast(fields):
        raise WebhookSignatureError("PayFast did not confirm the notification")
