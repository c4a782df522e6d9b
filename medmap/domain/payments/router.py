"""Payments router - PayFast ITN webhook"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...webhook_security import WebhookSignatureError, verify_payfast_itn
from .webhook_service import PayFastWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def get_webhook_service(db: Session = Depends(get_db)) -> PayFastWebhookService:
    """Dependency injection for PayFastWebhookService"""
    return PayFastWebhookService(db)


async def parse_notification(request: Request) -> dict[str, str]:
    """Read the ITN form body into a flat dict, keeping PayFast's field order"""
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith(FORM_CONTENT_TYPE):
        raise HTTPException(status_code=400, detail=f"Expected {FORM_CONTENT_TYPE}")

    try:
        form = await request.form()
    except Exception as e:
        logger.error(f"❌ Could not parse PayFast notification body: {e}")
        raise HTTPException(status_code=400, detail="Malformed notification body") from e

    return {key: str(value) for key, value in form.multi_items()}


@router.post("/payfast", response_class=PlainTextResponse)
async def payfast_webhook(
    request: Request,
    service: PayFastWebhookService = Depends(get_webhook_service),
):
    """
    PayFast instant transaction notification.

    Malformed or unverifiable notifications get a 400. Everything else is
    acknowledged with 200 whether or not the update was applied. Not rate
    limited: PayFast posts from a few shared addresses.
    """
    fields = await parse_notification(request)

    try:
        await verify_payfast_itn(fields)
    except WebhookSignatureError as e:
        logger.warning(f"🚫 Rejected PayFast notification for {fields.get('custom_str1')}: {e}")
        raise HTTPException(status_code=400, detail="Invalid notification signature") from e

    result = await service.process_notification(fields)
    logger.info(f"PayFast notification handled: {result.action} ({result.reference_id})")
    return PlainTextResponse("OK", status_code=200)
