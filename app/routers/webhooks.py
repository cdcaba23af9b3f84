"""
WooCommerce webhook receiver.

Verifies the HMAC signature over the raw body, then folds order events into
cached_clients. Other topics are acknowledged and ignored.
"""
import json
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.webhooks import WebhookResponse
from app.integrations.woocommerce import (
    SIGNATURE_HEADER,
    TOPIC_HEADER,
    validate_signature,
    is_order_topic,
)
from app.services.client_sync import apply_order_event
from app.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/woocommerce", response_model=WebhookResponse)
async def woocommerce_webhook(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Receive WooCommerce webhook deliveries.
    Without a configured secret the signature is not checked (open mode).
    """
    body = await request.body()

    secret = settings.woocommerce_webhook_secret
    if secret:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not signature:
            logger.error("WooCommerce webhook rejected: missing signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing webhook signature")
        if not validate_signature(signature, body, secret):
            logger.error("WooCommerce webhook rejected: invalid signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature")
    else:
        logger.warning("WOOCOMMERCE_WEBHOOK_SECRET not set; skipping signature verification")

    topic = request.headers.get(TOPIC_HEADER)

    try:
        payload = json.loads(body)
    except ValueError:
        # WooCommerce pings a new webhook with a form body: webhook_id=<id>
        if body.startswith(b"webhook_id="):
            logger.info("WooCommerce webhook ping: %s", body.decode(errors="replace"))
            return WebhookResponse(message="Ping received")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    logger.info("Received WooCommerce webhook %s for order %s", topic, payload.get("id"))

    if not is_order_topic(topic):
        return WebhookResponse(message=f"Topic {topic} ignored")

    try:
        result = apply_order_event(db, payload)
    except SQLAlchemyError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to sync client")

    if result is None:
        return WebhookResponse(message="Order has no billing email; client not synced")

    return WebhookResponse(message=f"Client {result.email} synced", order_count=result.order_count)
