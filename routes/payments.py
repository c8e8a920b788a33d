import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.config import GatewayConfig, get_gateway_config
from core.db import get_db
from core.errors import CheckoutError, NotFoundError
from schemas.order import OrderOut
from schemas.payment import CheckoutSessionOut, CreateCheckoutRequest, WebhookAck
from services.checkout import create_checkout_session, get_order_by_reference
from services.notifier import OrderNotifier, get_notifier
from services.webhooks import reconcile_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-session", response_model=CheckoutSessionOut)
def create_session(
    data: CreateCheckoutRequest,
    session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    db: Session = Depends(get_db),
    config: GatewayConfig = Depends(get_gateway_config),
):
    try:
        return create_checkout_session(db, data, session_id, config)
    except NotFoundError as e:
        # A stale cart line is the client's problem, not a missing resource
        raise HTTPException(status_code=400, detail=e.message)
    except CheckoutError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/webhook", response_model=WebhookAck)
async def handle_webhook(
    request: Request,
    db: Session = Depends(get_db),
    config: GatewayConfig = Depends(get_gateway_config),
    notifier: OrderNotifier = Depends(get_notifier),
):
    """Always acknowledged with 200 so the gateway does not retry-storm."""
    try:
        envelope = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON; acknowledging without processing")
        return WebhookAck()

    outcome = await run_in_threadpool(reconcile_event, db, envelope, config, notifier)
    logger.info("Webhook processed with outcome %s", outcome.value)
    return WebhookAck()


@router.get("/order/{reference}", response_model=OrderOut)
def get_order(reference: str, db: Session = Depends(get_db)):
    try:
        return get_order_by_reference(db, reference)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
