"""Reconcile Wompi ``transaction.updated`` events into order state.

The sender delivers at least once and its payload shape evolves, so:

* nothing here raises to the HTTP layer; every path returns an outcome,
* fields are read defensively from the raw document,
* the status write is a conditional UPDATE on ``status = 'PENDING'`` so only
  the delivery that actually moves the order may fire notifications.
"""

import enum
import logging
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.config import GatewayConfig
from core.errors import InvalidSignatureError
from models.order import Order, OrderStatus
from services.notifier import OrderNotifier
from services.wompi import resolve_property, verify_event_signature

logger = logging.getLogger(__name__)

TRANSACTION_UPDATED = "transaction.updated"

GATEWAY_STATUS_MAP = {
    "APPROVED": OrderStatus.APPROVED,
    "DECLINED": OrderStatus.DECLINED,
    "VOIDED": OrderStatus.VOIDED,
    "ERROR": OrderStatus.ERROR,
}


class WebhookOutcome(str, enum.Enum):
    UPDATED = "updated"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    INVALID_SIGNATURE = "invalid_signature"
    MISSING_REFERENCE = "missing_reference"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"
    FAILED = "failed"


def map_gateway_status(status: Any) -> OrderStatus:
    """Unknown or missing gateway statuses degrade to PENDING."""
    if not isinstance(status, str):
        return OrderStatus.PENDING
    return GATEWAY_STATUS_MAP.get(status.strip().upper(), OrderStatus.PENDING)


def _load_order(db: Session, reference: str) -> Order | None:
    return db.query(Order).filter(Order.reference == reference).populate_existing().one_or_none()


def apply_transition(
    db: Session,
    reference: str,
    new_status: OrderStatus,
    transaction_id: str | None,
    status_message: str | None = None,
) -> bool:
    """Move a PENDING order to ``new_status`` atomically.

    Returns True only for the call whose UPDATE matched the row; concurrent or
    repeated deliveries of the same event see zero rows and return False.
    A PENDING mapping only records the transaction id and never changes status.
    """
    values: dict[str, Any] = {"updated_at": datetime.utcnow()}
    if transaction_id:
        values["gateway_transaction_id"] = transaction_id
    if new_status is not OrderStatus.PENDING:
        values["status"] = new_status.value
        if new_status is not OrderStatus.APPROVED and status_message:
            values["error_message"] = status_message

    stmt = (
        update(Order)
        .where(Order.reference == reference, Order.status == OrderStatus.PENDING.value)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount == 1


def reconcile_event(
    db: Session,
    envelope: Any,
    config: GatewayConfig,
    notifier: OrderNotifier,
) -> WebhookOutcome:
    """Process one webhook delivery. Never raises."""
    try:
        return _reconcile(db, envelope, config, notifier)
    except Exception:
        db.rollback()
        logger.exception(
            "Error processing webhook",
            extra={
                "reference": resolve_property(envelope, "data.transaction.reference"),
                "gateway_status": resolve_property(envelope, "data.transaction.status"),
                "transaction_id": resolve_property(envelope, "data.transaction.id"),
            },
        )
        return WebhookOutcome.FAILED


def _reconcile(db: Session, envelope: Any, config: GatewayConfig, notifier: OrderNotifier) -> WebhookOutcome:
    if not isinstance(envelope, Mapping):
        logger.warning("Webhook body is not a JSON object; ignoring")
        return WebhookOutcome.INVALID_SIGNATURE

    try:
        verify_event_signature(envelope, config)
    except InvalidSignatureError as exc:
        logger.error(
            "Invalid webhook signature, possible fraud attempt: %s",
            exc.message,
            extra={"reference": resolve_property(envelope, "data.transaction.reference")},
        )
        return WebhookOutcome.INVALID_SIGNATURE

    event = envelope.get("event")
    if event != TRANSACTION_UPDATED:
        logger.info("Unhandled webhook event: %s", event)
        return WebhookOutcome.IGNORED

    transaction = resolve_property(envelope, "data.transaction")
    if not isinstance(transaction, Mapping):
        logger.warning("Webhook received without transaction data")
        return WebhookOutcome.IGNORED

    reference = transaction.get("reference")
    if not reference:
        logger.warning("Webhook transaction without reference")
        return WebhookOutcome.MISSING_REFERENCE

    gateway_status = transaction.get("status")
    transaction_id = transaction.get("id")
    transaction_id = str(transaction_id) if transaction_id is not None else None
    new_status = map_gateway_status(gateway_status)
    log_ctx = {"reference": reference, "gateway_status": gateway_status, "transaction_id": transaction_id}
    logger.info("Processing webhook for %s -> %s", reference, new_status.value, extra=log_ctx)

    order = _load_order(db, reference)
    if order is None:
        logger.error("Order with reference %s not found", reference, extra=log_ctx)
        return WebhookOutcome.NOT_FOUND

    matched = apply_transition(db, reference, new_status, transaction_id, transaction.get("status_message"))
    order = _load_order(db, reference)

    if new_status is OrderStatus.PENDING:
        if matched:
            logger.info("Order %s still pending; transaction id recorded", reference, extra=log_ctx)
            return WebhookOutcome.UPDATED
        logger.warning("Ignoring non-final status for order %s in %s", reference, order.status, extra=log_ctx)
        return WebhookOutcome.REJECTED

    if not matched:
        current = OrderStatus(order.status)
        if current is new_status:
            logger.info("Duplicate delivery for order %s (%s); nothing to do", reference, order.status, extra=log_ctx)
            return WebhookOutcome.DUPLICATE
        if current.is_terminal:
            logger.warning(
                "Refusing transition of terminal order %s from %s to %s",
                reference,
                order.status,
                new_status.value,
                extra=log_ctx,
            )
            return WebhookOutcome.REJECTED
        logger.warning("Order %s was not updated from %s", reference, order.status, extra=log_ctx)
        return WebhookOutcome.REJECTED

    logger.info("Order %s updated to status %s", reference, new_status.value, extra=log_ctx)

    if new_status is OrderStatus.APPROVED:
        results = notifier.notify_order_approved(order)
        if not all(results.values()):
            logger.error("Notifications incomplete for order %s: %s", reference, results, extra=log_ctx)

    return WebhookOutcome.UPDATED
