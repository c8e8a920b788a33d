"""Checkout session creation for the Wompi widget."""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import GatewayConfig
from core.errors import CheckoutError, InternalError, InvalidAmountError, NotFoundError, ValidationError
from models.order import Order, OrderStatus
from schemas.payment import CreateCheckoutRequest
from services.cart_snapshot import build_cart_snapshot
from services.wompi import integrity_signature

logger = logging.getLogger(__name__)


def new_reference() -> str:
    # uuid4 carries 122 random bits
    return str(uuid.uuid4())


def create_checkout_session(
    db: Session,
    data: CreateCheckoutRequest,
    session_id: str | None,
    config: GatewayConfig,
) -> Dict[str, Any]:
    """Persist a PENDING order for the session's cart and return widget parameters.

    The amount is derived from a fresh server-side snapshot of the cart and
    signed with the integrity secret; nothing monetary is taken from the request.
    """
    if not session_id:
        raise ValidationError("Missing cart session id")
    if not config.can_sign_checkouts:
        logger.error("Wompi public key or integrity secret is not configured")
        raise InternalError("Payment gateway is not configured")

    try:
        snapshot = build_cart_snapshot(db, session_id)

        amount_in_cents = snapshot.amount_in_cents
        if amount_in_cents <= 0:
            raise InvalidAmountError()

        reference = new_reference()
        signature = integrity_signature(reference, amount_in_cents, config.currency, config.integrity_secret)

        customer_data = {
            **data.customer_data.model_dump(),
            "phone_number_prefix": config.phone_number_prefix,
        }
        shipping_address = {
            **data.shipping_address.model_dump(),
            "country": config.shipping_country,
        }

        order = Order(
            reference=reference,
            session_id=session_id,
            status=OrderStatus.PENDING.value,
            amount_in_cents=amount_in_cents,
            currency=config.currency,
            customer_email=customer_data["email"],
            customer_data=customer_data,
            shipping_address=shipping_address,
            collect_shipping=data.collect_shipping,
            cart_snapshot=snapshot.to_dict(),
            expires_at=datetime.utcnow() + timedelta(minutes=config.checkout_ttl_minutes),
        )
        db.add(order)
        db.commit()
        db.refresh(order)
    except CheckoutError as exc:
        db.rollback()
        logger.warning("Checkout rejected for session %s: %s", session_id, exc.message)
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist order for session %s", session_id)
        raise InternalError()
    except Exception:
        db.rollback()
        logger.exception("Unexpected error creating checkout session for %s", session_id)
        raise InternalError()

    logger.info(
        "Payment session created",
        extra={"reference": reference, "amount_in_cents": amount_in_cents, "currency": config.currency},
    )

    return {
        "public_key": config.public_key,
        "currency": config.currency,
        "amount_in_cents": amount_in_cents,
        "reference": reference,
        "signature": signature,
        "redirect_url": config.redirect_url,
        "customer_email": customer_data["email"],
        "customer_data": {
            "full_name": customer_data["full_name"],
            "phone_number": customer_data["phone_number"],
            "phone_number_prefix": customer_data["phone_number_prefix"],
            "legal_id": customer_data["legal_id"],
            "legal_id_type": customer_data["legal_id_type"],
        },
        "shipping_address": shipping_address,
        "order_id": order.id,
    }


def get_order_by_reference(db: Session, reference: str) -> Order:
    order = db.query(Order).filter(Order.reference == reference).one_or_none()
    if order is None:
        raise NotFoundError(f"Order with reference {reference} not found")
    return order
