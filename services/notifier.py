"""Best-effort notifications for paid orders.

Each channel is attempted on its own and reports a boolean; nothing here
raises to the caller, so a mail or chat outage cannot fail reconciliation.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from core.config import settings
from models.order import Order
from services import email as email_service
from services import telegram

logger = logging.getLogger(__name__)


def format_price(amount: Decimal | int | str, currency: str = "COP") -> str:
    value = Decimal(str(amount))
    if currency == "COP":
        # es-CO style: $180.000
        return "$" + f"{value:,.0f}".replace(",", ".")
    return f"{value:,.2f} {currency}"


def _order_context(order: Order) -> Dict[str, Any]:
    snapshot = order.cart_snapshot or {}
    items = [
        {**item, "total_formatted": format_price(item.get("line_total", 0), order.currency)}
        for item in snapshot.get("items") or []
    ]
    customer = order.customer_data or {}
    created = order.created_at or datetime.utcnow()
    return {
        "store_name": settings.STORE_NAME,
        "customer_name": customer.get("full_name") or "Cliente",
        "customer": customer,
        "customer_email": order.customer_email,
        "order_reference": order.reference,
        "order_date": created.strftime("%Y-%m-%d"),
        "items": items,
        "subtotal": format_price(snapshot.get("subtotal", 0), order.currency),
        "discount_total": format_price(snapshot.get("discount_total", 0), order.currency),
        "total": format_price(Decimal(order.amount_in_cents) / 100, order.currency),
        "shipping_address": order.shipping_address or {},
        "transaction_id": order.gateway_transaction_id or "N/A",
        "year": created.year,
    }


class OrderNotifier:
    def send_order_alert(self, order: Order) -> bool:
        """Internal alert with reference, amount, contact, items and shipping."""
        if not telegram.is_configured():
            logger.warning("Telegram not configured; skipping alert for order %s", order.reference)
            return False
        try:
            message = email_service.render_template("alerts/order_paid.html", _order_context(order))
            telegram.send_message(message)
        except Exception:
            logger.exception("Failed to send order alert for %s", order.reference)
            return False
        logger.info("Order alert sent for %s", order.reference)
        return True

    def send_order_confirmation(self, order: Order) -> bool:
        try:
            return email_service.send_templated_email(
                order.customer_email,
                f"Confirmación de Pedido #{order.reference} - {settings.STORE_NAME}",
                "emails/order_confirmation.txt",
                _order_context(order),
                html_template_path="emails/order_confirmation.html",
            )
        except Exception:
            logger.exception("Failed to send order confirmation for %s", order.reference)
            return False

    def notify_order_approved(self, order: Order) -> Dict[str, bool]:
        return {
            "alert": self.send_order_alert(order),
            "confirmation": self.send_order_confirmation(order),
        }


_notifier = OrderNotifier()


def get_notifier() -> OrderNotifier:
    """FastAPI dependency; override in tests."""
    return _notifier
