from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from core.errors import NotFoundError, ValidationError
from models.order import Order, OrderStatus, TrackingStatus
from schemas.order import OrderFilters, TrackingUpdate


def _summary(order: Order) -> Dict[str, Any]:
    customer = order.customer_data or {}
    return {
        "id": order.id,
        "reference": order.reference,
        "status": order.status,
        "tracking_status": order.tracking_status,
        "amount_in_cents": order.amount_in_cents,
        "currency": order.currency,
        "customer_email": order.customer_email,
        "customer_data": {
            "full_name": customer.get("full_name") or "",
            "phone_number": customer.get("phone_number") or "",
        },
        "items_count": order.items_count,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def list_orders(db: Session, filters: OrderFilters) -> Dict[str, Any]:
    qs = db.query(Order)

    if filters.customer_email:
        qs = qs.filter(Order.customer_email.ilike(f"%{filters.customer_email}%"))
    if filters.customer_name:
        full_name = Order.customer_data["full_name"].as_string()
        qs = qs.filter(full_name.ilike(f"%{filters.customer_name}%"))
    if filters.status:
        qs = qs.filter(Order.status.in_([s.value for s in filters.status]))
    if filters.tracking_status:
        qs = qs.filter(Order.tracking_status.in_([s.value for s in filters.tracking_status]))

    created = Order.created_at.asc() if filters.sort_by_date == "asc" else Order.created_at.desc()
    qs = qs.order_by(created, Order.id.asc() if filters.sort_by_date == "asc" else Order.id.desc())

    total = qs.count()
    if filters.limit:
        qs = qs.offset((filters.page - 1) * filters.limit).limit(filters.limit)

    return {
        "data": [_summary(o) for o in qs.all()],
        "meta": {"total": total, "page": filters.page, "limit": filters.limit or total},
    }


def get_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).one_or_none()
    if order is None:
        raise NotFoundError(f"Order with ID {order_id} not found")
    return order


def update_tracking(db: Session, order_id: int, data: TrackingUpdate) -> Order:
    """Tracking is only meaningful once payment is APPROVED."""
    order = get_order(db, order_id)
    if order.status != OrderStatus.APPROVED.value:
        raise ValidationError(
            f"Cannot update tracking for order with status {order.status}. Only APPROVED orders can be tracked."
        )

    order.tracking_status = data.tracking_status.value
    if data.tracking_number is not None:
        order.tracking_number = data.tracking_number
    if data.tracking_notes is not None:
        order.tracking_notes = data.tracking_notes

    now = datetime.utcnow()
    if data.tracking_status is TrackingStatus.SHIPPED and not order.shipped_at:
        order.shipped_at = now
    if data.tracking_status is TrackingStatus.DELIVERED and not order.delivered_at:
        order.delivered_at = now

    db.commit()
    db.refresh(order)
    return order
