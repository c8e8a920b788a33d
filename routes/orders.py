from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from core.db import get_db
from core.errors import CheckoutError
from models.order import OrderStatus, TrackingStatus
from schemas.order import OrderFilters, OrderOut, OrderPage, TrackingUpdate
from security.admin import require_admin
from services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(require_admin)])


def order_filters(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    sort_by_date: Literal["asc", "desc"] = Query("desc"),
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
    status: Optional[List[OrderStatus]] = Query(None),
    tracking_status: Optional[List[TrackingStatus]] = Query(None),
) -> OrderFilters:
    return OrderFilters(
        page=page,
        limit=limit,
        sort_by_date=sort_by_date,
        customer_name=customer_name,
        customer_email=customer_email,
        status=status,
        tracking_status=tracking_status,
    )


@router.get("/", response_model=OrderPage)
def list_orders(filters: OrderFilters = Depends(order_filters), db: Session = Depends(get_db)):
    return order_service.list_orders(db, filters)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    try:
        return order_service.get_order(db, order_id)
    except CheckoutError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{order_id}/tracking", response_model=OrderOut)
def update_tracking(order_id: int, data: TrackingUpdate, db: Session = Depends(get_db)):
    try:
        return order_service.update_tracking(db, order_id, data)
    except CheckoutError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
