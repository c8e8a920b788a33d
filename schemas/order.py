from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from models.order import OrderStatus, TrackingStatus


class CartLineOut(BaseModel):
    product_id: int
    variant_id: str
    size: str
    quantity: int
    unit_price: Decimal
    unit_discount: Decimal
    line_total: Decimal
    product_name: Optional[str] = None
    color_name: Optional[str] = None
    quality_name: Optional[str] = None
    image_url: Optional[str] = None


class CartSnapshotOut(BaseModel):
    items: List[CartLineOut]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal


class OrderOut(BaseModel):
    id: int
    reference: str
    session_id: str
    gateway_transaction_id: Optional[str] = None
    status: OrderStatus
    amount_in_cents: int
    currency: str
    customer_email: str
    customer_data: Dict[str, Any]
    shipping_address: Dict[str, Any]
    collect_shipping: bool
    cart_snapshot: CartSnapshotOut
    expires_at: Optional[datetime] = None
    error_message: Optional[str] = None
    tracking_status: TrackingStatus
    tracking_number: Optional[str] = None
    tracking_notes: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderCustomerSummary(BaseModel):
    full_name: str = ""
    phone_number: str = ""


class OrderSummaryOut(BaseModel):
    id: int
    reference: str
    status: OrderStatus
    tracking_status: TrackingStatus
    amount_in_cents: int
    currency: str
    customer_email: str
    customer_data: OrderCustomerSummary
    items_count: int
    created_at: datetime
    updated_at: datetime


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int


class OrderPage(BaseModel):
    data: List[OrderSummaryOut]
    meta: PageMeta


class OrderFilters(BaseModel):
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=100)
    sort_by_date: Literal["asc", "desc"] = "desc"
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    status: Optional[List[OrderStatus]] = None
    tracking_status: Optional[List[TrackingStatus]] = None


class TrackingUpdate(BaseModel):
    tracking_status: TrackingStatus
    tracking_number: Optional[str] = Field(None, max_length=100)
    tracking_notes: Optional[str] = Field(None, max_length=1000)
