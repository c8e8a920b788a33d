import enum
from datetime import datetime
from sqlalchemy import String, DateTime, BigInteger, Boolean, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    VOIDED = "VOIDED"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class TrackingStatus(str, enum.Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    reference: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    gateway_transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    session_id: Mapped[str] = mapped_column(String(255), index=True)
    status: Mapped[str] = mapped_column(String(20), default=OrderStatus.PENDING.value, index=True)
    amount_in_cents: Mapped[int] = mapped_column(BigInteger)
    currency: Mapped[str] = mapped_column(String(3), default="COP")

    customer_email: Mapped[str] = mapped_column(String(255), index=True)
    customer_data: Mapped[dict] = mapped_column(JSON)
    shipping_address: Mapped[dict] = mapped_column(JSON)
    collect_shipping: Mapped[bool] = mapped_column(Boolean, default=True)
    # Frozen at checkout; amounts are decimal strings
    cart_snapshot: Mapped[dict] = mapped_column(JSON)

    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    tracking_status: Mapped[str] = mapped_column(String(20), default=TrackingStatus.PENDING.value, index=True)
    tracking_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tracking_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    shipped_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def items_count(self) -> int:
        return len((self.cart_snapshot or {}).get("items") or [])
