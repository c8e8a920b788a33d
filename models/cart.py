import enum
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy import String, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base

CART_EXPIRATION_DAYS = 15


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class Cart(Base):
    __tablename__ = "carts"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    session_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    status: Mapped[str] = mapped_column(String(20), default=CartStatus.ACTIVE.value, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: Cart.expiry(), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship("CartItem", cascade="all, delete-orphan", back_populates="cart", order_by="CartItem.id")

    @staticmethod
    def expiry(days: int = CART_EXPIRATION_DAYS) -> datetime:
        return datetime.utcnow() + timedelta(days=days)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at


class CartItem(Base):
    __tablename__ = "cart_items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    cart_id: Mapped[int] = mapped_column(ForeignKey("carts.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[int] = mapped_column(Integer, index=True)
    variant_id: Mapped[str] = mapped_column(String(64))
    size: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    # Price seen when the item was added; informational only, checkout reprices
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    cart = relationship("Cart", back_populates="items")
