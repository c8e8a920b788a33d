from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, DateTime, ForeignKey, Numeric, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    active: Mapped[bool] = mapped_column(Boolean, default=False)
    quality_id: Mapped[int | None] = mapped_column(ForeignKey("qualities.id", ondelete="SET NULL"), nullable=True, index=True)
    # [{"variant_id": str, "color_id": int, "images": [url, ...]}, ...]
    variants: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quality = relationship("Quality")

    def find_variant(self, variant_id: str) -> dict | None:
        for variant in self.variants or []:
            if variant.get("variant_id") == variant_id:
                return variant
        return None
