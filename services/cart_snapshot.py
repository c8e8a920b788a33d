"""Freeze a session cart into server-priced, immutable checkout lines.

Prices always come from the current product row; whatever price the cart
item carries is ignored. Display fields (product, color and quality names,
first image) are captured for the order history and never feed the totals.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Tuple

from sqlalchemy.orm import Session

from core.errors import EmptyCartError, NotFoundError, UnavailableError, ValidationError
from services.cart import get_cart
from services.catalog import get_colors_by_ids, get_product, get_qualities_by_ids

CENTS = Decimal("0.01")


def _to_decimal(value: float | int | str | Decimal | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartLine:
    product_id: int
    variant_id: str
    size: str
    quantity: int
    unit_price: Decimal
    unit_discount: Decimal
    product_name: str | None = None
    color_name: str | None = None
    quality_name: str | None = None
    image_url: str | None = None

    @property
    def line_total(self) -> Decimal:
        return _money(self.quantity * (self.unit_price - self.unit_discount))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "size": self.size,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "unit_discount": str(self.unit_discount),
            "line_total": str(self.line_total),
            "product_name": self.product_name,
            "color_name": self.color_name,
            "quality_name": self.quality_name,
            "image_url": self.image_url,
        }


@dataclass(frozen=True)
class CartSnapshot:
    lines: Tuple[CartLine, ...]

    @property
    def subtotal(self) -> Decimal:
        return _money(sum((line.unit_price * line.quantity for line in self.lines), Decimal("0")))

    @property
    def discount_total(self) -> Decimal:
        return _money(sum((line.unit_discount * line.quantity for line in self.lines), Decimal("0")))

    @property
    def total(self) -> Decimal:
        return self.subtotal - self.discount_total

    @property
    def amount_in_cents(self) -> int:
        return int((self.total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.lines],
            "subtotal": str(self.subtotal),
            "discount_total": str(self.discount_total),
            "total": str(self.total),
        }


def build_cart_snapshot(db: Session, session_id: str) -> CartSnapshot:
    """Reprice the session's cart against the live catalog.

    Raises:
        EmptyCartError: no active cart or no items.
        ValidationError: an item has a quantity below one, or a discount that
            is negative or above the product's current price.
        NotFoundError: a product or its variant no longer exists.
        UnavailableError: a product is inactive.
    """
    cart = get_cart(db, session_id)
    if cart is None or not cart.items:
        raise EmptyCartError()

    resolved = []
    for item in cart.items:
        if item.quantity < 1:
            raise ValidationError(f"Invalid quantity for product {item.product_id}")
        product = get_product(db, item.product_id)
        if product is None:
            raise NotFoundError(f"Product {item.product_id} not found")
        if not product.active:
            raise UnavailableError(f"Product {product.name} is not available")
        variant = product.find_variant(item.variant_id)
        if variant is None:
            raise NotFoundError(f"Variant {item.variant_id} not found in product {product.name}")
        discount = _to_decimal(item.discount)
        if discount < 0 or discount > _to_decimal(product.price):
            raise ValidationError(f"Invalid discount for product {product.name}")
        resolved.append((item, product, variant))

    colors = get_colors_by_ids(db, (v.get("color_id") for _, _, v in resolved))
    qualities = get_qualities_by_ids(db, (p.quality_id for _, p, _ in resolved))

    lines = []
    for item, product, variant in resolved:
        color = colors.get(variant.get("color_id"))
        quality = qualities.get(product.quality_id)
        images = variant.get("images") or []
        lines.append(
            CartLine(
                product_id=product.id,
                variant_id=item.variant_id,
                size=item.size,
                quantity=item.quantity,
                unit_price=_money(_to_decimal(product.price)),
                unit_discount=_money(_to_decimal(item.discount)),
                product_name=product.name,
                color_name=color.name if color else None,
                quality_name=quality.name if quality else None,
                image_url=images[0] if images else None,
            )
        )
    return CartSnapshot(lines=tuple(lines))
