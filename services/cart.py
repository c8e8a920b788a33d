from sqlalchemy.orm import Session

from models.cart import Cart, CartStatus


def get_cart(db: Session, session_id: str) -> Cart | None:
    """Return the active, unexpired cart for a session, or None."""
    cart = (
        db.query(Cart)
        .filter(Cart.session_id == session_id, Cart.status == CartStatus.ACTIVE.value)
        .one_or_none()
    )
    if cart is None or cart.is_expired():
        return None
    return cart
