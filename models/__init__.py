# Import models so that SQLAlchemy metadata includes them on app startup
from .color import Color  # noqa: F401
from .quality import Quality  # noqa: F401
from .product import Product  # noqa: F401
from .cart import Cart, CartItem  # noqa: F401
from .order import Order, OrderStatus, TrackingStatus  # noqa: F401
