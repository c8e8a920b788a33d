from datetime import datetime, timedelta

from models.cart import Cart
from models.order import Order, OrderStatus, TrackingStatus


class TestOrderModel:
    """Test Order model defaults and helpers"""

    def test_defaults(self, make_order):
        order = make_order()

        assert order.id is not None
        assert order.status == OrderStatus.PENDING.value
        assert order.tracking_status == TrackingStatus.PENDING.value
        assert order.collect_shipping is True
        assert order.created_at is not None
        assert order.items_count == 1

    def test_items_count_without_snapshot_items(self):
        assert Order(cart_snapshot={}).items_count == 0

    def test_terminal_statuses(self):
        assert not OrderStatus.PENDING.is_terminal
        assert all(s.is_terminal for s in OrderStatus if s is not OrderStatus.PENDING)


class TestCatalogModels:
    def test_find_variant(self, product):
        assert product.find_variant("v-black")["images"][0].endswith("metallica-front.webp")
        assert product.find_variant("v-white") is None

    def test_product_quality_relationship(self, product, quality):
        assert product.quality.name == quality.name


class TestCartModel:
    def test_is_expired(self):
        cart = Cart(session_id="s", expires_at=datetime.utcnow() - timedelta(seconds=1))
        assert cart.is_expired()
        assert not cart.is_expired(now=datetime.utcnow() - timedelta(days=1))
