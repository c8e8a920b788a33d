import hashlib
from decimal import Decimal
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.config import GatewayConfig, get_gateway_config
from core.db import Base, get_db
from models.cart import Cart, CartItem
from models.color import Color
from models.order import Order, OrderStatus
from models.product import Product
from models.quality import Quality
from security import jwt as jwt_utils
from services.notifier import OrderNotifier, get_notifier

INTEGRITY_SECRET = "test_integrity_secret"
EVENTS_SECRET = "test_events_secret"
SESSION_ID = "session-abc-123"


@pytest.fixture()
def gateway_config():
    return GatewayConfig(
        public_key="pub_test_123",
        base_url="https://sandbox.wompi.co/v1",
        redirect_url="http://localhost:3000/checkout/result",
        currency="COP",
        private_key="prv_test_456",
        integrity_secret=INTEGRITY_SECRET,
        events_secret=EVENTS_SECRET,
    )


@pytest.fixture()
def notifier():
    mock = Mock(spec=OrderNotifier)
    mock.notify_order_approved.return_value = {"alert": True, "confirmation": True}
    return mock


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session, gateway_config, notifier):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_gateway_config] = lambda: gateway_config
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def color(db_session):
    color = Color(name="Negro", hex_code="#000000", active=True)
    db_session.add(color)
    db_session.commit()
    db_session.refresh(color)
    return color


@pytest.fixture
def quality(db_session):
    quality = Quality(name="Premium", description="Algodón peinado")
    db_session.add(quality)
    db_session.commit()
    db_session.refresh(quality)
    return quality


@pytest.fixture
def product(db_session, color, quality):
    product = Product(
        name="Camiseta Metallica",
        price=Decimal("100.00"),
        active=True,
        quality_id=quality.id,
        variants=[
            {
                "variant_id": "v-black",
                "color_id": color.id,
                "images": ["https://cdn.example.com/metallica-front.webp", "https://cdn.example.com/metallica-back.webp"],
            }
        ],
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def make_cart(db_session):
    """Create an active cart for a session from (product, variant_id, size, quantity, discount, price) tuples."""

    def _make(lines, session_id=SESSION_ID):
        cart = Cart(session_id=session_id)
        db_session.add(cart)
        db_session.flush()
        for product_id, variant_id, size, quantity, discount, price in lines:
            db_session.add(
                CartItem(
                    cart_id=cart.id,
                    product_id=product_id,
                    variant_id=variant_id,
                    size=size,
                    quantity=quantity,
                    discount=Decimal(str(discount)),
                    price=Decimal(str(price)),
                )
            )
        db_session.commit()
        db_session.refresh(cart)
        return cart

    return _make


@pytest.fixture
def cart(make_cart, product):
    """Scenario cart: price 100, qty 2, discount 10 (client-side price tampered to 1)."""
    return make_cart([(product.id, "v-black", "M", 2, 10, 1)])


@pytest.fixture
def make_order(db_session):
    def _make(reference="ref-0001", status=OrderStatus.PENDING, amount_in_cents=18000, **kwargs):
        order = Order(
            reference=reference,
            session_id=kwargs.pop("session_id", SESSION_ID),
            status=status.value,
            amount_in_cents=amount_in_cents,
            currency="COP",
            customer_email=kwargs.pop("customer_email", "ana@example.com"),
            customer_data=kwargs.pop(
                "customer_data",
                {
                    "full_name": "Ana Gómez",
                    "email": "ana@example.com",
                    "phone_number": "3001234567",
                    "phone_number_prefix": "57",
                    "legal_id": "1020304050",
                    "legal_id_type": "CC",
                },
            ),
            shipping_address=kwargs.pop(
                "shipping_address",
                {
                    "address_line_1": "Calle 10 # 20-30",
                    "region": "Antioquia",
                    "city": "Medellín",
                    "country": "CO",
                    "phone_number": "3001234567",
                    "name": "Ana Gómez",
                },
            ),
            cart_snapshot=kwargs.pop(
                "cart_snapshot",
                {
                    "items": [
                        {
                            "product_id": 1,
                            "variant_id": "v-black",
                            "size": "M",
                            "quantity": 2,
                            "unit_price": "100.00",
                            "unit_discount": "10.00",
                            "line_total": "180.00",
                            "product_name": "Camiseta Metallica",
                            "color_name": "Negro",
                            "quality_name": "Premium",
                            "image_url": None,
                        }
                    ],
                    "subtotal": "200.00",
                    "discount_total": "20.00",
                    "total": "180.00",
                },
            ),
            **kwargs,
        )
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order

    return _make


def _sha256(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


@pytest.fixture
def make_event():
    """Build a signed transaction.updated envelope the way the gateway does."""

    def _make(
        reference="ref-0001",
        status="APPROVED",
        transaction_id="1234-1610641025-49201",
        amount_in_cents=18000,
        event="transaction.updated",
        secret=EVENTS_SECRET,
        timestamp=1530291411,
        **transaction_extra,
    ):
        transaction = {
            "id": transaction_id,
            "amount_in_cents": amount_in_cents,
            "reference": reference,
            "customer_email": "ana@example.com",
            "currency": "COP",
            "payment_method_type": "NEQUI",
            "status": status,
            **transaction_extra,
        }
        properties = ["transaction.id", "transaction.status", "transaction.amount_in_cents"]
        checksum = _sha256(f"{transaction_id}{status}{amount_in_cents}{timestamp}{secret}")
        return {
            "event": event,
            "data": {"transaction": transaction},
            "environment": "test",
            "signature": {"properties": properties, "checksum": checksum},
            "timestamp": timestamp,
            "sent_at": "2018-07-20T16:45:05.000Z",
        }

    return _make


@pytest.fixture
def admin_headers():
    token = jwt_utils.create_admin_token("admin-1")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def checkout_payload():
    return {
        "customer_data": {
            "full_name": "Ana Gómez",
            "email": "ana@example.com",
            "phone_number": "3001234567",
            "legal_id": "1020304050",
            "legal_id_type": "CC",
        },
        "shipping_address": {
            "address_line_1": "Calle 10 # 20-30",
            "address_line_2": "Apto 301",
            "region": "Antioquia",
            "city": "Medellín",
            "phone_number": "3001234567",
            "name": "Ana Gómez",
        },
        "collect_shipping": True,
    }


@pytest.fixture
def session_id():
    return SESSION_ID
