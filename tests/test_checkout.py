import hashlib
from datetime import datetime, timedelta

import pytest

from core.config import GatewayConfig
from core.errors import EmptyCartError, InternalError, InvalidAmountError, NotFoundError, ValidationError
from models.order import Order, OrderStatus
from schemas.payment import CreateCheckoutRequest
from services.checkout import create_checkout_session, get_order_by_reference


def _request(payload) -> CreateCheckoutRequest:
    return CreateCheckoutRequest(**payload)


class TestCreateCheckoutSession:
    """Checkout session creation against the database"""

    def test_persists_pending_order(self, db_session, cart, session_id, gateway_config, checkout_payload):
        started = datetime.utcnow()
        result = create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)

        order = db_session.query(Order).filter(Order.reference == result["reference"]).one()
        assert order.status == OrderStatus.PENDING.value
        assert order.amount_in_cents == 18000
        assert order.currency == "COP"
        assert order.session_id == session_id
        assert order.customer_email == "ana@example.com"
        assert order.customer_data["phone_number_prefix"] == "57"
        assert order.shipping_address["country"] == "CO"
        assert order.collect_shipping is True
        assert order.cart_snapshot["total"] == "180.00"
        assert order.gateway_transaction_id is None
        assert started + timedelta(minutes=14) < order.expires_at <= datetime.utcnow() + timedelta(minutes=15)

    def test_descriptor_fields(self, db_session, cart, session_id, gateway_config, checkout_payload):
        result = create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)

        assert result["public_key"] == "pub_test_123"
        assert result["currency"] == "COP"
        assert result["amount_in_cents"] == 18000
        assert result["redirect_url"] == gateway_config.redirect_url
        assert result["customer_email"] == "ana@example.com"
        assert result["customer_data"]["legal_id_type"] == "CC"
        assert result["shipping_address"]["city"] == "Medellín"
        expected = hashlib.sha256(
            f"{result['reference']}18000COP{gateway_config.integrity_secret}".encode("utf-8")
        ).hexdigest()
        assert result["signature"] == expected

    def test_descriptor_never_contains_secrets(self, db_session, cart, session_id, gateway_config, checkout_payload):
        result = create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)

        text = repr(result)
        assert gateway_config.integrity_secret not in text
        assert gateway_config.events_secret not in text
        assert gateway_config.private_key not in text

    def test_references_are_unique(self, db_session, cart, session_id, gateway_config, checkout_payload):
        first = create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)
        second = create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)

        assert first["reference"] != second["reference"]
        assert db_session.query(Order).count() == 2

    def test_empty_cart_creates_no_order(self, db_session, session_id, gateway_config, checkout_payload):
        with pytest.raises(EmptyCartError):
            create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)
        assert db_session.query(Order).count() == 0

    def test_missing_product_creates_no_order(self, db_session, make_cart, session_id, gateway_config, checkout_payload):
        make_cart([(4242, "v-black", "M", 1, 0, 100)])
        with pytest.raises(NotFoundError):
            create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)
        assert db_session.query(Order).count() == 0

    def test_zero_total_is_rejected(self, db_session, make_cart, product, session_id, gateway_config, checkout_payload):
        make_cart([(product.id, "v-black", "M", 1, 100, 100)])
        with pytest.raises(InvalidAmountError):
            create_checkout_session(db_session, _request(checkout_payload), session_id, gateway_config)
        assert db_session.query(Order).count() == 0

    def test_missing_session_id(self, db_session, gateway_config, checkout_payload):
        with pytest.raises(ValidationError):
            create_checkout_session(db_session, _request(checkout_payload), None, gateway_config)

    def test_unconfigured_gateway(self, db_session, cart, session_id, checkout_payload):
        config = GatewayConfig(public_key="", base_url="", redirect_url="")
        with pytest.raises(InternalError):
            create_checkout_session(db_session, _request(checkout_payload), session_id, config)
        assert db_session.query(Order).count() == 0


class TestGetOrderByReference:
    def test_found(self, db_session, make_order):
        make_order(reference="ref-xyz")
        assert get_order_by_reference(db_session, "ref-xyz").reference == "ref-xyz"

    def test_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            get_order_by_reference(db_session, "nope")
