"""Unit tests for the Order aggregate and its line items."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from orderflow.domain.exceptions import NotFoundError, ValidationError
from orderflow.domain.model.order import Order, OrderProduct
from orderflow.domain.model.status import OrderStatus, Priority, ProductStatus

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _make_product(pid: str = "P1", qty: int = 100, price: str = "2.50") -> OrderProduct:
    """Helper to build a valid pending line item."""
    return OrderProduct(
        id=pid, name=f"Part {pid}", sku=f"SKU-{pid}", quantity=qty, price=Decimal(price)
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(
            id="SO-00001",
            customer="Acme Castings",
            products=[_make_product("P1"), _make_product("P2", qty=40)],
            created_by="alice",
            reference="PO-778",
            delivery_date=date(2026, 3, 20),
            at=T0,
        )
        assert order.status == OrderStatus.PENDING_APPROVAL
        assert all(p.status == ProductStatus.PENDING for p in order.products)
        assert order.created_by == "alice"
        assert order.created_at == T0
        assert order.reference == "PO-778"
        assert order.version == 0

    def test_creation_is_recorded_in_history(self):
        order = Order.create("SO-00001", "Acme", [_make_product()], "alice", at=T0)
        assert len(order.status_history) == 1
        entry = order.status_history[0]
        assert entry.status == OrderStatus.PENDING_APPROVAL
        assert entry.user == "alice"
        assert entry.timestamp == T0
        assert entry.note == "Order created"

    def test_priority_defaults_from_total_quantity(self):
        small = Order.create("SO-1", "Acme", [_make_product(qty=500)], "alice")
        large = Order.create(
            "SO-2", "Acme", [_make_product("P1", 6000), _make_product("P2", 6000)], "alice"
        )
        assert small.priority == Priority.HIGH
        assert large.priority == Priority.LOW

    def test_explicit_priority_wins(self):
        order = Order.create(
            "SO-1", "Acme", [_make_product(qty=5)], "alice", priority=Priority.LOW
        )
        assert order.priority == Priority.LOW

    def test_customer_is_trimmed(self):
        order = Order.create("SO-1", "  Acme  ", [_make_product()], "alice")
        assert order.customer == "Acme"

    def test_billing_address_defaults_to_shipping(self):
        order = Order.create(
            "SO-1", "Acme", [_make_product()], "alice", shipping_address="12 Mill Rd"
        )
        assert order.billing_address == "12 Mill Rd"


class TestOrderCreationValidation:

    def test_blank_customer_rejected(self):
        with pytest.raises(ValidationError, match="Customer is required"):
            Order.create("SO-1", "   ", [_make_product()], "alice")

    def test_blank_user_rejected(self):
        with pytest.raises(ValidationError, match="User is required"):
            Order.create("SO-1", "Acme", [_make_product()], "")

    def test_no_products_rejected(self):
        with pytest.raises(ValidationError, match="at least one product"):
            Order.create("SO-1", "Acme", [], "alice")

    def test_duplicate_product_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate product ID 'P1'"):
            Order.create("SO-1", "Acme", [_make_product("P1"), _make_product("P1")], "alice")

    def test_non_pending_line_item_rejected(self):
        ready = OrderProduct(
            id="P1", name="Bolt", sku="B-1", quantity=10,
            status=ProductStatus.READY, allocated=10,
        )
        with pytest.raises(ValidationError, match="must be pending"):
            Order.create("SO-1", "Acme", [ready], "alice")


class TestOrderProductInvariants:

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            _make_product(qty=0)

    def test_non_integer_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            OrderProduct(id="P1", name="Bolt", sku="B-1", quantity=2.5)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            _make_product(price="-1")

    def test_float_price_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            OrderProduct(id="P1", name="Bolt", sku="B-1", quantity=1, price=2.5)

    @pytest.mark.parametrize("price", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_price_rejected(self, price):
        with pytest.raises(ValidationError, match="must be a finite number"):
            _make_product(price=price)

    @pytest.mark.parametrize(
        "allocated, dispatched, delivered",
        [(11, 0, 0), (5, 6, 0), (5, 5, 6), (-1, 0, 0)],
    )
    def test_counter_chain_enforced(self, allocated, dispatched, delivered):
        with pytest.raises(ValidationError, match="Inconsistent quantities"):
            OrderProduct(
                id="P1", name="Bolt", sku="B-1", quantity=10,
                allocated=allocated, dispatched=dispatched, delivered=delivered,
            )

    def test_remaining_quantities(self):
        product = OrderProduct(
            id="P1", name="Bolt", sku="B-1", quantity=10,
            allocated=8, dispatched=5, delivered=2,
        )
        assert product.remaining_to_allocate == 2
        assert product.remaining_to_dispatch == 3
        assert product.remaining_to_deliver == 3


class TestOrderProperties:

    def test_subtotal_and_total_quantity(self):
        order = Order.create(
            "SO-1", "Acme",
            [_make_product("P1", 100, "2.50"), _make_product("P2", 40, "10.00")],
            "alice",
        )
        assert order.subtotal == Decimal("650.00")
        assert order.total_quantity == 140

    def test_find_product(self):
        order = Order.create("SO-1", "Acme", [_make_product("P1"), _make_product("P2")], "alice")
        assert order.find_product("P2").id == "P2"

    def test_find_unknown_product_raises(self):
        order = Order.create("SO-1", "Acme", [_make_product("P1")], "alice")
        with pytest.raises(NotFoundError, match="Product not found in order"):
            order.find_product("P9")

    def test_new_order_is_not_terminal(self):
        order = Order.create("SO-1", "Acme", [_make_product()], "alice")
        assert not order.is_terminal

    def test_order_is_frozen(self):
        order = Order.create("SO-1", "Acme", [_make_product()], "alice")
        with pytest.raises(AttributeError):
            order.status = OrderStatus.APPROVED
