"""
Tests for orders and customers.

Tests cover:
- Order totals and line items
- Rollback of the order row when lines fail
- Status updates and deletion
- Customer validation
"""
import pytest

from inventory_app.core.domain.models import CustomerInput, OrderLineInput, OrderStatus
from inventory_app.core.exceptions import BackendError, NotFoundError, ValidationError
from inventory_app.core.ports.backend import Query


class TestOrders:
    """Test suite for OrderService"""

    def test_create_order_computes_total(self, container, make_item, customer, backend):
        """Test: total_amount is the sum of quantity x price"""
        tea = make_item(sku="TEA", name="Tea")
        oil = make_item(sku="OIL", name="Oil")

        order = container.orders.create_order(customer["id"], [
            OrderLineInput(item_id=tea.id, quantity=3, price=10.5),
            OrderLineInput(item_id=oil.id, quantity=2, price=75),
        ])

        assert order.total_amount == 181.5
        assert order.status == "pending"
        assert len(order.items) == 2
        assert len(backend.select("order_items", Query().eq("order_id", order.id)).rows) == 2

    def test_create_order_does_not_touch_stock(self, container, make_item, customer):
        item = make_item()

        container.orders.create_order(customer["id"], [OrderLineInput(item_id=item.id, quantity=5, price=1)])

        assert container.items.get_item(item.id).units_left == 24

    def test_failed_lines_remove_order(self, container, customer, backend):
        """Test: When a line cannot be written the order row is removed again"""
        with pytest.raises(BackendError):
            container.orders.create_order(customer["id"], [
                OrderLineInput(item_id="no-such-item", quantity=1, price=1),
            ])

        assert backend.select("orders").rows == []
        assert backend.select("order_items").rows == []

    def test_order_needs_lines(self, container, customer):
        with pytest.raises(ValidationError):
            container.orders.create_order(customer["id"], [])

    def test_get_order_with_lines(self, container, make_item, customer):
        item = make_item()
        created = container.orders.create_order(customer["id"], [OrderLineInput(item_id=item.id, quantity=1, price=9)])

        order = container.orders.get_order(created.id)

        assert order.id == created.id
        assert [line.item_id for line in order.items] == [item.id]
        assert container.orders.get_order("missing") is None

    def test_update_status_and_filter(self, container, make_item, customer, now):
        item = make_item()
        order = container.orders.create_order(customer["id"], [OrderLineInput(item_id=item.id, quantity=1, price=9)])
        assert container.orders.fetch_orders(status="completed").count == 0

        updated = container.orders.update_order_status(order.id, OrderStatus.COMPLETED)

        assert updated.status == "completed"
        assert updated.updated_at == now.now
        assert container.orders.fetch_orders(status="completed").count == 1

    def test_update_status_missing_order(self, container):
        with pytest.raises(NotFoundError):
            container.orders.update_order_status("missing", OrderStatus.CANCELLED)

    def test_delete_order_removes_lines(self, container, make_item, customer, backend):
        item = make_item()
        order = container.orders.create_order(customer["id"], [OrderLineInput(item_id=item.id, quantity=1, price=9)])

        container.orders.delete_order(order.id)

        assert backend.select("orders").rows == []
        assert backend.select("order_items").rows == []


class TestCustomers:
    """Test suite for CustomerService"""

    def test_create_and_search(self, container):
        container.customers.create_customer(CustomerInput(
            name="Riad Supplies", email="hello@riad.test", phone="0600", address="Marrakesh",
        ))
        container.customers.create_customer(CustomerInput(
            name="Atlas Traders", email="orders@atlas.test", phone="0601", address="Rabat",
        ))

        page = container.customers.fetch_customers(search="atlas")

        assert page.count == 1
        assert page.data[0].name == "Atlas Traders"

    def test_required_fields(self, container):
        with pytest.raises(ValidationError) as exc_info:
            container.customers.create_customer(CustomerInput(name="No Contact"))
        assert "email" in exc_info.value.message

    def test_invalid_email(self, container):
        with pytest.raises(ValidationError) as exc_info:
            container.customers.create_customer(CustomerInput(
                name="Bad", email="not-an-email", phone="1", address="x",
            ))
        assert exc_info.value.message == "Please enter a valid email address"

    def test_update_and_delete(self, container, customer):
        updated = container.customers.update_customer(customer["id"], CustomerInput(
            name="Atlas Traders SARL", email="orders@atlas.test", phone="0600", address="Rabat",
        ))
        assert updated.name == "Atlas Traders SARL"

        container.customers.delete_customer(customer["id"])
        assert container.customers.get_customer(customer["id"]) is None

        with pytest.raises(NotFoundError):
            container.customers.delete_customer(customer["id"])
