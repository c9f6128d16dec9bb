"""
Orders and their line items.

Creating an order does not touch item stock.
"""
import logging
from typing import Callable, List, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import DataAccess, empty_page, make_cache_key, page_range, to_page
from inventory_app.core.domain.models import Order, OrderItem, OrderLineInput, OrderStatus, Page
from inventory_app.core.exceptions import NotFoundError, ValidationError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
ORDER_ITEMS_TABLE = "order_items"
ORDER_INVALIDATES = ("orders:", "dashboard:")


def order_total(lines: List[OrderLineInput]) -> float:
    return round(sum(line.quantity * line.price for line in lines), 2)


class OrderService:
    def __init__(self, data: DataAccess, activity: ActivityService, ttl: float = 300, clock: Callable = utcnow):
        self.data = data
        self.activity = activity
        self.ttl = ttl
        self._clock = clock

    def fetch_orders(
        self,
        page: int = 1,
        page_size: int = 20,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> Page[Order]:
        key = make_cache_key("orders", page=page, page_size=page_size, status=status, customer_id=customer_id)

        def fetch() -> Page[Order]:
            query = Query()
            if status:
                query.eq("status", status)
            if customer_id:
                query.eq("customer_id", customer_id)
            query.order("created_at", ascending=False).range(*page_range(page, page_size)).count()
            return to_page(self.data.backend.select(ORDERS_TABLE, query), page, page_size, Order.model_validate)

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.ttl),
            empty_page(page, page_size),
            {"operation": "fetch_orders"},
        )

    def get_order(self, order_id: str) -> Optional[Order]:
        def fetch() -> Optional[Order]:
            rows = self.data.backend.select(ORDERS_TABLE, Query().eq("id", order_id)).rows
            if not rows:
                return None
            lines = self.data.backend.select(ORDER_ITEMS_TABLE, Query().eq("order_id", order_id)).rows
            return Order(**rows[0], items=[OrderItem.model_validate(line) for line in lines])

        return self.data.read(fetch, None, {"operation": "get_order", "order_id": order_id})

    def create_order(
        self,
        customer_id: Optional[str],
        lines: List[OrderLineInput],
        status: OrderStatus = OrderStatus.PENDING,
        organization_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Order:
        """
        Insert the order, then its lines. If the lines cannot be written the
        order row is removed again.
        """
        if not lines:
            raise ValidationError("An order needs at least one item")

        backend = self.data.backend

        def write() -> Order:
            values = {
                "customer_id": customer_id,
                "status": OrderStatus(status).value,
                "total_amount": order_total(lines),
            }
            if organization_id:
                values["organization_id"] = organization_id
            order = backend.insert(ORDERS_TABLE, values)
            saved = []
            try:
                for line in lines:
                    saved.append(backend.insert(ORDER_ITEMS_TABLE, {"order_id": order["id"], **line.model_dump()}))
            except Exception:
                logger.warning(f"Order lines failed, removing order {order['id']}")
                backend.delete(ORDER_ITEMS_TABLE, Query().eq("order_id", order["id"]))
                backend.delete(ORDERS_TABLE, Query().eq("id", order["id"]))
                raise
            return Order(**order, items=[OrderItem.model_validate(line) for line in saved])

        order = self.data.mutate(write, ORDER_INVALIDATES, {"operation": "create_order"})
        self.activity.record_audit(
            "INSERT", ORDERS_TABLE, {"id": order.id, "total_amount": order.total_amount}, user_id
        )
        logger.info(f"Created order {order.id} with {len(order.items)} lines")
        return order

    def update_order_status(self, order_id: str, status: OrderStatus, user_id: Optional[str] = None) -> Order:
        status = OrderStatus(status)
        rows = self.data.mutate(
            lambda: self.data.backend.update(
                ORDERS_TABLE, {"status": status.value, "updated_at": self._clock()}, Query().eq("id", order_id)
            ),
            ORDER_INVALIDATES,
            {"operation": "update_order_status", "order_id": order_id},
        )
        if not rows:
            raise NotFoundError("Order not found")
        self.activity.record_audit("UPDATE", ORDERS_TABLE, {"id": order_id, "status": status.value}, user_id)
        return Order.model_validate(rows[0])

    def delete_order(self, order_id: str, user_id: Optional[str] = None) -> None:
        backend = self.data.backend

        def remove():
            backend.delete(ORDER_ITEMS_TABLE, Query().eq("order_id", order_id))
            return backend.delete(ORDERS_TABLE, Query().eq("id", order_id))

        rows = self.data.mutate(remove, ORDER_INVALIDATES, {"operation": "delete_order", "order_id": order_id})
        if not rows:
            raise NotFoundError("Order not found")
        self.activity.record_audit("DELETE", ORDERS_TABLE, {"id": order_id}, user_id)
