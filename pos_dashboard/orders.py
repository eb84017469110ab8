"""Local view of backend orders."""

from __future__ import annotations

from typing import Iterable

from pos_dashboard.constant import CHECKOUT_ORDER_STATUSES, TERMINAL_ORDER_STATUSES
from pos_dashboard.models import Order


class OrderBook:
    """Orders keyed by id; upserts are idempotent."""

    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}

    def load(self, orders: Iterable[Order]) -> None:
        self._orders = {order.id: order for order in orders}

    def upsert(self, order: Order) -> bool:
        """Store the order; returns True when it was not known before."""
        is_new = order.id not in self._orders
        self._orders[order.id] = order
        return is_new

    def get(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    def __len__(self) -> int:
        return len(self._orders)

    @property
    def orders(self) -> list[Order]:
        return sorted(self._orders.values(), key=lambda order: order.id)

    def active_for_table(self, table_number: str) -> list[Order]:
        return [
            order
            for order in self.orders
            if order.table_number == table_number and order.status not in TERMINAL_ORDER_STATUSES
        ]

    def awaiting_payment(self) -> list[Order]:
        return [order for order in self.orders if order.status in CHECKOUT_ORDER_STATUSES]
