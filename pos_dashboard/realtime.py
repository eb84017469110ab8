"""Inbox for pushed backend events, applied to the local views on the UI thread."""

from __future__ import annotations

import logging
import queue
from dataclasses import replace
from typing import Callable

from pos_dashboard.api import parse_order
from pos_dashboard.catalog import CatalogCache
from pos_dashboard.constant import ALERT_ROLES
from pos_dashboard.models import Order, RealtimeEvent
from pos_dashboard.orders import OrderBook

logger = logging.getLogger(__name__)

NEW_ORDER = "new_order"
ORDER_STATUS_UPDATE = "order_status_update"
SETTINGS_UPDATED = "settings_updated"
FOOD_DISCOUNTS_UPDATED = "food_discounts_updated"

ORDERS_VIEW = "orders"
CATALOG_VIEW = "catalog"
SETTINGS_VIEW = "settings"
REPORTS_VIEW = "reports"


class RealtimeBridge:
    """
    Transport threads call `publish`; the UI thread calls `drain`.

    Applying the same event twice leaves the views unchanged: orders are
    upserted by id, settings and discounts are overwritten, and the new-order
    alert fires at most once per order.
    """

    def __init__(
        self,
        catalog: CatalogCache,
        order_book: OrderBook,
        role: str,
        on_alert: Callable[[Order], None] | None = None,
    ) -> None:
        self.catalog = catalog
        self.order_book = order_book
        self.role = role
        self.on_alert = on_alert
        self.settings: dict[str, str] = {}
        self._inbox: queue.SimpleQueue[RealtimeEvent] = queue.SimpleQueue()
        self._alerted_order_ids: set[int] = set()
        self._handlers: dict[str, Callable[[object], set[str]]] = {
            NEW_ORDER: self._apply_new_order,
            ORDER_STATUS_UPDATE: self._apply_status_update,
            SETTINGS_UPDATED: self._apply_settings,
            FOOD_DISCOUNTS_UPDATED: self._apply_discounts,
        }

    def publish(self, kind: str, payload: object = None) -> None:
        self._inbox.put(RealtimeEvent(kind=kind, payload=payload))

    def drain(self) -> set[str]:
        """Apply every queued event; returns the names of views that changed."""
        invalidated: set[str] = set()
        while True:
            try:
                event = self._inbox.get_nowait()
            except queue.Empty:
                break
            invalidated |= self.apply(event)
        return invalidated

    def apply(self, event: RealtimeEvent) -> set[str]:
        handler = self._handlers.get(event.kind)
        if handler is None:
            logger.warning("realtime_unknown_event kind=%r", event.kind)
            return set()
        try:
            views = handler(event.payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("realtime_malformed_event kind=%r error=%r", event.kind, exc)
            return set()
        logger.debug("realtime_applied kind=%s views=%s", event.kind, sorted(views))
        return views

    def _apply_new_order(self, payload: object) -> set[str]:
        order = parse_order(payload)  # type: ignore[arg-type]
        self.order_book.upsert(order)
        if self.role in ALERT_ROLES and order.id not in self._alerted_order_ids:
            self._alerted_order_ids.add(order.id)
            if self.on_alert is not None:
                self.on_alert(order)
        return {ORDERS_VIEW}

    def _apply_status_update(self, payload: object) -> set[str]:
        order = parse_order(payload)  # type: ignore[arg-type]
        existing = self.order_book.get(order.id)
        if existing is not None and not order.items and existing.items:
            order = replace(order, items=existing.items)
        self.order_book.upsert(order)
        views = {ORDERS_VIEW}
        if order.status == "Paid":
            views.add(REPORTS_VIEW)
        return views

    def _apply_settings(self, payload: object) -> set[str]:
        self.settings = {str(key): str(value) for key, value in dict(payload).items()}  # type: ignore[call-overload]
        return {SETTINGS_VIEW}

    def _apply_discounts(self, payload: object) -> set[str]:
        self.catalog.apply_discounts(list(payload or []))  # type: ignore[call-overload]
        return {CATALOG_VIEW}
