"""Add-to-cart entry point and order payload construction."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pos_dashboard.cart import Cart
from pos_dashboard.catalog import CatalogCache
from pos_dashboard.customization import CustomizationResolver, PendingCustomization, ResolvedCustomization, format_line_notes
from pos_dashboard.errors import OrderValidationError
from pos_dashboard.models import Booking, CartLine, Order, OrderDetails, Table
from pos_dashboard.validation import validate_order

logger = logging.getLogger(__name__)


def add_food_to_cart(
    catalog: CatalogCache,
    resolver: CustomizationResolver,
    cart: Cart,
    food_id: int,
) -> CartLine | PendingCustomization | None:
    """
    Start adding a menu item.

    Returns the cart line when the item went straight in, a pending
    customization when a variant must be chosen first, or None when the item
    is unknown or unavailable (nothing happens).
    """
    food = catalog.lookup(food_id)
    if food is None:
        logger.info("add_skipped food=%s reason=unavailable", food_id)
        return None
    pending = resolver.begin(food)
    if pending is not None:
        return pending
    return cart.add_line(food)


def add_resolved_to_cart(cart: Cart, resolved: ResolvedCustomization) -> CartLine:
    return cart.add_line(resolved.food, resolved.tags, resolved.notes)


def build_order_payload(cart: Cart, details: OrderDetails) -> dict[str, Any]:
    is_dine_in = details.order_type == "DineIn"
    payload: dict[str, Any] = {"type": details.order_type}
    if is_dine_in:
        payload["tableNumber"] = details.table_number
    else:
        payload["customerName"] = details.customer_name.strip()
        payload["customerPhone"] = details.customer_phone.strip()
    payload["items"] = [
        {
            "foodId": line.food_id,
            "quantity": line.quantity,
            "notes": format_line_notes(line.customizations, line.notes),
        }
        for line in cart.lines
    ]
    return payload


def prepare_order(
    cart: Cart,
    details: OrderDetails,
    tables: Iterable[Table],
    bookings: Iterable[Booking],
    orders: Iterable[Order],
) -> dict[str, Any]:
    """Run every local check and return the create-order payload. No network."""
    if cart.is_empty:
        raise OrderValidationError("Nothing to submit", error_code="EMPTY_CART")
    validate_order(details, tables, bookings, orders)
    return build_order_payload(cart, details)
