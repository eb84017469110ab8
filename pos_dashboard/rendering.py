"""Rich text helpers for the terminal panes."""

from __future__ import annotations

from rich.text import Text

from pos_dashboard.cart import discounted_price
from pos_dashboard.models import CartLine, FoodItem, Order, OrderDetails
from pos_dashboard.pricing import format_money


def badge_style(order_type: str) -> str:
    """Return a consistent badge style for order types."""
    if order_type == "Takeaway":
        return "bold #ffffff on #2f6db5"
    return "bold #0b1f0f on #5fbf72"


def status_style(status: str) -> str:
    if status in {"New", "InProgress"}:
        return "bold #ffffff on #b23a48"
    if status in {"Ready", "Served"}:
        return "bold #0b1f0f on #5fbf72"
    return "dim"


def format_food_label(food: FoodItem) -> Text:
    """Menu row: name, price and live discount."""
    text = Text(food.name)
    if food.discount_percentage > 0:
        text.append(f"  {format_money(discounted_price(food))}", style="bold")
        text.append(f" ({food.discount_percentage.normalize():f}% off)", style="#5fbf72")
    else:
        text.append(f"  {format_money(food.price)}")
    if not food.available:
        text.append("  unavailable", style="dim")
    return text


def format_cart_line(line: CartLine) -> Text:
    text = Text()
    text.append(f"{line.quantity}x ", style="bold")
    text.append(line.name)
    text.append(f"  {format_money(line.line_total)}", style="bold")
    return text


def format_option_tags(tags: tuple[str, ...] | list[str]) -> Text:
    """Render selected options as compact tags."""
    text = Text()
    for idx, tag in enumerate(tags):
        if idx > 0:
            text.append(" ")
        text.append(f"[{tag}]", style="white")
    return text


def format_order_details(details: OrderDetails) -> Text:
    text = Text()
    text.append(details.order_type, style=badge_style(details.order_type))
    if details.order_type == "DineIn":
        text.append(f" Table: {details.table_number or '-'}")
    else:
        text.append(f" {details.customer_name or '-'}")
        if details.customer_phone:
            text.append(f" ({details.customer_phone})")
    return text


def format_order_summary(order: Order) -> Text:
    text = Text()
    text.append(f"#{order.order_number[-6:] or order.id} ")
    text.append(order.status, style=status_style(order.status))
    where = f"Table {order.table_number}" if order.table_number else (order.customer_name or order.type)
    text.append(f" {where}  {format_money(order.total_amount)}")
    return text
