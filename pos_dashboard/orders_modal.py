"""Picker for orders awaiting payment."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_dashboard.models import Order
from pos_dashboard.rendering import format_order_summary


class OrdersModal(ModalScreen[int | None]):
    """Dismisses with the chosen order id, or None."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose", "Checkout"),
    ]

    CSS = """
    OrdersModal {
        align: center middle;
        background: $background 60%;
    }

    #orders-dialog {
        width: 72;
        height: auto;
        max-height: 80%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #orders-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #orders-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, orders: list[Order]) -> None:
        super().__init__()
        self.orders = orders

    def compose(self) -> ComposeResult:
        with Container(id="orders-dialog"):
            yield Static("Checkout", id="orders-title")
            yield Static(id="orders-body")
            yield Static("J/K/↑/↓ move, Enter checkout, Esc/q close", id="orders-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        if not self.orders:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.orders)
        self._refresh_content()

    def action_choose(self) -> None:
        if not self.orders:
            return
        self.dismiss(self.orders[self.cursor_index].id)

    def _refresh_content(self) -> None:
        body = self.query_one("#orders-body", Static)
        if not self.orders:
            body.update("(no orders awaiting payment)")
            return
        content = Text(style="white")
        for idx, order in enumerate(self.orders):
            if idx > 0:
                content.append("\n")
            content.append("➤ " if idx == self.cursor_index else "  ")
            content.append_text(format_order_summary(order))
        body.update(content)
