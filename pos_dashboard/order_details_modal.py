"""Order header modal screen: order type, table or customer."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_dashboard.constant import ORDER_TYPES
from pos_dashboard.models import OrderDetails
from pos_dashboard.prompt_modal import PromptModal
from pos_dashboard.rendering import badge_style


def _phone_chars(value: str, char: str) -> bool:
    return char.isdigit() or char in "+- "


class OrderDetailsModal(ModalScreen[None]):
    """Edits the draft order header in place."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "edit_current", "Edit"),
    ]

    CSS = """
    OrderDetailsModal {
        align: center middle;
        background: $background 60%;
    }

    #details-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #details-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #details-tables {
        margin-top: 1;
        color: #5fbf72;
    }

    #details-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(
        self,
        details: OrderDetails,
        on_change: Callable[[], None],
        available: list[str] | None = None,
    ) -> None:
        super().__init__()
        self.details = details
        self.on_change = on_change
        self.available = available or []

    def compose(self) -> ComposeResult:
        with Container(id="details-dialog"):
            yield Static("Order Details", id="details-title")
            yield Static(id="details-body")
            yield Static(id="details-tables")
            yield Static("J/K/↑/↓ move, Enter edit/switch, Esc/q close", id="details-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()
        self.on_change()

    def action_move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(self._fields())
        self._refresh_content()

    def action_edit_current(self) -> None:
        field_name, label = self._fields()[self.cursor_index]
        if field_name == "order_type":
            idx = ORDER_TYPES.index(self.details.order_type) if self.details.order_type in ORDER_TYPES else 0
            self.details.order_type = ORDER_TYPES[(idx + 1) % len(ORDER_TYPES)]
            self.cursor_index = 0
            self._refresh_content()
            return

        def apply(value: str | None) -> None:
            if value is None:
                return
            setattr(self.details, field_name, value)
            self._refresh_content()

        self.app.push_screen(
            PromptModal(
                "Order Details",
                self._prompt_text(field_name, label),
                initial=getattr(self.details, field_name),
                max_length=20 if field_name != "customer_name" else 60,
                allow_char=_phone_chars if field_name == "customer_phone" else None,
            ),
            apply,
        )

    def _available_text(self) -> str:
        if not self.available:
            return "Avail: none"
        return f"Avail: {', '.join(self.available)}"

    def _prompt_text(self, field_name: str, label: str) -> str:
        if field_name == "table_number":
            return f"{label} ({self._available_text()})"
        return label

    def _fields(self) -> list[tuple[str, str]]:
        if self.details.order_type == "DineIn":
            return [("order_type", "Type"), ("table_number", "Table number")]
        return [("order_type", "Type"), ("customer_name", "Customer name"), ("customer_phone", "Customer phone")]

    def _refresh_content(self) -> None:
        content = Text(style="white")
        for idx, (field_name, label) in enumerate(self._fields()):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            content.append(f"{pointer}{label}: ")
            if field_name == "order_type":
                content.append(self.details.order_type, style=badge_style(self.details.order_type))
            else:
                content.append(getattr(self.details, field_name) or "-", style="bold white")
        self.query_one("#details-body", Static).update(content)
        tables_hint = self._available_text() if self.details.order_type == "DineIn" else ""
        self.query_one("#details-tables", Static).update(tables_hint)
