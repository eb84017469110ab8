"""Variant selection modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_dashboard.cart import discounted_price
from pos_dashboard.customization import PendingCustomization, ResolvedCustomization
from pos_dashboard.errors import SelectionRequiredError
from pos_dashboard.pricing import format_money


class CustomizationModal(ModalScreen[ResolvedCustomization | None]):
    """Centered modal to choose a size or extras before the item enters the cart."""

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("q", "cancel", "Cancel"),
        ("ctrl+c", "cancel", "Cancel"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("space", "toggle_current", "Toggle"),
        ("enter", "activate_current", "Toggle / add"),
    ]

    CSS = """
    CustomizationModal {
        align: center middle;
        background: $background 60%;
    }

    #custom-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #custom-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #custom-body {
        margin-bottom: 1;
        color: white;
    }

    #custom-error {
        color: #ffb3b3;
    }

    #custom-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)
    _CONFIRM_ROW = "Add to cart"

    def __init__(self, pending: PendingCustomization) -> None:
        super().__init__()
        self.pending = pending
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="custom-dialog"):
            yield Static(id="custom-title")
            yield Static(id="custom-body")
            yield Static(id="custom-error")
            yield Static(id="custom-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        rows = self._rows()
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        rows = self._rows()
        if self.cursor_index < len(rows) - 1:
            self.pending.toggle(rows[self.cursor_index])
            self.error = ""
        self._refresh_content()

    def action_activate_current(self) -> None:
        if self.cursor_index < len(self._rows()) - 1:
            self.action_toggle_current()
            return
        try:
            resolved = self.pending.confirm()
        except SelectionRequiredError as exc:
            self.error = exc.message
            self._refresh_content()
            return
        self.dismiss(resolved)

    def _rows(self) -> list[str]:
        return [*self.pending.spec.options, self._CONFIRM_ROW]

    def _refresh_content(self) -> None:
        food = self.pending.food
        kind = "Choose one" if self.pending.is_single else "Choose any"
        title = Text(f"{food.name}  {format_money(discounted_price(food))}", style="bold white")
        title.append(f"\n{kind}", style="#dddddd")
        self.query_one("#custom-title", Static).update(title)

        content = Text(style="white")
        rows = self._rows()
        for idx, option in enumerate(rows):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            if idx == len(rows) - 1:
                content.append(f"\n{pointer}{option}", style="bold #5fbf72")
                continue
            is_checked = self.pending.is_selected(option)
            if self.pending.is_single:
                marker = "(•)" if is_checked else "( )"
            else:
                marker = "[x]" if is_checked else "[ ]"
            content.append(f"{pointer}{marker} {option}", style="bold white" if is_checked else "white")

        self.query_one("#custom-body", Static).update(content)
        self.query_one("#custom-error", Static).update(self.error)
        self.query_one("#custom-help", Static).update("J/K/↑/↓ move, Space toggle, Enter toggle/add, Esc/q cancel")
