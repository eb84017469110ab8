"""Single-value text entry modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


def amount_chars(value: str, char: str) -> bool:
    """Digits and at most one decimal point."""
    if char.isdigit():
        return True
    return char == "." and "." not in value


class PromptModal(ModalScreen[str | None]):
    """Prompt for one value; dismisses with the text, or None when cancelled."""

    CSS = """
    PromptModal {
        align: center middle;
        background: $background 60%;
    }

    #prompt-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #prompt-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #prompt-text {
        color: white;
        margin-bottom: 1;
    }

    #prompt-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #prompt-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #prompt-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        prompt: str,
        initial: str = "",
        max_length: int = 60,
        allow_char: Callable[[str, str], bool] | None = None,
        required: bool = False,
    ) -> None:
        super().__init__()
        self.title_text = title
        self.prompt_text = prompt
        self.value = initial
        self.max_length = max_length
        self.allow_char = allow_char
        self.required = required
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="prompt-dialog"):
            yield Static(self.title_text, id="prompt-title")
            yield Static(self.prompt_text, id="prompt-text")
            yield Static(id="prompt-value")
            yield Static(id="prompt-error")
            yield Static("Enter confirm. Backspace delete. Esc/Ctrl+C cancel.", id="prompt-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if self.allow_char is not None and not self.allow_char(self.value, event.character):
                event.stop()
                return
            if len(self.value) < self.max_length:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        # Ignore all non-text keys while typing.
        event.stop()

    def _confirm(self) -> None:
        normalized = self.value.strip()
        if self.required and not normalized:
            self.error = "A value is required."
            self._refresh_content()
            return
        self.dismiss(normalized)

    def _refresh_content(self) -> None:
        self.query_one("#prompt-value", Static).update(Text(f"{self.value}|"))
        self.query_one("#prompt-error", Static).update(self.error or "")
