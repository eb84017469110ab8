"""Checkout modal screen: totals, discount, payment method, pay and print."""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Container
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import Static

from pos_dashboard.checkout import BILL_READY, PAYMENT_SUCCEEDED, CheckoutOrchestrator
from pos_dashboard.constant import PAYMENT_METHODS
from pos_dashboard.errors import CheckoutStateError
from pos_dashboard.pricing import format_money
from pos_dashboard.prompt_modal import PromptModal, amount_chars

logger = logging.getLogger(__name__)


class CheckoutModal(ModalScreen[bool]):
    """Dismisses with True once the order is paid and the receipt went out."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("1", "choose_method(0)", "Cash"),
        ("2", "choose_method(1)", "Card"),
        ("3", "choose_method(2)", "Mobile"),
        ("m", "cycle_method", "Method"),
        ("d", "edit_discount", "Discount"),
        ("b", "generate_bill", "Bill"),
        ("enter", "pay", "Pay"),
    ]

    CSS = """
    CheckoutModal {
        align: center middle;
        background: $background 60%;
    }

    #checkout-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #checkout-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #checkout-body {
        color: white;
    }

    #checkout-status {
        margin-top: 1;
        color: #ffb3b3;
    }

    #checkout-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, build_orchestrator: Callable[["CheckoutModal"], CheckoutOrchestrator]) -> None:
        super().__init__()
        self.orchestrator = build_orchestrator(self)
        self.method = PAYMENT_METHODS[0]
        self.requesting = False
        self.status = ""

    def compose(self) -> ComposeResult:
        order = self.orchestrator.order
        with Container(id="checkout-dialog"):
            yield Static(f"Checkout #{order.order_number[:8] or order.id}", id="checkout-title")
            yield Static(id="checkout-body")
            yield Static(id="checkout-status")
            yield Static(id="checkout-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def schedule_from_worker(self, delay: float, callback: Callable[[], None]) -> None:
        """Scheduler handed to the orchestrator; payment completes on a worker thread."""
        self.app.call_from_thread(self.set_timer, delay, callback)

    def finish(self) -> None:
        if self.orchestrator.print_error:
            self.app.notify(self.orchestrator.print_error, severity="warning")
        self.dismiss(True)

    def action_close(self) -> None:
        if self.requesting or self.orchestrator.busy:
            self.status = "Please wait for the current request to finish."
            self._refresh_content()
            return
        self.dismiss(self.orchestrator.state == PAYMENT_SUCCEEDED)

    def action_choose_method(self, index: int) -> None:
        if self.requesting:
            return
        self.method = PAYMENT_METHODS[index]
        self._refresh_content()

    def action_cycle_method(self) -> None:
        self.action_choose_method((PAYMENT_METHODS.index(self.method) + 1) % len(PAYMENT_METHODS))

    def action_edit_discount(self) -> None:
        if self.requesting:
            return
        if self.orchestrator.bill is not None:
            self.status = "Discount is locked once the bill is generated."
            self._refresh_content()
            return

        def apply(value: str | None) -> None:
            if value is None:
                return
            try:
                self.orchestrator.set_discount(value or "0")
            except CheckoutStateError as exc:
                self.status = exc.message
            self._refresh_content()

        self.app.push_screen(
            PromptModal("Discount", "Discount amount", initial=f"{self.orchestrator.discount}", allow_char=amount_chars),
            apply,
        )

    def action_generate_bill(self) -> None:
        self._start(pay=False)

    def action_pay(self) -> None:
        self._start(pay=True)

    def _start(self, pay: bool) -> None:
        if self.requesting:
            return
        self.requesting = True
        self.status = "Processing..."
        self._refresh_content()
        self._run_request(pay, self.method)

    @work(thread=True, exclusive=True, group="checkout")
    def _run_request(self, pay: bool, method: str) -> None:
        error = ""
        try:
            if pay:
                self.orchestrator.checkout(method)
            else:
                self.orchestrator.generate_bill()
        except CheckoutStateError as exc:
            error = exc.message
        except Exception as exc:
            logger.exception("checkout_worker_failed order=%s", self.orchestrator.order.id)
            error = f"Checkout failed: {exc}"
        self.app.call_from_thread(self._request_done, error)

    def _request_done(self, error: str) -> None:
        self.requesting = False
        self.status = error or self.orchestrator.last_error
        if self.orchestrator.state == PAYMENT_SUCCEEDED:
            self.status = "Payment successful. Printing receipt..."
        elif self.status:
            self.app.notify(self.status, severity="error")
        self._refresh_content()

    def _refresh_content(self) -> None:
        try:
            body = self.query_one("#checkout-body", Static)
            status = self.query_one("#checkout-status", Static)
            help_text = self.query_one("#checkout-help", Static)
        except NoMatches:
            return

        orchestrator = self.orchestrator
        totals = orchestrator.totals
        content = Text(style="white")
        for item in orchestrator.order.items:
            content.append(f"{item.quantity}x {item.name}")
            content.append(f"  {format_money(item.unit_price * item.quantity)}\n")
        content.append(f"\nSubtotal        {format_money(totals.subtotal)}\n")
        content.append(f"Tax ({orchestrator.settings.tax_rate_percent.normalize():f}%)  {format_money(totals.tax)}\n")
        content.append(f"Discount       -{format_money(totals.discount)}\n", style="#ffb3b3")
        content.append(f"Total           {format_money(totals.grand_total)}\n", style="bold")

        content.append("\nMethod: ")
        for idx, method in enumerate(PAYMENT_METHODS):
            if idx > 0:
                content.append("  ")
            style = "bold #0b1f0f on #5fbf72" if method == self.method else "white"
            content.append(f" {idx + 1} {method} ", style=style)

        if orchestrator.bill is not None:
            content.append(f"\nBill: {orchestrator.bill.invoice_number}", style="bold")
            if orchestrator.state == BILL_READY:
                content.append(" (ready)")

        body.update(content)
        status.update(self.status)
        if self.requesting:
            help_text.update("Processing, please wait...")
        else:
            help_text.update("1/2/3 or M method, D discount, B bill, Enter pay, Esc/q close")
