"""Two-phase settlement of an order: generate the bill, then take payment."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Callable, Protocol
from uuid import uuid4

from pos_dashboard.config import RECEIPT_PRINT_DELAY_SECONDS
from pos_dashboard.constant import PAYMENT_METHODS
from pos_dashboard.errors import ApiError, CheckoutStateError
from pos_dashboard.models import Bill, Order, Transaction
from pos_dashboard.pricing import CheckoutTotals, PricingSettings, compute_totals, default_discount, to_decimal
from pos_dashboard.printer import ReceiptRow, format_receipt_lines, print_receipt

logger = logging.getLogger(__name__)

IDLE = "Idle"
BILL_GENERATING = "BillGenerating"
BILL_READY = "BillReady"
PAYMENT_PROCESSING = "PaymentProcessing"
PAYMENT_SUCCEEDED = "PaymentSucceeded"
PAYMENT_FAILED = "PaymentFailed"

_BUSY_STATES = frozenset({BILL_GENERATING, PAYMENT_PROCESSING})


class BillingApi(Protocol):
    def generate_bill(self, order_id: int, tax: Decimal, discount: Decimal) -> Bill: ...

    def process_payment(
        self, bill_id: int, amount: Decimal, method: str, reference: str | None = None
    ) -> Transaction: ...


def make_payment_reference(now: float | None = None) -> str:
    """Timestamp-based reference with a random suffix so retries never collide."""
    millis = int((time.time() if now is None else now) * 1000)
    return f"REF-{millis}-{uuid4().hex[:6].upper()}"


class CheckoutOrchestrator:
    """
    Drives one order through bill generation and payment.

    Payment is only attempted against a bill this orchestrator obtained.
    A failure at either phase returns to Idle and keeps any generated bill,
    so retrying payment never produces a second bill. On success the receipt
    print is scheduled after a short delay and the flow is closed.
    """

    def __init__(
        self,
        api: BillingApi,
        order: Order,
        settings: PricingSettings,
        printer: Callable[[list[ReceiptRow]], None] = print_receipt,
        scheduler: Callable[[float, Callable[[], None]], object] | None = None,
        on_close: Callable[[], None] | None = None,
        receipt_delay: float = RECEIPT_PRINT_DELAY_SECONDS,
    ) -> None:
        self.api = api
        self.order = order
        self.settings = settings
        self.printer = printer
        self.scheduler = scheduler
        self.on_close = on_close
        self.receipt_delay = receipt_delay

        self.state = IDLE
        self.history: list[str] = [IDLE]
        self.bill: Bill | None = None
        self.transaction: Transaction | None = None
        self.method = "Cash"
        self.last_error = ""
        self.print_error = ""
        self._discount = default_discount(order.total_amount, settings)
        self._billed_totals: CheckoutTotals | None = None

    @property
    def busy(self) -> bool:
        return self.state in _BUSY_STATES

    @property
    def discount(self) -> Decimal:
        return self._discount

    @property
    def totals(self) -> CheckoutTotals:
        """The numbers on screen; frozen once they were sent with the bill."""
        if self._billed_totals is not None:
            return self._billed_totals
        return compute_totals(self.order.total_amount, self.settings, self._discount)

    def set_discount(self, amount: object) -> None:
        self._ensure_idle_for("change the discount")
        if self.bill is not None:
            raise CheckoutStateError("Discount is locked once the bill is generated.")
        self._discount = max(Decimal("0"), to_decimal(amount))

    def generate_bill(self) -> Bill | None:
        """Returns the bill, or None with `last_error` set when the backend refused."""
        self._ensure_idle_for("generate the bill")
        if self.bill is not None:
            self._set_state(BILL_READY)
            return self.bill

        totals = self.totals
        self.last_error = ""
        self._set_state(BILL_GENERATING)
        try:
            bill = self.api.generate_bill(self.order.id, totals.tax, totals.discount)
        except ApiError as exc:
            self._fail(exc, "bill")
            return None
        except Exception as exc:
            logger.exception("checkout_unexpected_error order=%s phase=bill", self.order.id)
            self._fail(ApiError(f"Could not generate the bill: {exc}"), "bill")
            return None

        self.bill = bill
        self._billed_totals = totals
        self._set_state(BILL_READY)
        logger.info("bill_generated order=%s bill=%s invoice=%s", self.order.id, bill.id, bill.invoice_number)
        return bill

    def pay(self, method: str) -> Transaction | None:
        """Returns the transaction, or None with `last_error` set when payment failed."""
        self._ensure_idle_for("take payment")
        if method not in PAYMENT_METHODS:
            raise CheckoutStateError(f"Unknown payment method {method!r}.")
        if self.bill is None:
            raise CheckoutStateError("Generate the bill before taking payment.")
        if self.state == IDLE:
            self._set_state(BILL_READY)

        self.method = method
        amount = self.totals.grand_total
        reference = None if method == "Cash" else make_payment_reference()
        self.last_error = ""
        self._set_state(PAYMENT_PROCESSING)
        try:
            transaction = self.api.process_payment(self.bill.id, amount, method, reference)
        except ApiError as exc:
            self._fail(exc, "payment")
            return None
        except Exception as exc:
            logger.exception("checkout_unexpected_error order=%s phase=payment", self.order.id)
            self._fail(ApiError(f"Payment could not be completed: {exc}"), "payment")
            return None

        self.transaction = transaction
        self._set_state(PAYMENT_SUCCEEDED)
        logger.info("payment_succeeded order=%s bill=%s amount=%s method=%s", self.order.id, self.bill.id, amount, method)
        self._schedule_receipt()
        return transaction

    def checkout(self, method: str) -> Transaction | None:
        """Generate (or reuse) the bill and pay it in one go."""
        if self.generate_bill() is None:
            return None
        return self.pay(method)

    def receipt_rows(self, now: datetime | None = None) -> list[ReceiptRow]:
        return format_receipt_lines(
            self.order,
            self.bill,
            self.totals,
            self.method,
            self.settings.tax_rate_percent,
            now or datetime.now(),
        )

    def _ensure_idle_for(self, action: str) -> None:
        if self.busy:
            raise CheckoutStateError(f"Cannot {action} while a request is in progress.")
        if self.state == PAYMENT_SUCCEEDED:
            raise CheckoutStateError("This order is already paid.")

    def _set_state(self, state: str) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self, exc: ApiError, phase: str) -> None:
        self.last_error = exc.message
        self._set_state(PAYMENT_FAILED)
        logger.warning("checkout_failed order=%s phase=%s error=%r", self.order.id, phase, exc.message)
        self._set_state(IDLE)

    def _schedule_receipt(self) -> None:
        if self.scheduler is None:
            self._print_and_close()
            return
        self.scheduler(self.receipt_delay, self._print_and_close)

    def _print_and_close(self) -> None:
        try:
            self.printer(self.receipt_rows())
        except Exception as exc:
            self.print_error = f"Payment complete but print failed: {exc}"
            logger.warning("receipt_print_failed order=%s error=%r", self.order.id, exc)
        if self.on_close is not None:
            self.on_close()
