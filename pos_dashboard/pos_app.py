"""Main Textual app class."""

from __future__ import annotations

import logging
from decimal import Decimal

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from pos_dashboard.api import PosApiClient
from pos_dashboard.cart import Cart
from pos_dashboard.catalog import CatalogCache
from pos_dashboard.checkout import CheckoutOrchestrator
from pos_dashboard.checkout_modal import CheckoutModal
from pos_dashboard.config import (
    CATEGORY_FETCH_SIZE,
    MENU_FETCH_SIZE,
    ORDER_FETCH_SIZE,
    REALTIME_POLL_SECONDS,
    SESSION_REDIRECT_DELAY_SECONDS,
    TERMINAL_ID,
    USER_ROLE,
)
from pos_dashboard.customization import CustomizationResolver, PendingCustomization, ResolvedCustomization
from pos_dashboard.customization_modal import CustomizationModal
from pos_dashboard.errors import ApiError, OrderValidationError, SessionRequiredError
from pos_dashboard.models import Booking, CartLine, FoodItem, Order, OrderDetails, Session, Table
from pos_dashboard.order_details_modal import OrderDetailsModal
from pos_dashboard.ordering import add_food_to_cart, add_resolved_to_cart, prepare_order
from pos_dashboard.orders import OrderBook
from pos_dashboard.orders_modal import OrdersModal
from pos_dashboard.pricing import PricingSettings, format_money, to_decimal
from pos_dashboard.printer import check_printer_dependencies
from pos_dashboard.prompt_modal import PromptModal, amount_chars
from pos_dashboard.realtime import CATALOG_VIEW, ORDERS_VIEW, RealtimeBridge
from pos_dashboard.rendering import format_cart_line, format_food_label, format_option_tags, format_order_details
from pos_dashboard.validation import available_tables

logger = logging.getLogger(__name__)

_SESSION_ROLES = {"Cashier", "Admin"}


class PosApp(App):
    """A Textual app for building orders, sending them and settling bills."""

    TITLE = "POS Terminal"
    SUB_TITLE = "Orders / Checkout"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-details, #cart-total {
        height: auto;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    query = reactive("")
    selected_index = reactive(0)
    line_selected_index = reactive(None)
    category_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "add_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        ("plus", "change_quantity(1)", "Qty +1"),
        ("equals_sign", "change_quantity(1)", "Qty +1"),
        ("minus", "change_quantity(-1)", "Qty -1"),
        ("left_square_bracket", "cycle_category(-1)", "Prev category"),
        ("right_square_bracket", "cycle_category(1)", "Next category"),
        Binding("ctrl+s", "submit_order", "Submit order", priority=True),
        ("ctrl+c", "cancel_active_mode", "Exit active mode"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, api: PosApiClient | None = None, role: str = USER_ROLE, terminal_id: str = TERMINAL_ID) -> None:
        super().__init__()
        self.api = api or PosApiClient()
        self.role = role
        self.terminal_id = terminal_id
        self.catalog = CatalogCache()
        self.resolver = CustomizationResolver()
        self.cart = Cart()
        self.details = OrderDetails()
        self.order_book = OrderBook()
        self.tables: list[Table] = []
        self.bookings: list[Booking] = []
        self.session: Session | None = None
        self.bridge = RealtimeBridge(self.catalog, self.order_book, role, on_alert=self._new_order_alert)
        self.submitting = False
        self.system_status = ""
        logger.info("app_init role=%s terminal=%s", role, terminal_id)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static(id="order-details")
                yield Static("(no items yet)", id="cart-list")
                yield Static(id="cart-total")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        self.system_status = msg
        logger.info("on_mount printer_status=%r", msg)
        self.set_interval(REALTIME_POLL_SECONDS, self._drain_realtime)
        self._refresh_all()
        self.load_data()

    def on_key(self, event: Key) -> None:
        if self._modal_open():
            return

        if not event.is_printable or len(event.character or "") != 1:
            return
        char = event.character
        if not (char.isalnum() or (char == " " and self.input_state == "active")):
            return

        key = char.lower()
        if self.input_state == "normal":
            handlers = {
                "j": lambda: self._move_line_selection(1),
                "k": lambda: self._move_line_selection(-1),
                "d": self._delete_selected_line,
                "n": self._edit_selected_notes,
                "o": self._open_order_details,
                "c": self._open_checkout_picker,
                "r": self.load_data,
                "t": self.action_start_session,
            }
            handler = handlers.get(key)
            if handler is not None:
                handler()
                event.stop()
                return

            if key != "s":
                return

            self.input_state = "active"
            self.query = ""
            self.selected_index = 0
            self._refresh_search()
            event.stop()
            return

        self.query += char
        self.selected_index = 0
        self._refresh_search()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if self._modal_open():
            return
        if self.input_state == "normal":
            return

        self.input_state = "normal"
        self.query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.input_state != "active":
            return

        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_cycle_category(self, delta: int) -> None:
        if self._modal_open():
            return
        categories = self.catalog.categories
        if not categories:
            return
        # None means all categories and sits before the first one.
        positions = [None, *range(len(categories))]
        current = positions.index(self.category_index) if self.category_index in positions else 0
        self.category_index = positions[(current + delta) % len(positions)]
        self.selected_index = 0
        self._refresh_search()

    def action_backspace_query(self) -> None:
        if self._modal_open():
            return
        if self.input_state != "active":
            return

        if not self.query:
            return
        self.query = self.query[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_add_selected(self) -> None:
        if self._modal_open():
            return
        if self.input_state != "active" or self._cart_locked():
            return

        results = self._filtered_results()
        if not results:
            return

        food = results[self.selected_index]
        outcome = add_food_to_cart(self.catalog, self.resolver, self.cart, food.id)
        if isinstance(outcome, PendingCustomization):
            self.push_screen(CustomizationModal(outcome), self._customization_done)
            return
        if isinstance(outcome, CartLine):
            self._select_line(outcome)
        self._refresh_cart()

    def action_change_quantity(self, delta: int) -> None:
        if self._modal_open() or self.input_state != "normal" or self._cart_locked():
            return
        line = self._selected_line()
        if line is None:
            return
        self.cart.update_quantity(line.line_id, delta)
        self._refresh_cart()

    def action_submit_order(self) -> None:
        logger.debug("submit_enter state=%r lines=%s", self.input_state, len(self.cart.lines))
        if self._modal_open():
            return
        if self.input_state != "normal":
            self._set_status("Submit only in NORMAL mode (Ctrl+C to exit search)")
            return
        if self.submitting:
            return

        try:
            payload = prepare_order(self.cart, self.details, self.tables, self.bookings, self.order_book.orders)
        except OrderValidationError as exc:
            logger.info("submit_blocked code=%s", exc.error_code)
            self._set_status(exc.message, severity="error")
            return

        self.submitting = True
        self._set_status("Submitting order...")
        self._create_order(payload)

    def action_start_session(self) -> None:
        if self._modal_open():
            return

        def start(value: str | None) -> None:
            if value is None:
                return
            self._start_session(to_decimal(value))

        self.push_screen(
            PromptModal(
                "Start Session",
                f"Opening cash for terminal {self.terminal_id}",
                allow_char=amount_chars,
                required=True,
            ),
            start,
        )

    @work(thread=True, group="load")
    def load_data(self) -> None:
        try:
            foods = self.api.get_foods(take=MENU_FETCH_SIZE)
            categories = self.api.get_categories(take=CATEGORY_FETCH_SIZE)
            tables = self.api.get_tables()
            bookings = self.api.get_bookings()
            orders = self.api.get_orders(take=ORDER_FETCH_SIZE)
            settings = self.api.get_settings()
            session = self.api.get_current_session() if self.role in _SESSION_ROLES else None
        except ApiError as exc:
            self.call_from_thread(self._set_status, f"Load failed: {exc.message}", "error")
            return
        except Exception as exc:
            logger.exception("load_failed")
            self.call_from_thread(self._set_status, f"Load failed: {exc}", "error")
            return
        self.call_from_thread(self._apply_loaded, foods, categories, tables, bookings, orders, settings, session)

    @work(thread=True, group="refresh")
    def _reload_views(self, views: set[str]) -> None:
        try:
            foods = self.api.get_foods(take=MENU_FETCH_SIZE) if CATALOG_VIEW in views else None
            orders = self.api.get_orders(take=ORDER_FETCH_SIZE) if ORDERS_VIEW in views else None
        except ApiError as exc:
            logger.warning("reload_failed views=%s error=%r", sorted(views), exc.message)
            return
        self.call_from_thread(self._apply_reloaded, foods, orders)

    @work(thread=True, exclusive=True, group="submit")
    def _create_order(self, payload: dict) -> None:
        try:
            order = self.api.create_order(payload)
        except SessionRequiredError as exc:
            self.call_from_thread(self._session_required, exc.message)
            return
        except ApiError as exc:
            self.call_from_thread(self._order_failed, exc.message)
            return
        except Exception as exc:
            logger.exception("create_order_failed")
            self.call_from_thread(self._order_failed, f"Failed to place order: {exc}")
            return
        self.call_from_thread(self._order_created, order)

    @work(thread=True, exclusive=True, group="session")
    def _start_session(self, opening_cash: Decimal) -> None:
        try:
            session = self.api.start_session(self.terminal_id, opening_cash)
        except ApiError as exc:
            self.call_from_thread(self._set_status, f"Could not start session: {exc.message}", "error")
            return
        self.call_from_thread(self._session_started, session)

    def _apply_loaded(
        self,
        foods: list[FoodItem],
        categories: list,
        tables: list[Table],
        bookings: list[Booking],
        orders: list[Order],
        settings: dict[str, str],
        session: Session | None,
    ) -> None:
        self.catalog.load(foods, categories)
        self.tables = tables
        self.bookings = bookings
        self.order_book.load(orders)
        self.bridge.settings = settings
        self.session = session
        logger.info("data_loaded foods=%s tables=%s orders=%s", len(foods), len(tables), len(orders))
        if self.role in _SESSION_ROLES and session is None:
            self._set_status("No active session. Press T to start one before creating orders.", "warning")
        else:
            self._set_status("Ready")
        self._refresh_all()

    def _apply_reloaded(self, foods: list[FoodItem] | None, orders: list[Order] | None) -> None:
        if foods is not None:
            self.catalog.load(foods)
        if orders is not None:
            self.order_book.load(orders)
        self._refresh_search()

    def _drain_realtime(self) -> None:
        views = self.bridge.drain()
        if not views:
            return
        if views & {CATALOG_VIEW, ORDERS_VIEW}:
            self._reload_views(views)
        self._refresh_all()

    def _new_order_alert(self, order: Order) -> None:
        self.bell()
        self.notify(f"New Ticket: #{order.order_number[-6:]} • {order.type}", title="New order", timeout=3)

    def _order_created(self, order: Order) -> None:
        self.submitting = False
        self.cart.clear()
        self.line_selected_index = None
        self.order_book.upsert(order)
        logger.info("order_created id=%s number=%s", order.id, order.order_number)
        self._set_status(f"Order placed: #{order.order_number[-6:] or order.id}")
        self._refresh_cart()

    def _order_failed(self, message: str) -> None:
        self.submitting = False
        logger.warning("order_failed error=%r", message)
        self._set_status(message or "Failed to place order", "error")

    def _session_required(self, message: str) -> None:
        self.submitting = False
        self._set_status(message, "error")
        self.set_timer(SESSION_REDIRECT_DELAY_SECONDS, self.action_start_session)

    def _session_started(self, session: Session) -> None:
        self.session = session
        self._set_status(f"Session started on {session.terminal_id}")

    def _customization_done(self, resolved: ResolvedCustomization | None) -> None:
        if resolved is None or self._cart_locked():
            return
        self._select_line(add_resolved_to_cart(self.cart, resolved))
        self._refresh_cart()

    def _open_order_details(self) -> None:
        free = available_tables(self.tables, self.bookings, self.order_book.orders)
        self.push_screen(
            OrderDetailsModal(self.details, on_change=self._refresh_cart, available=[t.number for t in free])
        )

    def _open_checkout_picker(self) -> None:
        self.push_screen(OrdersModal(self.order_book.awaiting_payment()), self._open_checkout)

    def _open_checkout(self, order_id: int | None) -> None:
        if order_id is None:
            return
        order = self.order_book.get(order_id)
        if order is None:
            return
        settings = PricingSettings.from_mapping(self.bridge.settings)

        def build(modal: CheckoutModal) -> CheckoutOrchestrator:
            return CheckoutOrchestrator(
                self.api,
                order,
                settings,
                scheduler=modal.schedule_from_worker,
                on_close=modal.finish,
            )

        self.push_screen(CheckoutModal(build), self._checkout_closed)

    def _checkout_closed(self, paid: bool | None) -> None:
        if paid:
            self._set_status("Payment complete")
            self._reload_views({ORDERS_VIEW})

    def _edit_selected_notes(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        line_id = line.line_id

        def apply(value: str | None) -> None:
            if value is None:
                return
            self.cart.update_notes(line_id, value)
            self._refresh_cart()

        self.push_screen(PromptModal("Notes", line.name, initial=line.notes, max_length=120), apply)

    def _delete_selected_line(self) -> None:
        line = self._selected_line()
        if line is None or self._cart_locked():
            return
        self.cart.remove_line(line.line_id)
        self._refresh_cart()

    def _cart_locked(self) -> bool:
        if self.submitting:
            self._set_status("Order is being submitted...")
        return self.submitting

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def _set_status(self, message: str, severity: str = "information") -> None:
        self.system_status = message
        if severity != "information":
            self.notify(message, severity=severity)
        self._refresh_search()

    def _filtered_results(self) -> list[FoodItem]:
        categories = self.catalog.categories
        category_id = None
        if self.category_index is not None and self.category_index < len(categories):
            category_id = categories[self.category_index].id
        return self.catalog.search(self.query, category_id)

    def _refresh_all(self) -> None:
        self._refresh_cart()
        self._refresh_search()

    def _select_line(self, line: CartLine) -> None:
        lines = self.cart.lines
        for idx, candidate in enumerate(lines):
            if candidate.line_id == line.line_id:
                self.line_selected_index = idx
                return

    def _move_line_selection(self, delta: int) -> None:
        lines = self.cart.lines
        if not lines:
            return

        if self.line_selected_index is None:
            self.line_selected_index = 0 if delta > 0 else len(lines) - 1
        else:
            self.line_selected_index = (self.line_selected_index + delta) % len(lines)
        self._refresh_cart()

    def _selected_line(self) -> CartLine | None:
        lines = self.cart.lines
        if self.line_selected_index is None:
            return None
        if not (0 <= self.line_selected_index < len(lines)):
            return None
        return lines[self.line_selected_index]

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            half = rows // 2
            start = selected - half
            start = max(0, start)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
            details_widget = self.query_one("#order-details", Static)
            total_widget = self.query_one("#cart-total", Static)
        except NoMatches:
            return

        details_widget.update(format_order_details(self.details))
        total = Text()
        total.append(f"Items: {self.cart.item_count}   Subtotal: ", style="bold")
        total.append(format_money(self.cart.subtotal()), style="bold #5fbf72")
        total_widget.update(total)

        lines = self.cart.lines
        if not lines:
            self.line_selected_index = None
            cart_widget.update("(no items yet)")
            return

        if self.line_selected_index is not None and self.line_selected_index >= len(lines):
            self.line_selected_index = len(lines) - 1

        visible_rows = self._visible_rows(cart_widget)
        start, end = self._window_bounds(len(lines), visible_rows, self.line_selected_index)

        content = Text()
        if start > 0:
            content.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                content.append("\n")

            line = lines[idx]
            pointer = "➤ " if idx == self.line_selected_index else "  "
            content.append(pointer)
            content.append(f"{idx + 1}. ")
            content.append_text(format_cart_line(line))

            if line.customizations:
                content.append("\n      ")
                content.append_text(format_option_tags(line.customizations))
            if line.notes.strip():
                content.append(f"\n      {line.notes.strip()}", style="italic")

        if end < len(lines):
            content.append("\n⋮", style="dim")

        cart_widget.update(content)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_results())

    def _category_label(self) -> str:
        categories = self.catalog.categories
        if self.category_index is None or self.category_index >= len(categories):
            return "All"
        return categories[self.category_index].name

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            help_text = "S search, J/K select, +/- qty, N notes, O details, C checkout, Ctrl+S submit"
            bar.update(Text(f"{help_text}\n{status}"))
            return

        text = Text()
        text.append(f" {self._category_label()} ", style="bold #0b1f0f on #5fbf72")
        text.append(f": {self.query}")
        bar.update(text)

    def _refresh_results(self, results: list[FoodItem]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            results_widget.update("")
            return

        if not results:
            results_widget.update("No results")
            return

        if self.selected_index >= len(results):
            self.selected_index = 0

        visible_rows = self._visible_rows(results_widget)
        start, end = self._window_bounds(len(results), visible_rows, self.selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append_text(format_food_label(results[idx]))

        if end < len(results):
            lines.append("\n⋮", style="dim")

        results_widget.update(lines)
