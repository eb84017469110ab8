"""HTTP client for the restaurant backend."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, TypeVar

import requests

from pos_dashboard.config import API_BASE_URL, API_TIMEOUT_SECONDS, API_TOKEN
from pos_dashboard.errors import ApiError, SessionRequiredError
from pos_dashboard.models import Bill, Booking, Category, FoodItem, Order, OrderItem, Session, Table, Transaction
from pos_dashboard.pricing import to_decimal

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _unwrap(body: Any) -> Any:
    """Strip `{data: ...}` envelopes, including the nested paginated form."""
    while isinstance(body, dict) and "data" in body and set(body) <= {"data", "message", "total", "page", "totalPages", "success"}:
        body = body["data"]
    return body


def _rows(body: Any) -> list[dict]:
    body = _unwrap(body)
    if isinstance(body, dict):
        for key in ("items", "orders", "results"):
            if isinstance(body.get(key), list):
                return body[key]
        return []
    return body if isinstance(body, list) else []


def parse_food(raw: dict) -> FoodItem:
    category_id = raw.get("categoryId")
    if category_id is None and isinstance(raw.get("category"), dict):
        category_id = raw["category"].get("id")
    return FoodItem(
        id=int(raw["id"]),
        name=str(raw.get("name", "")),
        price=to_decimal(raw.get("price")),
        discount_percentage=to_decimal(raw.get("discountPercentage")),
        category_id=int(category_id) if category_id is not None else None,
        available=bool(raw.get("status", True)),
    )


def parse_category(raw: dict) -> Category:
    return Category(id=int(raw["id"]), name=str(raw.get("name", "")))


def parse_order(raw: dict) -> Order:
    items = tuple(
        OrderItem(
            food_id=int(item.get("foodId", 0)),
            name=str((item.get("food") or {}).get("name", "")),
            quantity=int(item.get("quantity", 0)),
            unit_price=to_decimal(item.get("unitPrice")),
            notes=str(item.get("notes") or ""),
        )
        for item in raw.get("items") or []
    )
    return Order(
        id=int(raw["id"]),
        order_number=str(raw.get("orderNumber", "")),
        type=str(raw.get("type", "DineIn")),
        status=str(raw.get("status", "New")),
        table_number=raw.get("tableNumber"),
        customer_name=raw.get("customerName"),
        customer_phone=raw.get("customerPhone"),
        total_amount=to_decimal(raw.get("totalAmount")),
        items=items,
        updated_at=str(raw.get("updatedAt", "")),
    )


def parse_bill(raw: dict) -> Bill:
    return Bill(
        id=int(raw["id"]),
        order_id=int(raw.get("orderId", 0)),
        invoice_number=str(raw.get("invoiceNumber", "")),
        subtotal=to_decimal(raw.get("subtotal")),
        tax=to_decimal(raw.get("tax")),
        discount=to_decimal(raw.get("discount")),
        grand_total=to_decimal(raw.get("grandTotal")),
        is_paid=bool(raw.get("isPaid", False)),
    )


def parse_transaction(raw: dict) -> Transaction:
    return Transaction(
        id=int(raw.get("id", 0)),
        bill_id=int(raw.get("billId", 0)),
        amount=to_decimal(raw.get("amount")),
        method=str(raw.get("method", "")),
        reference=raw.get("reference"),
    )


def parse_table(raw: dict) -> Table:
    return Table(id=int(raw["id"]), number=str(raw.get("number", "")), capacity=int(raw.get("capacity") or 0))


def parse_booking(raw: dict) -> Booking:
    table = raw.get("table") or {}
    table_id = raw.get("tableId")
    return Booking(
        id=int(raw["id"]),
        table_id=int(table_id) if table_id is not None else None,
        table_number=str(table["number"]) if table.get("number") is not None else None,
        customer_name=str(raw.get("customerName", "")),
        status=str(raw.get("status", "")),
        phone=str(raw.get("phone") or ""),
        guests=int(raw.get("guests") or 0),
        booking_time=str(raw.get("bookingTime") or ""),
    )


def parse_session(raw: dict) -> Session:
    return Session(
        id=int(raw["id"]),
        terminal_id=str(raw.get("terminalId", "")),
        opening_cash=to_decimal(raw.get("openingCash")),
        status=str(raw.get("status", "")),
    )


def _json_number(value: Decimal) -> float:
    return float(value)


def _parse(parser: Callable[[dict], T], raw: Any) -> T:
    """Run a record parser; a body missing required fields becomes an ApiError."""
    try:
        return parser(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("api_bad_response parser=%s body=%r error=%r", parser.__name__, raw, exc)
        raise ApiError("Unexpected response from server", error_code="BAD_RESPONSE", details={"body": raw}) from exc


def _parse_rows(parser: Callable[[dict], T], body: Any) -> list[T]:
    return [_parse(parser, row) for row in _rows(body)]


class PosApiClient:
    """Thin wrapper over a requests.Session with typed results."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: str = API_TOKEN,
        timeout: float = API_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, params: dict | None = None, json_data: dict | None = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            response = self.session.request(method, url, params=params, json=json_data, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("api_transport_error method=%s path=%s error=%r", method, path, exc)
            raise ApiError(f"Could not reach the server: {exc}", error_code="NETWORK_ERROR") from exc

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if not response.ok:
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning("api_error method=%s path=%s status=%s body=%r", method, path, response.status_code, body)
            raise ApiError(
                str(message or f"Request failed ({response.status_code})"),
                status_code=response.status_code,
                details=body if isinstance(body, dict) else {},
            )

        logger.debug("api_ok method=%s path=%s status=%s", method, path, response.status_code)
        return body

    def get_foods(
        self,
        keyword: str | None = None,
        category_id: int | None = None,
        page: int = 1,
        take: int = 50,
    ) -> list[FoodItem]:
        body = self._request(
            "GET",
            "/food",
            params={"page": page, "take": take, "keyword": keyword or None, "categoryId": category_id},
        )
        return _parse_rows(parse_food, body)

    def get_categories(self, take: int = 100) -> list[Category]:
        body = self._request("GET", "/category", params={"page": 1, "take": take})
        return _parse_rows(parse_category, body)

    def get_tables(self) -> list[Table]:
        return _parse_rows(parse_table, self._request("GET", "/table"))

    def get_bookings(self) -> list[Booking]:
        return _parse_rows(parse_booking, self._request("GET", "/booking"))

    def get_orders(self, status: str | None = None, page: int = 1, take: int = 100) -> list[Order]:
        body = self._request("GET", "/order", params={"status": status, "page": page, "take": take})
        return _parse_rows(parse_order, body)

    def get_order(self, order_id: int) -> Order:
        return _parse(parse_order, _unwrap(self._request("GET", f"/order/{order_id}")))

    def create_order(self, payload: dict) -> Order:
        try:
            body = self._request("POST", "/order", json_data=payload)
        except ApiError as exc:
            if exc.details.get("requireSession") or "session" in exc.message.lower():
                raise SessionRequiredError(
                    "No active session found. Please start a session first.",
                    status_code=exc.status_code,
                    error_code="SESSION_REQUIRED",
                    details=exc.details,
                ) from exc
            raise
        raw = body.get("order", body) if isinstance(body, dict) else body
        return _parse(parse_order, _unwrap(raw))

    def generate_bill(self, order_id: int, tax: Decimal, discount: Decimal) -> Bill:
        body = self._request(
            "POST",
            "/billing/generate",
            json_data={"orderId": order_id, "tax": _json_number(tax), "discount": _json_number(discount)},
        )
        return _parse(parse_bill, _unwrap(body))

    def process_payment(self, bill_id: int, amount: Decimal, method: str, reference: str | None = None) -> Transaction:
        json_data: dict[str, Any] = {"billId": bill_id, "amount": _json_number(amount), "method": method}
        if reference is not None:
            json_data["reference"] = reference
        body = self._request("POST", "/billing/pay", json_data=json_data)
        raw = body.get("transaction", body) if isinstance(body, dict) else body
        return _parse(parse_transaction, _unwrap(raw) or {})

    def get_settings(self) -> dict[str, str]:
        body = _unwrap(self._request("GET", "/settings"))
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise ApiError("Unexpected response from server", error_code="BAD_RESPONSE", details={"body": body})
        return {str(key): str(value) for key, value in body.items()}

    def get_current_session(self) -> Session | None:
        body = _unwrap(self._request("GET", "/session/current"))
        if not isinstance(body, dict) or "id" not in body:
            return None
        return _parse(parse_session, body)

    def start_session(self, terminal_id: str, opening_cash: Decimal) -> Session:
        body = self._request(
            "POST",
            "/session/start",
            json_data={"terminalId": terminal_id, "openingCash": _json_number(opening_cash)},
        )
        return _parse(parse_session, _unwrap(body))
