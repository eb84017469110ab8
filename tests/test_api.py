"""
Backend client tests against a fake requests session
"""

from decimal import Decimal

import pytest
import requests

from pos_dashboard.api import PosApiClient
from pos_dashboard.errors import ApiError, SessionRequiredError


@pytest.fixture
def client(http):
    return PosApiClient(base_url="http://pos.test/api/", token="secret", timeout=3, session=http)


class TestPosApiClient:
    def test_auth_header_and_url(self, client, http):
        http.queue(body={"data": []})
        client.get_tables()

        assert http.headers["Authorization"] == "Bearer secret"
        assert http.calls[0]["url"] == "http://pos.test/api/table"
        assert http.calls[0]["timeout"] == 3

    def test_paginated_foods_unwrapped(self, client, http):
        http.queue(
            body={
                "data": {
                    "data": [
                        {"id": 1, "name": "Margherita Pizza", "price": "12.5", "discountPercentage": 10, "categoryId": 2},
                        {"id": 2, "name": "Soup", "price": 6, "status": False, "category": {"id": 3}},
                    ],
                    "total": 2,
                    "page": 1,
                }
            }
        )

        foods = client.get_foods(keyword="", category_id=None, take=50)

        assert [food.name for food in foods] == ["Margherita Pizza", "Soup"]
        assert foods[0].price == Decimal("12.5")
        assert foods[0].discount_percentage == Decimal("10")
        assert foods[1].category_id == 3
        assert foods[1].available is False
        assert http.calls[0]["params"] == {"page": 1, "take": 50}

    def test_create_order_returns_parsed_order(self, client, http):
        http.queue(
            201,
            {
                "message": "Order created",
                "order": {
                    "id": 11,
                    "orderNumber": "ORD-11",
                    "type": "Takeaway",
                    "status": "New",
                    "customerName": "Kim",
                    "totalAmount": 18,
                },
            },
        )
        payload = {"type": "Takeaway", "customerName": "Kim", "customerPhone": "", "items": []}

        order = client.create_order(payload)

        assert order.id == 11
        assert order.customer_name == "Kim"
        assert order.total_amount == Decimal("18")
        assert http.calls[0]["json"] == payload

    def test_missing_session_is_mapped(self, client, http):
        http.queue(400, {"message": "No active session", "requireSession": True})

        with pytest.raises(SessionRequiredError) as exc_info:
            client.create_order({"type": "DineIn", "tableNumber": "5", "items": []})

        assert exc_info.value.message == "No active session found. Please start a session first."
        assert exc_info.value.status_code == 400

    def test_other_errors_keep_backend_message(self, client, http):
        http.queue(409, {"message": "Table is occupied"})

        with pytest.raises(ApiError) as exc_info:
            client.create_order({"type": "DineIn", "tableNumber": "5", "items": []})

        assert not isinstance(exc_info.value, SessionRequiredError)
        assert exc_info.value.message == "Table is occupied"
        assert exc_info.value.status_code == 409

    def test_transport_failure(self, client, http):
        http.queue_error(requests.ConnectionError("refused"))

        with pytest.raises(ApiError) as exc_info:
            client.get_orders()

        assert exc_info.value.error_code == "NETWORK_ERROR"

    def test_generate_bill_and_pay(self, client, http):
        http.queue(
            201,
            {
                "data": {
                    "id": 3,
                    "orderId": 42,
                    "invoiceNumber": "INV-2024-0003",
                    "subtotal": 100,
                    "tax": 5,
                    "discount": 10,
                    "grandTotal": 95,
                }
            },
        )
        http.queue(200, {"transaction": {"id": 9, "billId": 3, "amount": 95, "method": "Card", "reference": "REF-1"}})

        bill = client.generate_bill(42, Decimal("5.00"), Decimal("10.00"))
        transaction = client.process_payment(bill.id, Decimal("95.00"), "Card", "REF-1")

        assert bill.invoice_number == "INV-2024-0003"
        assert bill.grand_total == Decimal("95")
        assert http.calls[0]["json"] == {"orderId": 42, "tax": 5.0, "discount": 10.0}
        assert http.calls[1]["json"] == {"billId": 3, "amount": 95.0, "method": "Card", "reference": "REF-1"}
        assert transaction.reference == "REF-1"

    def test_cash_payment_omits_reference(self, client, http):
        http.queue(200, {"transaction": {"id": 1, "billId": 3, "amount": 10, "method": "Cash"}})

        client.process_payment(3, Decimal("10"), "Cash")

        assert "reference" not in http.calls[0]["json"]

    def test_settings_as_strings(self, client, http):
        http.queue(body={"data": {"tax_rate": 5, "discount_rate": "10"}})

        assert client.get_settings() == {"tax_rate": "5", "discount_rate": "10"}

    def test_no_current_session(self, client, http):
        http.queue(body={"data": None})

        assert client.get_current_session() is None

    def test_start_session(self, client, http):
        http.queue(201, {"data": {"id": 4, "terminalId": "T-01", "openingCash": 200, "status": "Open"}})

        session = client.start_session("T-01", Decimal("200"))

        assert session.opening_cash == Decimal("200")
        assert http.calls[0]["json"] == {"terminalId": "T-01", "openingCash": 200.0}

    def test_bookings_carry_table_number(self, client, http):
        http.queue(
            body=[
                {"id": 1, "tableId": 3, "table": {"number": "9"}, "customerName": "Ana", "status": "Reserved"},
            ]
        )

        booking = client.get_bookings()[0]

        assert booking.table_id == 3
        assert booking.table_number == "9"


class TestUnexpectedBodies:
    def test_created_order_without_id(self, client, http):
        http.queue(201, {"message": "Order created"})

        with pytest.raises(ApiError) as exc_info:
            client.create_order({"type": "DineIn", "tableNumber": "5", "items": []})

        assert exc_info.value.message == "Unexpected response from server"
        assert exc_info.value.error_code == "BAD_RESPONSE"

    def test_bill_without_id(self, client, http):
        http.queue(201, {"message": "ok"})

        with pytest.raises(ApiError) as exc_info:
            client.generate_bill(42, Decimal("5.00"), Decimal("10.00"))

        assert exc_info.value.error_code == "BAD_RESPONSE"

    def test_payment_body_not_an_object(self, client, http):
        http.queue(200, ["unexpected"])

        with pytest.raises(ApiError) as exc_info:
            client.process_payment(3, Decimal("10"), "Cash")

        assert exc_info.value.error_code == "BAD_RESPONSE"

    def test_food_row_with_bad_id(self, client, http):
        http.queue(body={"data": [{"id": "abc", "name": "Soup", "price": 6}]})

        with pytest.raises(ApiError):
            client.get_foods()

    def test_settings_not_an_object(self, client, http):
        http.queue(body={"data": ["tax_rate"]})

        with pytest.raises(ApiError):
            client.get_settings()

    def test_scalar_list_body_reads_as_empty(self, client, http):
        http.queue(body={"data": "nothing here"})

        assert client.get_tables() == []
