"""
Shared fixtures: a small menu, tables and bookings, and fake backends.
"""

import json
from decimal import Decimal

import pytest
import requests

from pos_dashboard.cart import Cart
from pos_dashboard.catalog import CatalogCache
from pos_dashboard.customization import CustomizationResolver
from pos_dashboard.errors import ApiError
from pos_dashboard.models import Bill, Booking, Category, FoodItem, Order, OrderItem, Table, Transaction


@pytest.fixture
def foods():
    return [
        FoodItem(id=1, name="Margherita Pizza", price=Decimal("12.00"), category_id=10),
        FoodItem(id=2, name="Beef Burger", price=Decimal("9.00"), category_id=10),
        FoodItem(id=3, name="Caesar Salad", price=Decimal("6.00"), category_id=20),
        FoodItem(id=4, name="Lemonade", price=Decimal("4.00"), discount_percentage=Decimal("25"), category_id=30),
        FoodItem(id=5, name="Truffle Soup", price=Decimal("15.00"), category_id=20, available=False),
    ]


@pytest.fixture
def categories():
    return [Category(id=10, name="Mains"), Category(id=20, name="Starters"), Category(id=30, name="Drinks")]


@pytest.fixture
def catalog(foods, categories):
    cache = CatalogCache()
    cache.load(foods, categories)
    return cache


@pytest.fixture
def resolver():
    return CustomizationResolver()


@pytest.fixture
def cart():
    return Cart()


@pytest.fixture
def tables():
    return [Table(id=1, number="5", capacity=4), Table(id=2, number="7", capacity=2), Table(id=3, number="9", capacity=6)]


@pytest.fixture
def bookings():
    return [
        Booking(id=100, table_id=3, table_number="9", customer_name="Ana", status="Reserved"),
        Booking(id=101, table_id=1, table_number="5", customer_name="Ben", status="Completed"),
    ]


@pytest.fixture
def paid_order():
    return Order(
        id=42,
        order_number="ord-20240101-abcdef12",
        type="DineIn",
        status="Served",
        table_number="5",
        total_amount=Decimal("100.00"),
        items=(
            OrderItem(food_id=1, name="Margherita Pizza", quantity=2, unit_price=Decimal("30.00")),
            OrderItem(food_id=3, name="Caesar Salad", quantity=1, unit_price=Decimal("40.00")),
        ),
    )


class FakeBillingApi:
    """Records billing calls; set `fail_bill` / `fail_payment` to a message to make them raise."""

    def __init__(self):
        self.bill_calls = []
        self.payment_calls = []
        self.fail_bill = None
        self.fail_payment = None

    def generate_bill(self, order_id, tax, discount):
        self.bill_calls.append((order_id, tax, discount))
        if self.fail_bill:
            raise ApiError(self.fail_bill, status_code=500)
        return Bill(
            id=len(self.bill_calls),
            order_id=order_id,
            invoice_number=f"INV-{len(self.bill_calls):04d}",
            subtotal=Decimal("100.00"),
            tax=tax,
            discount=discount,
            grand_total=Decimal("100.00") + tax - discount,
        )

    def process_payment(self, bill_id, amount, method, reference=None):
        self.payment_calls.append((bill_id, amount, method, reference))
        if self.fail_payment:
            raise ApiError(self.fail_payment, status_code=402)
        return Transaction(id=len(self.payment_calls), bill_id=bill_id, amount=amount, method=method, reference=reference)


@pytest.fixture
def billing_api():
    return FakeBillingApi()


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.content = b"" if body is None else json.dumps(body).encode()
        self._body = body

    def json(self):
        return self._body


class FakeSession:
    """Stands in for requests.Session: queued responses, recorded requests."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.responses = []

    def queue(self, status_code=200, body=None):
        self.responses.append(FakeResponse(status_code, body))

    def queue_error(self, exc):
        self.responses.append(exc)

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, requests.RequestException):
            raise response
        return response


@pytest.fixture
def http():
    return FakeSession()
