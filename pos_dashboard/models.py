"""Domain models for the POS terminal."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class FoodItem:
    """A menu item snapshot as served by the backend."""

    id: int
    name: str
    price: Decimal
    discount_percentage: Decimal = Decimal("0")
    category_id: int | None = None
    available: bool = True


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class CustomizationSpec:
    """Variant choices a special item needs before it can enter the cart."""

    mode: str
    options: tuple[str, ...]


@dataclass
class CartLine:
    """One distinct (food, customization set) entry in the in-progress cart."""

    line_id: int
    food_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1
    notes: str = ""
    customizations: tuple[str, ...] = ()

    @property
    def merge_key(self) -> tuple[int, tuple[str, ...]]:
        return (self.food_id, tuple(sorted(self.customizations)))

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class OrderDetails:
    """Header fields of the order being built."""

    order_type: str = "DineIn"
    table_number: str = ""
    customer_name: str = ""
    customer_phone: str = ""


@dataclass(frozen=True)
class OrderItem:
    food_id: int
    name: str
    quantity: int
    unit_price: Decimal
    notes: str = ""


@dataclass(frozen=True)
class Order:
    """A persisted order as last seen from the backend."""

    id: int
    order_number: str
    type: str
    status: str
    table_number: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    total_amount: Decimal = Decimal("0")
    items: tuple[OrderItem, ...] = ()
    updated_at: str = ""


@dataclass(frozen=True)
class Bill:
    id: int
    order_id: int
    invoice_number: str
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    grand_total: Decimal
    is_paid: bool = False


@dataclass(frozen=True)
class Transaction:
    id: int
    bill_id: int
    amount: Decimal
    method: str
    reference: str | None = None


@dataclass(frozen=True)
class Table:
    id: int
    number: str
    capacity: int = 0


@dataclass(frozen=True)
class Booking:
    id: int
    table_id: int | None
    table_number: str | None
    customer_name: str
    status: str
    phone: str = ""
    guests: int = 0
    booking_time: str = ""


@dataclass(frozen=True)
class Session:
    """Cashier shift gating order creation."""

    id: int
    terminal_id: str
    opening_cash: Decimal
    status: str


@dataclass
class RealtimeEvent:
    kind: str
    payload: object = field(default=None)
