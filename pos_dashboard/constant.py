"""Editable static customization and receipt configuration."""

from __future__ import annotations

# Ordered: the first pattern contained in a food name wins.
CUSTOMIZATION_RULES: list[tuple[str, dict[str, str | list[str]]]] = [
    ("pizza", {"mode": "single", "options": ["9 Inch", "12 Inch", "16 Inch"]}),
    ("burger", {"mode": "multiple", "options": ["Extra Patty", "Extra Sauce", "Extra Spicy"]}),
]

ORDER_TYPES: tuple[str, ...] = ("DineIn", "Takeaway")
PAYMENT_METHODS: tuple[str, ...] = ("Cash", "Card", "Mobile")

# Orders in these states no longer hold their table.
TERMINAL_ORDER_STATUSES: frozenset[str] = frozenset({"Paid", "Cancelled"})
# Orders the cashier may settle from the checkout picker.
CHECKOUT_ORDER_STATUSES: tuple[str, ...] = ("New", "InProgress", "Ready", "Served")
RESERVED_BOOKING_STATUS = "Reserved"

ALERT_ROLES: frozenset[str] = frozenset({"KitchenStaff", "Admin"})

RECEIPT_HEADER_LINES: list[str] = [
    "FINE DINING RESTAURANT",
    "123 Gourmet St, Dhaka, Bangladesh",
    "VAT Reg: 123456789-001",
    "Tel: +880 1234-567890",
]

RECEIPT_FOOTER_LINES: list[str] = [
    "THANK YOU FOR YOUR VISIT!",
    "PLEASE COME AGAIN",
]
