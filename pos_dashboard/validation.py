"""Pre-submission checks for table and takeaway orders."""

from __future__ import annotations

from typing import Iterable

from pos_dashboard.constant import RESERVED_BOOKING_STATUS, TERMINAL_ORDER_STATUSES
from pos_dashboard.errors import OrderValidationError
from pos_dashboard.models import Booking, Order, OrderDetails, Table


def validate_order(
    details: OrderDetails,
    tables: Iterable[Table],
    bookings: Iterable[Booking],
    orders: Iterable[Order],
) -> None:
    """
    Raise OrderValidationError for the first failing check.

    Dine-in: table number given, table exists, table not occupied by an
    unsettled order, table not reserved. Takeaway: customer name given.
    """
    if details.order_type == "Takeaway":
        if not details.customer_name.strip():
            raise OrderValidationError(
                "Please enter a customer name for Takeaway orders.",
                error_code="CUSTOMER_NAME_REQUIRED",
            )
        return

    if details.order_type != "DineIn":
        raise OrderValidationError(f"Unknown order type {details.order_type!r}.", error_code="INVALID_ORDER_TYPE")

    number = details.table_number
    if not number:
        raise OrderValidationError("Please enter a table number", error_code="TABLE_NUMBER_REQUIRED")

    table = next((t for t in tables if t.number == number), None)
    if table is None:
        raise OrderValidationError(
            f'Table "{number}" does not exist in the system.',
            error_code="TABLE_NOT_FOUND",
            details={"table_number": number},
        )

    if any(o.table_number == number and o.status not in TERMINAL_ORDER_STATUSES for o in orders):
        raise OrderValidationError(
            f'Table "{number}" is currently occupied. Please select an empty table.',
            error_code="TABLE_OCCUPIED",
            details={"table_number": number},
        )

    booking = next(
        (
            b
            for b in bookings
            if b.status == RESERVED_BOOKING_STATUS and (b.table_id == table.id or b.table_number == number)
        ),
        None,
    )
    if booking is not None:
        raise OrderValidationError(
            f'Table "{number}" is reserved for {booking.customer_name}. Please select another table.',
            error_code="TABLE_RESERVED",
            details={"table_number": number, "booking_id": booking.id},
        )


def available_tables(tables: Iterable[Table], bookings: Iterable[Booking], orders: Iterable[Order]) -> list[Table]:
    """Tables with no unsettled order and no reservation, in the given order."""
    bookings = list(bookings)
    occupied = {o.table_number for o in orders if o.table_number and o.status not in TERMINAL_ORDER_STATUSES}
    reserved_ids = {b.table_id for b in bookings if b.status == RESERVED_BOOKING_STATUS and b.table_id is not None}
    reserved_numbers = {b.table_number for b in bookings if b.status == RESERVED_BOOKING_STATUS and b.table_number}
    return [
        t
        for t in tables
        if t.number not in occupied and t.id not in reserved_ids and t.number not in reserved_numbers
    ]
