"""Checkout totals from a subtotal and the global rate settings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Mapping

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")
_ZERO = Decimal("0")


def to_decimal(value: object, default: Decimal = _ZERO) -> Decimal:
    """Parse numbers and numeric strings; anything else becomes the default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not parsed.is_finite():
        return default
    return parsed


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingSettings:
    """Tax and default discount rates, in percent."""

    tax_rate_percent: Decimal = _ZERO
    discount_rate_percent: Decimal = _ZERO

    @classmethod
    def from_mapping(cls, settings: Mapping[str, object] | None) -> "PricingSettings":
        settings = settings or {}
        return cls(
            tax_rate_percent=to_decimal(settings.get("tax_rate")),
            discount_rate_percent=to_decimal(settings.get("discount_rate")),
        )


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    grand_total: Decimal


def default_discount(subtotal: Decimal, settings: PricingSettings) -> Decimal:
    return quantize_money(subtotal * settings.discount_rate_percent / _HUNDRED)


def compute_totals(subtotal: Decimal, settings: PricingSettings, discount: Decimal | None = None) -> CheckoutTotals:
    """Tax from the rate, discount from the rate unless overridden; total never below zero."""
    tax = quantize_money(subtotal * settings.tax_rate_percent / _HUNDRED)
    if discount is None:
        discount = default_discount(subtotal, settings)
    discount = quantize_money(max(_ZERO, discount))
    grand_total = quantize_money(max(_ZERO, subtotal + tax - discount))
    return CheckoutTotals(subtotal=quantize_money(subtotal), tax=tax, discount=discount, grand_total=grand_total)


def format_money(value: Decimal) -> str:
    return f"${quantize_money(value):,.2f}"
