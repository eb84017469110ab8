"""
Receipt layout tests; no printer hardware involved
"""

from datetime import datetime
from decimal import Decimal

import pytest

from pos_dashboard import printer
from pos_dashboard.errors import PrinterError
from pos_dashboard.models import Bill
from pos_dashboard.pricing import PricingSettings, compute_totals
from pos_dashboard.printer import SEPARATOR, ReceiptRow, format_receipt_lines

NOW = datetime(2024, 3, 9, 18, 5)


@pytest.fixture
def bill(paid_order):
    return Bill(
        id=3,
        order_id=paid_order.id,
        invoice_number="INV-2024-0003",
        subtotal=Decimal("100.00"),
        tax=Decimal("5.00"),
        discount=Decimal("10.00"),
        grand_total=Decimal("95.00"),
    )


def _pairs(rows):
    return {(row.left, row.right) for row in rows if not row.separator}


class TestReceiptLayout:
    def test_paid_receipt_rows(self, paid_order, bill):
        settings = PricingSettings(tax_rate_percent=Decimal("5.00"), discount_rate_percent=Decimal("10"))
        totals = compute_totals(paid_order.total_amount, settings)

        rows = format_receipt_lines(paid_order, bill, totals, "Card", settings.tax_rate_percent, NOW)
        pairs = _pairs(rows)

        assert rows[0] == ReceiptRow("FINE DINING RESTAURANT", center=True)
        assert ("INV: INV-2024-0003", "DATE: 09/03/2024") in pairs
        assert ("TABLE: 5 (DineIn)", "TIME: 06:05 PM") in pairs
        assert ("MARGHERITA PIZZA", "$60.00") in pairs
        assert ("  2 PCS x $30.00", "") in pairs
        assert ("VAT (5%):", "$5.00") in pairs
        assert ("DISCOUNT:", "-$10.00") in pairs
        assert ("NET AMOUNT:", "$95.00") in pairs
        assert ("PAYMENT TYPE:", "CARD") in pairs
        assert rows[-1] == ReceiptRow("ORD-20240101-ABCDEF12", center=True)
        assert SEPARATOR in rows

    def test_no_discount_row_when_zero(self, paid_order):
        totals = compute_totals(paid_order.total_amount, PricingSettings())

        rows = format_receipt_lines(paid_order, None, totals, "Cash", Decimal("0"), NOW)
        lefts = [row.left for row in rows]

        assert "DISCOUNT:" not in lefts
        assert "INV: ABCDEF12" in lefts
        assert not any(left.startswith("CUSTOMER:") for left in lefts)


class TestPrinterFont:
    def test_missing_font_raises(self, monkeypatch):
        monkeypatch.setenv("POS_PRINTER_FONT_PATH", "/nonexistent/font.ttf")
        monkeypatch.setattr(printer, "PRINTER_FONT_PATH", "/nonexistent/other.ttf")
        monkeypatch.setattr(printer, "_LINUX_FONT_FALLBACKS", ())

        with pytest.raises(PrinterError):
            printer.resolve_printer_font_path()

    def test_env_override_wins(self, monkeypatch, tmp_path):
        font = tmp_path / "receipt.ttf"
        font.write_bytes(b"")
        monkeypatch.setenv("POS_PRINTER_FONT_PATH", str(font))

        assert printer.resolve_printer_font_path() == str(font)
