"""Receipt layout and thermal printing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from pos_dashboard.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from pos_dashboard.constant import RECEIPT_FOOTER_LINES, RECEIPT_HEADER_LINES
from pos_dashboard.errors import PrinterError
from pos_dashboard.models import Bill, Order
from pos_dashboard.pricing import CheckoutTotals, format_money as money

_SEPARATOR_HEIGHT_PX = 10
_SEPARATOR_DASH_PX = 6
_ROW_PADDING_PX = 4
_FONT_OVERRIDE_ENV = "POS_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)


@dataclass(frozen=True)
class ReceiptRow:
    """One printed row: left text, optional right-aligned amount."""

    left: str = ""
    right: str = ""
    center: bool = False
    separator: bool = False


SEPARATOR = ReceiptRow(separator=True)


def _percent(value: Decimal) -> str:
    return f"{value.normalize():f}"


def format_receipt_lines(
    order: Order,
    bill: Bill | None,
    totals: CheckoutTotals,
    method: str,
    tax_rate_percent: Decimal,
    now: datetime,
) -> list[ReceiptRow]:
    """Lay out the customer receipt for a paid order."""
    rows: list[ReceiptRow] = [ReceiptRow(line, center=True) for line in RECEIPT_HEADER_LINES]
    rows.append(SEPARATOR)

    invoice = bill.invoice_number if bill is not None and bill.invoice_number else order.order_number[-8:].upper()
    rows.append(ReceiptRow(f"INV: {invoice}", f"DATE: {now:%d/%m/%Y}"))
    rows.append(ReceiptRow(f"TABLE: {order.table_number or 'N/A'} ({order.type})", f"TIME: {now:%I:%M %p}"))
    if order.customer_name:
        rows.append(ReceiptRow(f"CUSTOMER: {order.customer_name}"))
    rows.append(ReceiptRow("CASHIER: SYSTEM"))
    rows.append(SEPARATOR)

    rows.append(ReceiptRow("DESCRIPTION", "AMOUNT"))
    rows.append(SEPARATOR)
    for item in order.items:
        rows.append(ReceiptRow((item.name or f"ITEM {item.food_id}").upper(), money(item.unit_price * item.quantity)))
        rows.append(ReceiptRow(f"  {item.quantity} PCS x {money(item.unit_price)}"))
    rows.append(SEPARATOR)

    rows.append(ReceiptRow("SUB TOTAL:", money(totals.subtotal)))
    rows.append(ReceiptRow(f"VAT ({_percent(tax_rate_percent)}%):", money(totals.tax)))
    if totals.discount > 0:
        rows.append(ReceiptRow("DISCOUNT:", f"-{money(totals.discount)}"))
    rows.append(SEPARATOR)
    rows.append(ReceiptRow("NET AMOUNT:", money(totals.grand_total)))
    rows.append(SEPARATOR)

    rows.append(ReceiptRow("PAYMENT TYPE:", method.upper()))
    rows.append(ReceiptRow("STATUS:", "PAID"))
    rows.append(SEPARATOR)

    rows.extend(ReceiptRow(line, center=True) for line in RECEIPT_FOOTER_LINES)
    rows.append(ReceiptRow(order.order_number.upper(), center=True))
    return rows


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path.

    Resolution order:
    1. POS_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise PrinterError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def _render_row(row: ReceiptRow, font: object) -> object:
    from PIL import Image, ImageDraw

    if row.separator:
        img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
        draw = ImageDraw.Draw(img)
        y = _SEPARATOR_HEIGHT_PX // 2
        for x in range(0, PRINTER_WIDTH_PX, _SEPARATOR_DASH_PX * 2):
            draw.line((x, y, min(PRINTER_WIDTH_PX - 1, x + _SEPARATOR_DASH_PX), y), fill=0, width=1)
        return img

    probe = ImageDraw.Draw(Image.new("1", (1, 1), color=1))
    ascent, descent = font.getmetrics()
    height = ascent + descent + _ROW_PADDING_PX * 2
    img = Image.new("1", (PRINTER_WIDTH_PX, height), color=1)
    draw = ImageDraw.Draw(img)
    y = _ROW_PADDING_PX

    if row.center:
        bbox = probe.textbbox((0, 0), row.left, font=font)
        x = max(0, (PRINTER_WIDTH_PX - (bbox[2] - bbox[0])) // 2 - bbox[0])
        draw.text((x, y), row.left, font=font, fill=0)
        return img

    draw.text((PRINTER_LEFT_INDENT_PX, y), row.left, font=font, fill=0)
    if row.right:
        bbox = probe.textbbox((0, 0), row.right, font=font)
        x = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - (bbox[2] - bbox[0]) - bbox[0]
        draw.text((x, y), row.right, font=font, fill=0)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def print_receipt(rows: list[ReceiptRow]) -> None:
    """Print receipt rows top to bottom and cut the ticket."""
    if not rows:
        return

    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise PrinterError(f"Printer dependencies unavailable: {exc}") from exc

    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for row in rows:
        printer.image(_render_row(row, font))
    printer.image(_render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()
