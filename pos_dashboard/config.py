"""Runtime configuration defaults for the API, printing and timing."""

from __future__ import annotations

import os

API_BASE_URL = os.environ.get("POS_API_URL", "http://localhost:5000/api")
API_TOKEN = os.environ.get("POS_API_TOKEN", "")
API_TIMEOUT_SECONDS = float(os.environ.get("POS_API_TIMEOUT", "10"))

TERMINAL_ID = os.environ.get("POS_TERMINAL_ID", "T-01")
USER_ROLE = os.environ.get("POS_USER_ROLE", "Cashier")

DEBUG_LOG_PATH = os.environ.get("POS_DEBUG_LOG", "/tmp/pos-dashboard.log")

MENU_FETCH_SIZE = 50
CATEGORY_FETCH_SIZE = 100
ORDER_FETCH_SIZE = 100

# Delay before the automatic receipt print, and the pause before opening
# the session prompt after a missing-session error.
RECEIPT_PRINT_DELAY_SECONDS = 1.0
SESSION_REDIRECT_DELAY_SECONDS = 2.0
REALTIME_POLL_SECONDS = 0.5

PRINTER_USB_VENDOR_ID = int(os.environ.get("POS_PRINTER_VENDOR_ID", "0x28E9"), 16)
PRINTER_USB_PRODUCT_ID = int(os.environ.get("POS_PRINTER_PRODUCT_ID", "0x0289"), 16)
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 22
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_TAIL_SPACER_PX = 70
