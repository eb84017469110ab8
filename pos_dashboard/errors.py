"""Exception hierarchy shared by the POS core and the terminal UI."""

from __future__ import annotations

from typing import Any


class PosError(Exception):
    """Base error carrying a user-facing message."""

    def __init__(self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class OrderValidationError(PosError):
    """Order failed a local check and was not sent."""


class SelectionRequiredError(PosError):
    """A required customization choice is missing."""


class CheckoutStateError(PosError):
    """Checkout step invoked out of order or while busy."""


class ApiError(PosError):
    """Backend request failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code


class SessionRequiredError(ApiError):
    """Order creation refused because no cashier session is open."""


class PrinterError(PosError):
    """Receipt printing failed."""
