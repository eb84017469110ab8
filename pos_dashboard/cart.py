"""In-memory cart for the order being built."""

from __future__ import annotations

import itertools
import logging
from decimal import Decimal
from typing import Iterable

from pos_dashboard.models import CartLine, FoodItem

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


def discounted_price(food: FoodItem) -> Decimal:
    """Unit price after the item's live discount percentage."""
    return food.price - (food.price * food.discount_percentage / _HUNDRED)


class Cart:
    """Ordered cart lines; stale line ids are ignored rather than raising."""

    def __init__(self) -> None:
        self._lines: list[CartLine] = []
        self._ids = itertools.count(1)

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get(self, line_id: int) -> CartLine | None:
        for line in self._lines:
            if line.line_id == line_id:
                return line
        return None

    def add_line(self, food: FoodItem, customizations: Iterable[str] = (), notes: str = "") -> CartLine:
        tags = tuple(customizations)
        key = (food.id, tuple(sorted(tags)))
        for line in self._lines:
            if line.merge_key == key:
                line.quantity += 1
                logger.debug("cart_merge line=%s food=%s qty=%s", line.line_id, food.id, line.quantity)
                return line

        line = CartLine(
            line_id=next(self._ids),
            food_id=food.id,
            name=food.name,
            unit_price=discounted_price(food),
            quantity=1,
            notes=notes,
            customizations=tags,
        )
        self._lines.append(line)
        logger.debug("cart_add line=%s food=%s tags=%r", line.line_id, food.id, tags)
        return line

    def update_quantity(self, line_id: int, delta: int) -> None:
        line = self.get(line_id)
        if line is None:
            return
        line.quantity = max(0, line.quantity + delta)
        if line.quantity == 0:
            self._lines.remove(line)
            logger.debug("cart_remove line=%s", line_id)

    def update_notes(self, line_id: int, text: str) -> None:
        line = self.get(line_id)
        if line is None:
            return
        line.notes = text

    def remove_line(self, line_id: int) -> None:
        line = self.get(line_id)
        if line is not None:
            self.update_quantity(line_id, -line.quantity)

    def clear(self) -> None:
        # Ids keep counting so stale references never hit a new line.
        self._lines.clear()

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))
