"""Read-only view over the menu snapshot fetched from the backend."""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Iterable

from pos_dashboard.models import Category, FoodItem

logger = logging.getLogger(__name__)


class CatalogCache:
    """Food items and categories keyed by id."""

    def __init__(self) -> None:
        self._foods: dict[int, FoodItem] = {}
        self._categories: dict[int, Category] = {}

    def load(self, foods: Iterable[FoodItem], categories: Iterable[Category] | None = None) -> None:
        """Replace the snapshot. Categories are kept when not given."""
        self._foods = {food.id: food for food in foods}
        if categories is not None:
            self._categories = {category.id: category for category in categories}

    @property
    def foods(self) -> list[FoodItem]:
        return list(self._foods.values())

    @property
    def categories(self) -> list[Category]:
        return list(self._categories.values())

    def category_name(self, category_id: int | None) -> str:
        if category_id is None:
            return ""
        category = self._categories.get(category_id)
        return category.name if category is not None else ""

    def lookup(self, food_id: int) -> FoodItem | None:
        """Return the item if it exists and can be sold right now."""
        food = self._foods.get(food_id)
        if food is None or not food.available:
            return None
        return food

    def discount_for(self, food_id: int) -> Decimal:
        food = self._foods.get(food_id)
        if food is None:
            return Decimal("0")
        return food.discount_percentage

    def search(self, keyword: str = "", category_id: int | None = None) -> list[FoodItem]:
        """Case-insensitive name filter, optionally restricted to one category."""
        source = list(self._foods.values())
        if category_id is not None:
            source = [food for food in source if food.category_id == category_id]
        if not keyword:
            return source
        q = keyword.lower()
        return [food for food in source if q in food.name.lower()]

    def apply_discounts(self, updates: Iterable[dict]) -> int:
        """Set discount percentages from `{id, discountPercentage}` rows; returns the number applied."""
        applied = 0
        for row in updates:
            try:
                food_id = int(row["id"])
                percentage = Decimal(str(row.get("discountPercentage", 0) or 0))
            except (KeyError, TypeError, ValueError, InvalidOperation):
                logger.warning("discount_update_skipped row=%r", row)
                continue
            food = self._foods.get(food_id)
            if food is None:
                continue
            self._foods[food_id] = replace(food, discount_percentage=percentage)
            applied += 1
        return applied
