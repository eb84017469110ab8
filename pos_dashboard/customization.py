"""Variant selection for special menu items before they enter the cart."""

from __future__ import annotations

from dataclasses import dataclass

from pos_dashboard.data import CUSTOMIZATION_TABLE, SINGLE, customization_spec_for_name
from pos_dashboard.errors import SelectionRequiredError
from pos_dashboard.models import CustomizationSpec, FoodItem


@dataclass(frozen=True)
class ResolvedCustomization:
    food: FoodItem
    tags: tuple[str, ...]
    notes: str = ""


class PendingCustomization:
    """Selection state for one item waiting on its variant choice."""

    def __init__(self, food: FoodItem, spec: CustomizationSpec) -> None:
        self.food = food
        self.spec = spec
        # Single choice starts on the first option, extras start empty.
        self.selected: list[str] = [spec.options[0]] if spec.mode == SINGLE and spec.options else []

    @property
    def is_single(self) -> bool:
        return self.spec.mode == SINGLE

    def is_selected(self, option: str) -> bool:
        return option in self.selected

    def toggle(self, option: str) -> None:
        if option not in self.spec.options:
            return
        if self.is_single:
            # Re-selecting the active size clears it.
            self.selected = [] if option in self.selected else [option]
            return
        if option in self.selected:
            self.selected.remove(option)
        else:
            self.selected.append(option)

    def confirm(self, notes: str = "") -> ResolvedCustomization:
        if self.is_single and not self.selected:
            raise SelectionRequiredError(f"Please choose an option for {self.food.name}.")
        return ResolvedCustomization(food=self.food, tags=tuple(self.selected), notes=notes)


class CustomizationResolver:
    """Decides whether an item needs a variant choice, using an ordered pattern table."""

    def __init__(self, table: list[tuple[str, CustomizationSpec]] | None = None) -> None:
        self.table = list(CUSTOMIZATION_TABLE if table is None else table)

    def spec_for(self, name: str) -> CustomizationSpec | None:
        return customization_spec_for_name(name, self.table)

    def begin(self, food: FoodItem) -> PendingCustomization | None:
        spec = self.spec_for(food.name)
        if spec is None:
            return None
        return PendingCustomization(food, spec)


def format_line_notes(tags: tuple[str, ...] | list[str], notes: str = "") -> str:
    """Merge option tags and free text into the notes string sent with an order item."""
    parts: list[str] = []
    if tags:
        parts.append(f"Options: {', '.join(tags)}")
    if notes and notes.strip():
        parts.append(notes.strip())
    return " | ".join(parts)
