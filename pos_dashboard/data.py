"""Static customization data."""

from __future__ import annotations

from pos_dashboard.constant import CUSTOMIZATION_RULES as _CUSTOMIZATION_RULES_RAW
from pos_dashboard.models import CustomizationSpec

SINGLE = "single"
MULTIPLE = "multiple"

CUSTOMIZATION_TABLE: list[tuple[str, CustomizationSpec]] = [
    (
        pattern.lower(),
        CustomizationSpec(
            mode=str(raw["mode"]),
            options=tuple(raw["options"]),  # type: ignore[arg-type]
        ),
    )
    for pattern, raw in _CUSTOMIZATION_RULES_RAW
]

for _pattern, _spec in CUSTOMIZATION_TABLE:
    if _spec.mode not in {SINGLE, MULTIPLE}:
        raise ValueError(f"Unknown customization mode {_spec.mode!r} for pattern {_pattern!r}")
    if _spec.mode == SINGLE and not _spec.options:
        raise ValueError(f"Single-choice customization {_pattern!r} needs at least one option")


def customization_spec_for_name(
    name: str,
    table: list[tuple[str, CustomizationSpec]] | None = None,
) -> CustomizationSpec | None:
    """Return the first spec whose pattern appears in the name (case-insensitive)."""
    lowered = name.lower()
    for pattern, spec in CUSTOMIZATION_TABLE if table is None else table:
        if pattern.lower() in lowered:
            return spec
    return None
