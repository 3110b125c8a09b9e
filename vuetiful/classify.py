"""Categorization and human-readable descriptions for utility classes."""

import re
from collections.abc import Mapping

from vuetiful.models import Category

# Checked in order; the first match wins.
_CATEGORY_PATTERNS = (
    (Category.SPACING, re.compile(r"^[mp][atblrsxye]-")),
    (Category.DISPLAY, re.compile(r"^d-")),
    (Category.FLEXBOX, re.compile(r"^(flex-|align-|justify-|order-)")),
    (Category.TYPOGRAPHY, re.compile(r"^(text-|font-)")),
    (Category.BACKGROUND, re.compile(r"^bg-")),
    (Category.ELEVATION, re.compile(r"^elevation-")),
    (Category.BORDER, re.compile(r"^(rounded|border-)")),
    (Category.SIZING, re.compile(r"^(w-|h-|min-|max-)")),
    (Category.POSITION, re.compile(r"^(position-|top-|right-|bottom-|left-)")),
    (Category.GAP, re.compile(r"^g[arc]-")),
)

SPACING_DIRECTIONS = {
    "a": "on all sides",
    "t": "on top",
    "r": "on right",
    "b": "on bottom",
    "l": "on left",
    "s": "on start (inline-start)",
    "e": "on end (inline-end)",
    "x": "horizontally",
    "y": "vertically",
}

FALLBACK_DESCRIPTION = "Vuetify utility class"


def categorize(class_name: str) -> Category:
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.match(class_name):
            return category
    return Category.OTHER


def spacing_direction(class_name: str) -> str:
    """Direction phrase for a spacing class, from its second letter."""
    if len(class_name) < 3 or class_name[2] != "-":
        return ""
    return SPACING_DIRECTIONS.get(class_name[1], "")


def _join_properties(properties: Mapping[str, str]) -> str:
    return ", ".join(f"{k}: {v}" for k, v in properties.items())


def describe(class_name: str, properties: Mapping[str, str], category: Category | None = None) -> str:
    """Build the description shown next to a utility class.

    Args:
        class_name: Class name without the leading dot.
        properties: Declarations of the rule that introduced the class.
        category: Precomputed category, derived from the name when omitted.
    """
    if category is None:
        category = categorize(class_name)

    if category is Category.SPACING:
        value = next(iter(properties.values()), "")
        kind = "margin" if class_name.startswith("m") else "padding"
        parts = ["Apply", kind, value, spacing_direction(class_name)]
        return " ".join(p for p in parts if p)

    if category is Category.DISPLAY:
        return f"Set display: {properties.get('display', '')}".rstrip()

    if category is Category.FLEXBOX:
        if class_name.startswith("flex-"):
            return f"Flex property: {_join_properties(properties)}"
        if class_name.startswith("justify-"):
            return f"Justify content: {properties.get('justify-content', '')}".rstrip()
        if class_name.startswith("align-"):
            value = properties.get("align-items") or properties.get("align-content") or properties.get("align-self", "")
            return f"Align items: {value}".rstrip()
        return "Flexbox utility"

    if category is Category.TYPOGRAPHY:
        if class_name.startswith("text-"):
            return f"Text utility: {_join_properties(properties)}"
        return "Typography utility"

    if category is Category.ELEVATION:
        return "Material elevation shadow"

    first = next(iter(properties.items()), None)
    if first is not None:
        return f"{first[0]}: {first[1]}"
    return FALLBACK_DESCRIPTION
