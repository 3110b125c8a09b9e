"""Read-side helpers for consumers of the record index."""

import re
from collections.abc import Iterable

from vuetiful.models import Category, Record

CATEGORY_PRIORITY = {
    Category.SPACING: 1,
    Category.DISPLAY: 2,
    Category.FLEXBOX: 3,
    Category.TYPOGRAPHY: 4,
    Category.BACKGROUND: 5,
    Category.TEXT: 6,
    Category.ELEVATION: 7,
    Category.BORDER: 8,
    Category.SIZING: 9,
    Category.POSITION: 10,
    Category.GAP: 11,
    Category.OTHER: 99,
}

# An open class attribute at the end of a line, in Vue and JSX spellings
CLASS_ATTRIBUTE_PATTERNS = (
    re.compile(r"""\bclass=["']([^"']*)$"""),
    re.compile(r"""\bclassName=["']([^"']*)$"""),
    re.compile(r"""\bclassName=\{`([^`]*)$"""),
    re.compile(r"""\bclass(?:Name)?=\{"([^"]*)$"""),
)

_CURRENT_WORD = re.compile(r"([\w-]+)$")


def sort_key(record: Record) -> tuple[int, str]:
    return CATEGORY_PRIORITY.get(record.category, 99), record.name


def search(records: Iterable[Record], prefix: str = "", category: Category | None = None) -> list[Record]:
    """Records whose name starts with ``prefix``, by category priority then name."""
    matches = [
        r for r in records
        if r.name.startswith(prefix) and (category is None or r.category is category)
    ]
    return sorted(matches, key=sort_key)


def find(records: Iterable[Record], name: str) -> Record | None:
    """First record named ``name`` (a leading dot is ignored)."""
    name = name.lstrip(".")
    for record in records:
        if record.name == name:
            return record
    return None


def render_css(record: Record) -> str:
    """The rule as CSS text, one declaration per line."""
    lines = [f".{record.name} {{"]
    lines.extend(f"  {prop}: {value};" for prop, value in record.properties.items())
    lines.append("}")
    return "\n".join(lines)


def class_attribute_prefix(line: str) -> str | None:
    """Partial class name being typed when ``line`` ends inside a class attribute.

    Returns None outside a class attribute, "" right after a separator.
    """
    for pattern in CLASS_ATTRIBUTE_PATTERNS:
        match = pattern.search(line)
        if match:
            word = _CURRENT_WORD.search(match.group(1))
            return word.group(1) if word else ""
    return None
