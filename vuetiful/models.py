"""Data shapes shared by the locator, parser, cache and extractor."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Category(str, Enum):
    """Closed set of utility categories."""

    SPACING = "spacing"
    DISPLAY = "display"
    FLEXBOX = "flexbox"
    TYPOGRAPHY = "typography"
    BACKGROUND = "background"
    TEXT = "text"
    ELEVATION = "elevation"
    BORDER = "border"
    SIZING = "sizing"
    POSITION = "position"
    GAP = "gap"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Map a stored string back to a category, unknown values become OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Record:
    """One extracted utility class.

    ``properties`` keeps declaration order and is read-only once built.
    """

    name: str
    selector: str
    properties: Mapping[str, str]
    category: Category = Category.OTHER
    description: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "selector": self.selector,
            "properties": dict(self.properties),
            "category": self.category.value,
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Record":
        return cls(
            name=str(data["name"]),
            selector=str(data["selector"]),
            properties={str(k): str(v) for k, v in dict(data.get("properties") or {}).items()},
            category=Category.parse(str(data.get("category", "other"))),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Installation:
    """A located copy of the target package for one root.

    Discovered fresh on every locate cycle and never persisted.
    """

    root_path: str
    package_path: str
    artifact_path: str
    version: str


@dataclass
class CacheEntry:
    """Persisted extraction result for one (root, version) pair."""

    version: str
    timestamp: float
    records: tuple[Record, ...]
    content_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "records": [record.to_dict() for record in self.records],
            "contentHash": self.content_hash,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheEntry":
        """Rebuild an entry from its stored form.

        Raises:
            KeyError, TypeError, ValueError: the stored body is not an entry.
        """
        return cls(
            version=str(data["version"]),
            timestamp=float(data["timestamp"]),
            records=tuple(Record.from_dict(item) for item in data["records"]),
            content_hash=str(data["contentHash"]),
        )


@dataclass
class ExtractionReport:
    """Outcome of one ``extract_all`` run, roots listed in processing order."""

    extracted: list[str] = field(default_factory=list)
    cached: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    not_detected: list[str] = field(default_factory=list)
    cancelled: bool = False
    storage_errors: int = 0

    @property
    def ok(self) -> bool:
        return not self.cancelled and not self.failed

    @property
    def record_roots(self) -> list[str]:
        return self.extracted + self.cached
