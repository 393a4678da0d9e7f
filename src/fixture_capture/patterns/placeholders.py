"""Placeholder store for deterministic redaction.

This module provides the PlaceholderStore class which assigns incrementing,
category-scoped placeholder tokens to raw sensitive values. Repeated raw
values within one store receive the same placeholder, so redacted fixtures
stay internally consistent without revealing the originals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SanitizationCategory(str, Enum):
    """Category of a redacted value."""

    PERSON = "person"
    CONTENT_ID = "content_id"
    TOKEN = "token"
    COOKIE = "cookie"
    TRACKING = "tracking"


class SourceType(str, Enum):
    """Where a redacted value was first found."""

    TEXT = "text"
    ATTR = "attr"
    URL_PART = "url_part"
    QUERY = "query"


CATEGORY_PREFIXES: dict[SanitizationCategory, str] = {
    SanitizationCategory.PERSON: "PERSON",
    SanitizationCategory.CONTENT_ID: "CID",
    SanitizationCategory.TOKEN: "TOKEN",
    SanitizationCategory.COOKIE: "COOKIE",
    SanitizationCategory.TRACKING: "TRACK",
}

# Zero-padding width of the placeholder counter
PLACEHOLDER_WIDTH = 3


@dataclass(frozen=True)
class PlaceholderRecord:
    """One entry of the persisted placeholder map.

    Attributes:
        placeholder: Placeholder token (e.g. "CID_001")
        category: Category of the redacted value
        source_type: Where the value was first found
    """

    placeholder: str
    category: SanitizationCategory
    source_type: SourceType

    def to_dict(self) -> dict[str, str]:
        """Serialize to the placeholder map JSON shape."""
        return {
            "placeholder": self.placeholder,
            "category": self.category.value,
            "sourceType": self.source_type.value,
        }


@dataclass
class PlaceholderStore:
    """Memoizing placeholder allocator scoped to one sanitization run.

    Placeholders are formatted as ``<PREFIX>_<NNN>`` where the counter is
    per category and never decreases. The memo key is ``category::raw``.

    Attributes:
        counters: Last issued counter per category
        _seen: Memo mapping ``category::raw`` keys to placeholders
        _sources: Source type recorded at first assignment, per placeholder
    """

    counters: dict[SanitizationCategory, int] = field(
        default_factory=lambda: {category: 0 for category in SanitizationCategory}
    )
    _seen: dict[str, str] = field(default_factory=dict, repr=False)
    _sources: dict[str, SourceType] = field(default_factory=dict, repr=False)

    @staticmethod
    def _key(category: SanitizationCategory, raw: str) -> str:
        return f"{category.value}::{raw}"

    def next(
        self,
        category: SanitizationCategory,
        raw: str,
        source_type: SourceType = SourceType.ATTR,
    ) -> str:
        """Return the placeholder for a raw value, allocating one if needed.

        Args:
            category: Category of the raw value
            raw: The original sensitive value
            source_type: Where the value was found (kept only on first use)

        Returns:
            Placeholder like "PERSON_001"

        Example:
            >>> store = PlaceholderStore()
            >>> store.next(SanitizationCategory.CONTENT_ID, "123456789")
            'CID_001'
            >>> store.next(SanitizationCategory.CONTENT_ID, "123456789")
            'CID_001'
        """
        key = self._key(category, raw)
        existing = self._seen.get(key)
        if existing is not None:
            return existing

        self.counters[category] += 1
        placeholder = f"{CATEGORY_PREFIXES[category]}_{self.counters[category]:0{PLACEHOLDER_WIDTH}d}"
        self._seen[key] = placeholder
        self._sources[placeholder] = source_type
        return placeholder

    def scratch_copy(self) -> PlaceholderStore:
        """Return an independent copy for dry-run probing."""
        return PlaceholderStore(
            counters=dict(self.counters),
            _seen=dict(self._seen),
            _sources=dict(self._sources),
        )

    def records(self) -> list[PlaceholderRecord]:
        """Return the finalized placeholder map, sorted by placeholder.

        Returns:
            One record per distinct placeholder
        """
        records: dict[str, PlaceholderRecord] = {}
        for key, placeholder in self._seen.items():
            category = SanitizationCategory(key.split("::", 1)[0])
            if category is SanitizationCategory.TRACKING:
                source_type = SourceType.QUERY
            else:
                source_type = self._sources.get(placeholder, SourceType.ATTR)
            records[placeholder] = PlaceholderRecord(placeholder, category, source_type)
        return [records[p] for p in sorted(records)]
