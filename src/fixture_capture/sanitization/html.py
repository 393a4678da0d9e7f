"""HTML fixture sanitization.

This module turns a captured webpage into a redacted copy suitable for
committing as a test fixture. Redaction happens on a parsed tree: selected
attribute values and text nodes are rewritten in place, so tags and
attributes are never added or removed. Structure ledgers of the document
before and after redaction are returned alongside the sanitized HTML so the
caller can verify that.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from bs4 import BeautifulSoup, NavigableString

from fixture_capture.errors import InvalidSourceUrlError
from fixture_capture.patterns import PlaceholderRecord, PlaceholderStore, SourceType
from fixture_capture.sanitization.ledger import (
    DEFAULT_POLICY_VERSION,
    StructureLedger,
    analyze_structure,
    build_ledger,
    parse_document,
)
from fixture_capture.sanitization.scalar import (
    RedactionPolicy,
    is_valid_url,
    sanitize_scalar,
    scrub_person_names,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class SanitizationResult:
    """Output of one sanitization run.

    Attributes:
        sanitized_html: Redacted document
        map: Placeholder records, one per placeholder, sorted by placeholder
        raw_ledger: Ledger of the input document
        sanitized_ledger: Ledger of the redacted document
    """

    sanitized_html: str
    map: list[PlaceholderRecord]
    raw_ledger: StructureLedger
    sanitized_ledger: StructureLedger

    def map_json(self) -> str:
        """Serialize the placeholder map as it is written to disk."""
        return placeholder_map_json(self.map)


def placeholder_map_json(records: list[PlaceholderRecord]) -> str:
    """Serialize placeholder records to the map file JSON text.

    Args:
        records: Placeholder records (already sorted)

    Returns:
        Indented JSON array of {placeholder, category, sourceType} objects
    """
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def _sanitize_attributes(soup: BeautifulSoup, store: PlaceholderStore, policy: RedactionPolicy) -> int:
    """Rewrite eligible attribute values in place.

    Returns:
        Number of attribute values changed
    """
    changed = 0
    for element in soup.find_all(True):
        attrs = element.attrs
        for key in list(attrs):
            if not policy.is_scrubbable_attribute(key):
                continue
            raw = attrs[key]
            value = "" if raw is None else str(raw)
            sanitized = sanitize_scalar(value, store, policy, SourceType.ATTR)
            itemprop = attrs.get("itemprop") or ""
            if policy.is_personish_attribute(key, str(itemprop)):
                sanitized = scrub_person_names(sanitized, store, policy, SourceType.ATTR)
            if sanitized != value:
                attrs[key] = sanitized
                changed += 1
    return changed


def _sanitize_text(soup: BeautifulSoup, store: PlaceholderStore, policy: RedactionPolicy) -> int:
    """Rewrite text leaves of container elements whose text needs redaction.

    The container's full text is first run through the pipeline on a scratch
    copy of the store; only if that changes anything are its direct text
    children rewritten, one leaf at a time.

    Returns:
        Number of text nodes changed
    """
    changed = 0
    for element in soup.find_all(list(policy.text_container_tags)):
        text = element.get_text()
        if not text.strip():
            continue
        preview = sanitize_scalar(text, store.scratch_copy(), policy, SourceType.TEXT)
        if preview == text:
            continue

        for child in list(element.children):
            # Plain text only: comments, CDATA and script/style strings are subclasses
            if type(child) is not NavigableString or not child:
                continue
            original = str(child)
            sanitized = sanitize_scalar(original, store, policy, SourceType.TEXT)
            if sanitized != original:
                child.replace_with(sanitized)
                changed += 1
    return changed


def sanitize_html_for_fixture(
    html: str,
    source_url: str,
    policy_version: str = DEFAULT_POLICY_VERSION,
    *,
    custom_patterns: Path | str | None = None,
) -> SanitizationResult:
    """Redact a captured HTML document for use as a test fixture.

    Args:
        html: Raw captured HTML
        source_url: URL the page was captured from
        policy_version: Policy version tag recorded in both ledgers
        custom_patterns: Optional path to custom patterns JSON file

    Returns:
        SanitizationResult with sanitized HTML, placeholder map and ledgers

    Raises:
        InvalidSourceUrlError: If source_url is not a valid URL (checked first)
        PatternLoadError: If custom patterns cannot be loaded

    Example:
        >>> result = sanitize_html_for_fixture(
        ...     '<a href="https://zhuanlan.zhihu.com/p/123456789123">post</a>',
        ...     "https://zhuanlan.zhihu.com/p/123456789123",
        ... )
        >>> "/p/CID_001" in result.sanitized_html
        True
    """
    if not is_valid_url(source_url):
        raise InvalidSourceUrlError(source_url)

    policy = RedactionPolicy.load(custom_patterns)
    raw_ledger = analyze_structure(html, policy_version)

    soup = parse_document(html)
    store = PlaceholderStore()

    attrs_changed = _sanitize_attributes(soup, store, policy)
    text_changed = _sanitize_text(soup, store, policy)
    _LOGGER.debug("Rewrote %d attribute values and %d text nodes", attrs_changed, text_changed)

    sanitized_html = str(soup)
    sanitized_ledger = build_ledger(parse_document(sanitized_html), policy_version)

    records = store.records()
    _LOGGER.debug("Issued %d placeholders", len(records))

    return SanitizationResult(
        sanitized_html=sanitized_html,
        map=records,
        raw_ledger=raw_ledger,
        sanitized_ledger=sanitized_ledger,
    )
