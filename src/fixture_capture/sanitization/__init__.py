"""Sanitization utilities for captured HTML fixtures.

Exports:
    - sanitize_html_for_fixture: Redact a captured page and return ledgers
    - analyze_structure: Build the structure ledger of an HTML document
    - classify_value: Map a string to its value class
    - sanitize_scalar: Run one value through the redaction pipeline
"""

from __future__ import annotations

from fixture_capture.sanitization.classify import (
    CLASSIFICATION_RULES,
    ValueClass,
    classify_value,
)
from fixture_capture.sanitization.html import (
    SanitizationResult,
    placeholder_map_json,
    sanitize_html_for_fixture,
)
from fixture_capture.sanitization.ledger import (
    DEFAULT_POLICY_VERSION,
    LedgerNode,
    StructureLedger,
    analyze_structure,
    build_ledger,
    get_node_path,
    index_node_paths,
    parse_document,
)
from fixture_capture.sanitization.scalar import (
    RedactionPolicy,
    is_valid_url,
    sanitize_scalar,
)

__all__ = [
    # Classification
    "CLASSIFICATION_RULES",
    "ValueClass",
    "classify_value",
    # Ledgers
    "DEFAULT_POLICY_VERSION",
    "LedgerNode",
    "StructureLedger",
    "analyze_structure",
    "build_ledger",
    "get_node_path",
    "index_node_paths",
    "parse_document",
    # Redaction
    "RedactionPolicy",
    "SanitizationResult",
    "is_valid_url",
    "placeholder_map_json",
    "sanitize_html_for_fixture",
    "sanitize_scalar",
]
