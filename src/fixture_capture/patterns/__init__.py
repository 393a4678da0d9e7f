"""Pattern tables and placeholder allocation for sanitization.

This module provides:
- Loading of the secret pattern table and redaction policy tables from JSON
- Pattern merging for custom user patterns
- The per-run placeholder store used for deterministic redaction
"""

from __future__ import annotations

from fixture_capture.patterns.loader import (
    PatternLoadError,
    clear_pattern_cache,
    compile_pattern,
    load_json_file,
    load_redaction_policy,
    load_secret_patterns,
)
from fixture_capture.patterns.placeholders import (
    CATEGORY_PREFIXES,
    PlaceholderRecord,
    PlaceholderStore,
    SanitizationCategory,
    SourceType,
)

__all__ = [
    # Pattern loading
    "load_json_file",
    "load_secret_patterns",
    "load_redaction_policy",
    "clear_pattern_cache",
    "compile_pattern",
    "PatternLoadError",
    # Placeholders
    "CATEGORY_PREFIXES",
    "PlaceholderRecord",
    "PlaceholderStore",
    "SanitizationCategory",
    "SourceType",
]
