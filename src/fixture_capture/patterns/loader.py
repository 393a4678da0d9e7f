"""Pattern loading utilities for fixture sanitization.

This module provides functions to load the secret pattern table and the
redaction policy tables from JSON files, optionally merged with a custom
patterns file.

Loaded tables are kept in a small LRU cache keyed by table and resolved
custom path, so repeated ingests in one process parse each file once.
"""

from __future__ import annotations

import json
import logging
import re
from collections import OrderedDict
from collections.abc import Callable
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger(__name__)

_MAX_CACHE_SIZE = 20

_pattern_cache: OrderedDict[tuple[str, str | None], dict[str, Any]] = OrderedDict()

_REDACTION_LIST_KEYS = (
    "tracking_query_keys",
    "content_id_routes",
    "person_stoplist",
    "text_container_tags",
)

_ATTRIBUTE_LIST_KEYS = (
    "sensitive_key_fragments",
    "url_key_fragments",
    "exact_keys",
    "personish_fragments",
)


class PatternLoadError(Exception):
    """Raised when pattern files cannot be loaded."""


def load_json_file(path: Path | str) -> dict[str, Any]:
    """Load a JSON pattern file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        PatternLoadError: If the file is missing, unreadable or not valid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
    except FileNotFoundError as e:
        raise PatternLoadError(f"Pattern file not found: {path}") from e
    except PermissionError as e:
        raise PatternLoadError(f"Permission denied reading pattern file: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PatternLoadError(f"Invalid JSON in pattern file {path}: {e}") from e
    return data


def _load_table(
    filename: str,
    custom_path: Path | str | None,
    merge: Callable[[dict[str, Any], dict[str, Any]], None],
) -> dict[str, Any]:
    """Load a built-in table, merge a custom file into it and cache the result."""
    key = (filename, str(Path(custom_path).resolve()) if custom_path else None)
    if key in _pattern_cache:
        _pattern_cache.move_to_end(key)
        return _pattern_cache[key]

    table = load_json_file(Path(__file__).parent / filename)
    if custom_path:
        merge(table, load_json_file(custom_path))

    _pattern_cache[key] = table
    while len(_pattern_cache) > _MAX_CACHE_SIZE:
        evicted, _ = _pattern_cache.popitem(last=False)
        _LOGGER.debug("Pattern cache evicted: %s", evicted)
    return table


def _merge_secret_patterns(table: dict[str, Any], custom: dict[str, Any]) -> None:
    # Custom entries override built-ins of the same name and keep table order otherwise
    if isinstance(custom.get("patterns"), dict):
        table["patterns"].update(custom["patterns"])


def _merge_redaction_policy(table: dict[str, Any], custom: dict[str, Any]) -> None:
    for key in _REDACTION_LIST_KEYS:
        if isinstance(custom.get(key), list):
            table[key].extend(custom[key])
    attributes = custom.get("attributes")
    if isinstance(attributes, dict):
        for key in _ATTRIBUTE_LIST_KEYS:
            if isinstance(attributes.get(key), list):
                table["attributes"][key].extend(attributes[key])


def load_secret_patterns(custom_path: Path | str | None = None) -> dict[str, Any]:
    """Load the forbidden secret pattern table.

    Args:
        custom_path: Optional path to custom patterns file to merge

    Returns:
        Dict with a 'patterns' key mapping pattern names to definitions
        (``regex``, optional ``flags``, ``description``), in check order

    Raises:
        PatternLoadError: If a patterns file cannot be loaded
    """
    return _load_table("secrets.json", custom_path, _merge_secret_patterns)


def load_redaction_policy(custom_path: Path | str | None = None) -> dict[str, Any]:
    """Load the redaction policy tables used by the fixture sanitizer.

    Args:
        custom_path: Optional path to custom patterns file to merge

    Returns:
        Dict with 'tracking_query_keys', 'content_id_routes', 'person_stoplist',
        'attributes' and 'text_container_tags' keys

    Raises:
        PatternLoadError: If a patterns file cannot be loaded
    """
    return _load_table("redaction.json", custom_path, _merge_redaction_policy)


def clear_pattern_cache() -> None:
    """Drop every cached table, forcing the next load to reread the files."""
    _pattern_cache.clear()


def compile_pattern(pattern_def: dict[str, Any]) -> re.Pattern[str]:
    """Compile a secret pattern definition.

    ``flags`` names ``re`` flags (``"IGNORECASE"``, ``"ASCII"``...). Unknown
    names are logged and skipped.

    Raises:
        re.error: If the regex is invalid
    """
    flags = re.RegexFlag(0)
    for flag_name in pattern_def.get("flags", []):
        flag = getattr(re.RegexFlag, flag_name, None)
        if flag is None:
            _LOGGER.warning("Unknown regex flag: %s", flag_name)
            continue
        flags |= flag
    return re.compile(pattern_def["regex"], flags)
