"""Scan fixture artifacts for secret-shaped patterns before committing.

Detects:
- Bearer tokens
- ntn_-prefixed integration tokens
- secret_/secret- prefixed tokens
- File names of local secret configuration files
- "notionToken" keys
- Unredacted z_c0 cookie assignments

The pattern table lives in patterns/secrets.json and can be extended with a
custom patterns file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from fixture_capture.patterns import compile_pattern, load_secret_patterns

_LOGGER = logging.getLogger(__name__)

# Fixture artifact suffixes scanned by validate_fixtures_dir()
FIXTURE_SUFFIXES: tuple[str, ...] = (".html", ".json")


@dataclass
class Finding:
    """A secret-pattern finding.

    Attributes:
        severity: Finding severity (always 'error' for secret patterns)
        location: Where the finding was detected (file name or artifact label)
        pattern: Name of the pattern that matched
        value: The matched text (truncated for display)
        reason: Human-readable pattern description
        line: 1-based line number of the match
    """

    severity: str
    location: str
    pattern: str
    value: str
    reason: str
    line: int = 1


def truncate(value: str, max_len: int = 20) -> str:
    """Truncate a value for display.

    Args:
        value: Value to truncate
        max_len: Maximum length

    Returns:
        Truncated value
    """
    if len(value) <= max_len:
        return value
    return value[: max_len - 3] + "..."


def _compiled_patterns(custom_patterns: Path | str | None = None) -> list[tuple[str, re.Pattern[str], str]]:
    """Compile the secret pattern table in check order.

    Returns:
        List of (name, compiled regex, description) tuples
    """
    table = load_secret_patterns(custom_patterns)
    compiled = []
    for name, pattern_def in table.get("patterns", {}).items():
        if not isinstance(pattern_def, dict) or "regex" not in pattern_def:
            continue
        compiled.append((name, compile_pattern(pattern_def), pattern_def.get("description", name)))
    return compiled


def find_forbidden_secret_patterns(content: str, custom_patterns: Path | str | None = None) -> list[str]:
    """Return the descriptions of every secret pattern found in content.

    Each pattern is reported at most once, in table order.

    Args:
        content: Text to scan (sanitized HTML, serialized map, ...)
        custom_patterns: Optional path to custom patterns JSON file

    Returns:
        Matched pattern descriptions (empty if clean)

    Example:
        >>> find_forbidden_secret_patterns('{"notionToken": "x"}')
        ['"notionToken": key literal']
    """
    return [
        description
        for _name, regex, description in _compiled_patterns(custom_patterns)
        if regex.search(content)
    ]


def scan_secrets(
    content: str,
    location: str = "",
    custom_patterns: Path | str | None = None,
) -> list[Finding]:
    """Scan content and report every secret-pattern match with its line.

    Args:
        content: Text to scan
        location: Label for findings (usually a file name)
        custom_patterns: Optional path to custom patterns JSON file

    Returns:
        List of findings, in pattern order then position order
    """
    findings: list[Finding] = []
    for name, regex, description in _compiled_patterns(custom_patterns):
        for match in regex.finditer(content):
            findings.append(
                Finding(
                    severity="error",
                    location=location,
                    pattern=name,
                    value=truncate(match.group(0)),
                    reason=description,
                    line=content.count("\n", 0, match.start()) + 1,
                )
            )
    return findings


def validate_fixture_file(
    path: Path | str,
    custom_patterns: Path | str | None = None,
) -> list[Finding]:
    """Scan one fixture artifact on disk.

    Undecodable bytes are replaced, so a mis-encoded file is still scanned
    for ASCII secrets.

    Args:
        path: Path to a fixture file (HTML or JSON)
        custom_patterns: Optional path to custom patterns JSON file

    Returns:
        List of findings (empty if clean)
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8", errors="replace")
    findings = scan_secrets(content, str(path), custom_patterns)
    _LOGGER.debug("Scanned %s: %d findings", path, len(findings))
    return findings


def validate_fixtures_dir(
    directory: Path | str,
    *,
    recursive: bool = False,
    custom_patterns: Path | str | None = None,
) -> dict[Path, list[Finding]]:
    """Scan every fixture artifact in a directory.

    Args:
        directory: Fixture directory
        recursive: Scan subdirectories too
        custom_patterns: Optional path to custom patterns JSON file

    Returns:
        Mapping of scanned file to its findings, in sorted path order
    """
    directory = Path(directory)
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    files = sorted(p for p in candidates if p.is_file() and p.suffix in FIXTURE_SUFFIXES)
    return {file_path: validate_fixture_file(file_path, custom_patterns) for file_path in files}
