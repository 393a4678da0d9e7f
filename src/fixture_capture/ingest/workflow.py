"""Fixture ingest workflow orchestration.

This module runs one fixture-capture request end to end:

    validating -> sanitizing -> diff-checking -> secret-scanning -> writing -> done

Any failing phase raises a tagged IngestError (see fixture_capture.errors)
and nothing is written to the tracked fixture directory. Business logic is
kept separate from CLI concerns for testability.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from fixture_capture.errors import (
    IngestError,
    InputNotFoundError,
    InvalidFixtureNameError,
    InvalidHtmlError,
    InvalidSourceUrlError,
    LedgerDiffError,
    SanitizeFailedError,
    SecretPatternError,
    TargetExistsError,
    UnsupportedInputError,
)
from fixture_capture.patterns import PatternLoadError
from fixture_capture.sanitization import (
    DEFAULT_POLICY_VERSION,
    SanitizationResult,
    is_valid_url,
    sanitize_html_for_fixture,
)
from fixture_capture.validation import LedgerDiffResult, diff_structure_ledger, find_forbidden_secret_patterns

_LOGGER = logging.getLogger(__name__)

DEFAULT_FIXTURES_DIR = Path("tests") / "fixtures"
DEFAULT_RAW_IMPORTS_ROOT = Path(".local") / "raw-imports"

_FIXTURE_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]*", re.ASCII)


class IngestPhase(str, Enum):
    """States of the ingest workflow."""

    VALIDATING = "validating"
    SANITIZING = "sanitizing"
    DIFF_CHECKING = "diff-checking"
    SECRET_SCANNING = "secret-scanning"
    WRITING = "writing"
    DONE = "done"
    ABORTED = "aborted"


# =============================================================================
# Input and result types
# =============================================================================


@dataclass
class IngestInput:
    """One fixture-capture request.

    Attributes:
        html_path: Path to the captured raw HTML
        source_url: URL the page was captured from
        fixture: Fixture name (file stem of the artifacts)
        out_fixtures_dir: Tracked fixture directory
        policy_version: Redaction policy version tag
        debug_ledger: Also write the ledger debug file
        raw_imports_root: Untracked directory for raw archives
        custom_patterns: Optional path to custom patterns JSON file
        url: Fetch-mode URL; not supported, any value aborts
    """

    html_path: Path | str
    source_url: str
    fixture: str
    out_fixtures_dir: Path | str = DEFAULT_FIXTURES_DIR
    policy_version: str = DEFAULT_POLICY_VERSION
    debug_ledger: bool = False
    raw_imports_root: Path | str = DEFAULT_RAW_IMPORTS_ROOT
    custom_patterns: Path | str | None = None
    url: str | None = None


@dataclass
class IngestArtifacts:
    """Paths of the artifacts written by a successful ingest.

    Attributes:
        raw_archive_path: Untracked copy of the raw HTML
        sanitized_html_path: Sanitized fixture HTML
        map_path: Placeholder map JSON
        ledger_path: Ledger debug JSON (only with debug_ledger)
    """

    raw_archive_path: Path
    sanitized_html_path: Path
    map_path: Path
    ledger_path: Path | None = None

    def to_dict(self) -> dict[str, str]:
        data = {
            "rawArchivePath": str(self.raw_archive_path),
            "sanitizedHtmlPath": str(self.sanitized_html_path),
            "mapPath": str(self.map_path),
        }
        if self.ledger_path is not None:
            data["ledgerPath"] = str(self.ledger_path)
        return data


@dataclass
class IngestStats:
    """Counts reported for a successful ingest."""

    replacements: int = 0
    ledger_nodes_raw: int = 0
    ledger_nodes_sanitized: int = 0
    diff_warnings: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "replacements": self.replacements,
            "ledgerNodesRaw": self.ledger_nodes_raw,
            "ledgerNodesSanitized": self.ledger_nodes_sanitized,
            "diffWarnings": self.diff_warnings,
        }


@dataclass
class IngestResult:
    """Summary of a successful ingest.

    Attributes:
        ok: Always True for a returned result (aborts raise)
        html_path: Input HTML path as given
        source_url: Source URL as given
        fixture: Fixture name
        artifacts: Written artifact paths
        stats: Replacement and ledger counts
    """

    html_path: str
    source_url: str
    fixture: str
    artifacts: IngestArtifacts
    stats: IngestStats = field(default_factory=IngestStats)
    ok: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the result summary shape."""
        return {
            "ok": self.ok,
            "input": {
                "htmlPath": self.html_path,
                "sourceUrl": self.source_url,
                "fixture": self.fixture,
            },
            "artifacts": self.artifacts.to_dict(),
            "stats": self.stats.to_dict(),
        }


# =============================================================================
# Helpers
# =============================================================================


def timestamp_compact(now: datetime | None = None) -> str:
    """Format a local timestamp as YYYYMMDD-HHMMSS."""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def is_valid_fixture_name(fixture: str) -> bool:
    """Check that a fixture name is a safe file stem.

    Example:
        >>> is_valid_fixture_name("zhihu-answer_01")
        True
        >>> is_valid_fixture_name("../escape")
        False
    """
    return bool(_FIXTURE_NAME_RE.fullmatch(fixture))


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def artifact_paths(inp: IngestInput, now: datetime | None = None) -> IngestArtifacts:
    """Compute the artifact paths for an ingest request.

    Args:
        inp: Ingest request
        now: Timestamp for the raw archive directory (default: current time)

    Returns:
        IngestArtifacts; ledger_path is set only when debug_ledger is on
    """
    out_dir = Path(inp.out_fixtures_dir)
    raw_dir = Path(inp.raw_imports_root) / f"{timestamp_compact(now)}-{inp.fixture}"
    return IngestArtifacts(
        raw_archive_path=raw_dir / "raw.html",
        sanitized_html_path=out_dir / f"{inp.fixture}.html",
        map_path=out_dir / f"{inp.fixture}.map.json",
        ledger_path=out_dir / f"{inp.fixture}.ledger.json" if inp.debug_ledger else None,
    )


# =============================================================================
# Phase functions
# =============================================================================


def validate_phase(inp: IngestInput) -> str:
    """Validate the request and read the input HTML.

    Args:
        inp: Ingest request

    Returns:
        The raw HTML text

    Raises:
        UnsupportedInputError: If a fetch-mode URL was given
        InvalidSourceUrlError: If the source URL does not parse
        InvalidFixtureNameError: If the fixture name is unsafe
        InputNotFoundError: If the HTML file does not exist
        InvalidHtmlError: If the HTML file is not UTF-8, or is empty or whitespace-only
    """
    if inp.url:
        raise UnsupportedInputError("fetching by URL is not supported; capture the page and pass its HTML file")
    if not is_valid_url(inp.source_url):
        raise InvalidSourceUrlError(inp.source_url)
    if not is_valid_fixture_name(inp.fixture):
        raise InvalidFixtureNameError(inp.fixture)

    html_path = Path(inp.html_path)
    try:
        html = html_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise InputNotFoundError("ingest html", str(inp.html_path)) from e
    except UnicodeDecodeError as e:
        raise InvalidHtmlError(f"{inp.html_path}: not UTF-8 ({e.reason} at byte {e.start})") from e

    if not html.strip():
        raise InvalidHtmlError(str(inp.html_path))
    return html


def sanitize_phase(html: str, inp: IngestInput) -> SanitizationResult:
    """Run the sanitizer, tagging unexpected failures.

    Raises:
        InvalidSourceUrlError: If the sanitizer rejects the source URL
        SanitizeFailedError: For any other unexpected sanitizer error
        PatternLoadError: If custom patterns cannot be loaded
    """
    try:
        return sanitize_html_for_fixture(
            html,
            inp.source_url,
            inp.policy_version,
            custom_patterns=inp.custom_patterns,
        )
    except (IngestError, PatternLoadError):
        raise
    except Exception as e:
        raise SanitizeFailedError(f"{type(e).__name__}: {e}") from e


def diff_phase(sanitization: SanitizationResult) -> LedgerDiffResult:
    """Check the structural diff of raw and sanitized ledgers.

    Raises:
        LedgerDiffError: If any violation was found (carries all of them)
    """
    diff = diff_structure_ledger(sanitization.raw_ledger, sanitization.sanitized_ledger)
    if not diff.ok:
        raise LedgerDiffError(diff.violations)
    return diff


def secret_scan_phase(
    sanitization: SanitizationResult,
    custom_patterns: Path | str | None = None,
) -> str:
    """Scan the sanitized HTML and the serialized map for secrets.

    Returns:
        The map file text that was scanned (and will be written)

    Raises:
        SecretPatternError: If any pattern matched (carries all matches)
    """
    map_text = sanitization.map_json() + "\n"
    hits = find_forbidden_secret_patterns(sanitization.sanitized_html, custom_patterns)
    hits += find_forbidden_secret_patterns(map_text, custom_patterns)
    if hits:
        raise SecretPatternError(hits)
    return map_text


def write_phase(
    inp: IngestInput,
    html: str,
    sanitization: SanitizationResult,
    diff: LedgerDiffResult,
    map_text: str,
    now: datetime | None = None,
) -> IngestArtifacts:
    """Write all artifacts, refusing to overwrite tracked ones.

    Tracked artifacts written before an I/O failure, including one left
    truncated by the failing write, are removed again.

    Raises:
        TargetExistsError: If a tracked artifact already exists
    """
    artifacts = artifact_paths(inp, now)
    contents = [(artifacts.sanitized_html_path, sanitization.sanitized_html), (artifacts.map_path, map_text)]
    if artifacts.ledger_path is not None:
        ledger = {
            "policyVersion": inp.policy_version,
            "raw": sanitization.raw_ledger.to_dict(),
            "sanitized": sanitization.sanitized_ledger.to_dict(),
            "diff": diff.to_dict(),
        }
        contents.append((artifacts.ledger_path, _json_text(ledger)))

    for path, _text in contents:
        if path.exists():
            raise TargetExistsError(str(path))

    _write_text(artifacts.raw_archive_path, html)

    # Paths are recorded before their write; a failing write can leave a truncated file
    written: list[Path] = []
    try:
        for path, text in contents:
            written.append(path)
            _write_text(path, text)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        raise

    for path in [artifacts.raw_archive_path, *written]:
        _LOGGER.info("Wrote %s", path)
    return artifacts


# =============================================================================
# Workflow
# =============================================================================


def run_ingest(inp: IngestInput, now: datetime | None = None) -> IngestResult:
    """Run the complete ingest workflow.

    This function orchestrates all phases:
    1. Validate the request and read the HTML
    2. Sanitize it
    3. Check the structural ledger diff
    4. Scan the outputs for secret patterns
    5. Write the artifacts

    Args:
        inp: Ingest request
        now: Timestamp for the raw archive directory (default: current time)

    Returns:
        IngestResult summary

    Raises:
        IngestError: Tagged abort from the failing phase (``phase`` is set)
        PatternLoadError: If custom patterns cannot be loaded

    Example:
        >>> result = run_ingest(IngestInput(
        ...     html_path="capture.html",
        ...     source_url="https://www.zhihu.com/question/123456789",
        ...     fixture="zhihu-question",
        ... ))  # doctest: +SKIP
        >>> result.artifacts.sanitized_html_path  # doctest: +SKIP
        PosixPath('tests/fixtures/zhihu-question.html')
    """
    phase = IngestPhase.VALIDATING
    try:
        _LOGGER.debug("Ingest %s: %s", inp.fixture, phase.value)
        html = validate_phase(inp)

        phase = IngestPhase.SANITIZING
        _LOGGER.debug("Ingest %s: %s", inp.fixture, phase.value)
        sanitization = sanitize_phase(html, inp)

        phase = IngestPhase.DIFF_CHECKING
        _LOGGER.debug("Ingest %s: %s", inp.fixture, phase.value)
        diff = diff_phase(sanitization)

        phase = IngestPhase.SECRET_SCANNING
        _LOGGER.debug("Ingest %s: %s", inp.fixture, phase.value)
        map_text = secret_scan_phase(sanitization, inp.custom_patterns)

        phase = IngestPhase.WRITING
        _LOGGER.debug("Ingest %s: %s", inp.fixture, phase.value)
        artifacts = write_phase(inp, html, sanitization, diff, map_text, now)
    except IngestError as e:
        e.phase = phase.value
        _LOGGER.debug("Ingest %s: %s during %s (%s)", inp.fixture, IngestPhase.ABORTED.value, phase.value, e.code)
        raise

    stats = IngestStats(
        replacements=len(sanitization.map),
        ledger_nodes_raw=len(sanitization.raw_ledger.nodes),
        ledger_nodes_sanitized=len(sanitization.sanitized_ledger.nodes),
        diff_warnings=len(diff.warnings),
    )
    _LOGGER.debug("Ingest %s: %s", inp.fixture, IngestPhase.DONE.value)
    _LOGGER.info(
        "Ingested fixture %s: %d replacements, %d ledger nodes",
        inp.fixture,
        stats.replacements,
        stats.ledger_nodes_raw,
    )
    return IngestResult(
        html_path=str(inp.html_path),
        source_url=inp.source_url,
        fixture=inp.fixture,
        artifacts=artifacts,
        stats=stats,
    )
