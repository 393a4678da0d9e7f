"""Validation gates for sanitized fixtures.

This module provides the two checks a sanitized fixture must pass before
it is written: the structural ledger diff and the secret-pattern scan.

Exports:
    - diff_structure_ledger: Compare raw and sanitized structure ledgers
    - find_forbidden_secret_patterns: Scan text for secret-shaped patterns
    - validate_fixture_file: Scan a fixture artifact on disk
    - Finding: Dataclass for secret-scan findings
"""

from __future__ import annotations

from fixture_capture.validation.secrets import (
    FIXTURE_SUFFIXES,
    Finding,
    find_forbidden_secret_patterns,
    scan_secrets,
    truncate,
    validate_fixture_file,
    validate_fixtures_dir,
)
from fixture_capture.validation.structure import (
    ALLOWED_TRANSITIONS,
    LedgerDiffResult,
    diff_structure_ledger,
    is_transition_allowed,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "FIXTURE_SUFFIXES",
    "Finding",
    "LedgerDiffResult",
    "diff_structure_ledger",
    "find_forbidden_secret_patterns",
    "is_transition_allowed",
    "scan_secrets",
    "truncate",
    "validate_fixture_file",
    "validate_fixtures_dir",
]
