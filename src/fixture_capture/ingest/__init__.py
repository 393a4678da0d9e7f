"""Fixture ingest orchestration.

Exports:
    - run_ingest: Validate, sanitize, gate and write one fixture
    - IngestInput: Ingest request
    - IngestResult: Summary of a successful ingest
"""

from __future__ import annotations

from fixture_capture.ingest.workflow import (
    DEFAULT_FIXTURES_DIR,
    DEFAULT_RAW_IMPORTS_ROOT,
    IngestArtifacts,
    IngestInput,
    IngestPhase,
    IngestResult,
    IngestStats,
    artifact_paths,
    diff_phase,
    is_valid_fixture_name,
    run_ingest,
    sanitize_phase,
    secret_scan_phase,
    timestamp_compact,
    validate_phase,
    write_phase,
)

__all__ = [
    "DEFAULT_FIXTURES_DIR",
    "DEFAULT_RAW_IMPORTS_ROOT",
    "IngestArtifacts",
    "IngestInput",
    "IngestPhase",
    "IngestResult",
    "IngestStats",
    "artifact_paths",
    "diff_phase",
    "is_valid_fixture_name",
    "run_ingest",
    "sanitize_phase",
    "secret_scan_phase",
    "timestamp_compact",
    "validate_phase",
    "write_phase",
]
