"""Error taxonomy for fixture ingestion.

Every abort condition maps to one exception class with a stable string code,
so callers can branch on the kind of failure instead of parsing messages.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for ingest aborts.

    Attributes:
        code: Stable taxonomy tag (e.g. "E_INGEST_LEDGER_DIFF")
        detail: Human-readable detail, may be empty
        phase: Ingest phase the abort happened in, set by the orchestrator
    """

    code = "E_INGEST"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        self.phase: str | None = None
        super().__init__(f"{self.code}: {detail}" if detail else self.code)


class InputNotFoundError(IngestError):
    """Raised when the input HTML file does not exist."""

    code = "E_FILE_NOT_FOUND"

    def __init__(self, label: str, path: str) -> None:
        self.path = path
        super().__init__(f"{label}: {path}")


class InvalidHtmlError(IngestError):
    """Raised when the input HTML is empty or whitespace-only."""

    code = "E_INGEST_INVALID_HTML"


class InvalidSourceUrlError(IngestError):
    """Raised when the source URL does not parse as a URL."""

    code = "E_INGEST_INVALID_SOURCE_URL"


class UnsupportedInputError(IngestError):
    """Raised for input modes the engine does not implement (URL fetching)."""

    code = "E_INGEST_UNSUPPORTED_INPUT"


class SanitizeFailedError(IngestError):
    """Raised when the sanitize pipeline fails unexpectedly."""

    code = "E_INGEST_SANITIZE_FAILED"


class InvalidFixtureNameError(SanitizeFailedError):
    """Raised when the fixture name is not a safe file stem."""

    def __init__(self, fixture: str) -> None:
        self.fixture = fixture
        super().__init__(f"invalid fixture name: {fixture!r}")


class LedgerDiffError(IngestError):
    """Raised when sanitization changed the document structure."""

    code = "E_INGEST_LEDGER_DIFF"

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


class SecretPatternError(IngestError):
    """Raised when a secret-shaped pattern survives into an artifact."""

    code = "E_INGEST_SECRET_PATTERN"

    def __init__(self, hits: list[str]) -> None:
        self.hits = list(hits)
        super().__init__(", ".join(self.hits))


class TargetExistsError(IngestError):
    """Raised when a tracked artifact already exists at the destination."""

    code = "E_INGEST_TARGET_EXISTS"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(path)
