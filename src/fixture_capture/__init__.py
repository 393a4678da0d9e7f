"""Structure-preserving HTML fixture anonymization.

This library provides tools for:
- Sanitizing captured HTML pages into deterministic, anonymized fixtures
- Proving the sanitized document kept its structure (structure ledgers)
- Scanning fixture artifacts for secret-shaped patterns before committing

Core sanitization depends only on beautifulsoup4.
Optional features require: typer (cli).

Example usage:
    from fixture_capture import sanitize_html_for_fixture

    result = sanitize_html_for_fixture(raw_html, "https://www.zhihu.com/question/123456789")
    print(result.sanitized_html)

    # Full ingest: sanitize, gate and write tests/fixtures/<name>.html
    from fixture_capture import IngestInput, run_ingest
    run_ingest(IngestInput(html_path="page.html", source_url=url, fixture="zhihu-question"))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export public API for convenience
from fixture_capture.errors import IngestError
from fixture_capture.ingest import IngestInput, IngestResult, run_ingest
from fixture_capture.sanitization import analyze_structure, classify_value, sanitize_html_for_fixture
from fixture_capture.validation import diff_structure_ledger, find_forbidden_secret_patterns

__all__ = [
    "__version__",
    "IngestError",
    "IngestInput",
    "IngestResult",
    "analyze_structure",
    "classify_value",
    "diff_structure_ledger",
    "find_forbidden_secret_patterns",
    "run_ingest",
    "sanitize_html_for_fixture",
]
