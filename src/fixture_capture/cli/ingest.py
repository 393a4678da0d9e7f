"""Ingest command for fixture-capture CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from fixture_capture.errors import IngestError
from fixture_capture.patterns import PatternLoadError


def ingest(
    html: Annotated[
        Path,
        typer.Option("--html", help="Captured raw HTML file"),
    ],
    source_url: Annotated[
        str,
        typer.Option("--source-url", help="URL the page was captured from"),
    ],
    fixture: Annotated[
        str,
        typer.Option("--fixture", "-f", help="Fixture name (letters, digits, '-' and '_')"),
    ],
    out_fixtures_dir: Annotated[
        Path,
        typer.Option("--out-fixtures-dir", "-o", help="Tracked fixture directory"),
    ] = Path("tests/fixtures"),
    policy_version: Annotated[
        str,
        typer.Option("--policy-version", help="Redaction policy version tag"),
    ] = "v1",
    debug_ledger: Annotated[
        bool,
        typer.Option("--debug-ledger", help="Also write <fixture>.ledger.json"),
    ] = False,
    raw_imports_root: Annotated[
        Path,
        typer.Option("--raw-imports-root", help="Untracked directory for raw archives"),
    ] = Path(".local/raw-imports"),
    patterns: Annotated[
        Path | None,
        typer.Option("--patterns", "-p", help="Custom patterns JSON file"),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option("--url", help="Fetch a page by URL (not supported)"),
    ] = None,
) -> None:
    """Sanitize a captured HTML page into a committed fixture.

    Redacts personal names, long content ids, tokens and tracking
    parameters, proves the document structure is unchanged, scans the
    output for secrets, then writes <fixture>.html and <fixture>.map.json.
    Existing fixtures are never overwritten.

    Args:
        html: Captured raw HTML file
        source_url: URL the page was captured from
        fixture: Fixture name
        out_fixtures_dir: Tracked fixture directory
        policy_version: Redaction policy version tag
        debug_ledger: Also write the structure ledger debug file
        raw_imports_root: Untracked directory for raw archives
        patterns: Custom patterns JSON file to merge with defaults
        url: Fetch-mode URL (always rejected)

    Example:
        fixture-capture ingest --html page.html --source-url https://www.zhihu.com/question/123456789 --fixture zhihu-question
        fixture-capture ingest --html page.html --source-url https://example.com --fixture demo --debug-ledger
    """
    from fixture_capture.ingest import IngestInput, run_ingest

    request = IngestInput(
        html_path=html,
        source_url=source_url,
        fixture=fixture,
        out_fixtures_dir=out_fixtures_dir,
        policy_version=policy_version,
        debug_ledger=debug_ledger,
        raw_imports_root=raw_imports_root,
        custom_patterns=str(patterns) if patterns else None,
        url=url,
    )

    try:
        result = run_ingest(request)
    except IngestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except PatternLoadError as e:
        typer.echo(f"Error: Failed to load patterns: {e}", err=True)
        raise typer.Exit(1) from None
    except PermissionError as e:
        typer.echo(f"Error: Permission denied: {e.filename}", err=True)
        raise typer.Exit(1) from None
    except OSError as e:
        typer.echo(f"Error: I/O error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
