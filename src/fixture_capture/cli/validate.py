"""Validate command for fixture-capture CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from fixture_capture.patterns import PatternLoadError


def validate(
    fixture_file: Annotated[
        Path | None,
        typer.Argument(help="Fixture file to validate"),
    ] = None,
    directory: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Directory to scan for fixture files"),
    ] = None,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Scan directory recursively"),
    ] = False,
    patterns: Annotated[
        Path | None,
        typer.Option("--patterns", "-p", help="Custom patterns JSON file"),
    ] = None,
) -> None:
    """Validate fixture files for secret-shaped patterns.

    Scans committed fixture HTML and JSON files for bearer tokens,
    integration tokens, cookie values and other secrets that must never
    reach version control.

    Args:
        fixture_file: Single fixture file to validate
        directory: Directory containing fixture files to scan
        recursive: Scan directory recursively
        patterns: Custom patterns JSON file to merge with defaults

    Example:
        fixture-capture validate tests/fixtures/zhihu-question.html
        fixture-capture validate --dir tests/fixtures --recursive
    """
    from fixture_capture.validation import validate_fixture_file, validate_fixtures_dir

    custom_patterns = str(patterns) if patterns else None

    try:
        if directory:
            if not directory.is_dir():
                typer.echo(f"Error: Directory not found: {directory}", err=True)
                raise typer.Exit(1)
            results = validate_fixtures_dir(directory, recursive=recursive, custom_patterns=custom_patterns)
        elif fixture_file:
            if not fixture_file.exists():
                typer.echo(f"Error: File not found: {fixture_file}", err=True)
                raise typer.Exit(1)
            results = {fixture_file: validate_fixture_file(fixture_file, custom_patterns)}
        else:
            typer.echo("Error: Provide either a fixture file or --dir option", err=True)
            raise typer.Exit(1)
    except PatternLoadError as e:
        typer.echo(f"Error: Failed to load patterns: {e}", err=True)
        raise typer.Exit(1) from None
    except OSError as e:
        typer.echo(f"Error: I/O error: {e}", err=True)
        raise typer.Exit(1) from None

    if not results:
        typer.echo("No fixture files found")
        raise typer.Exit(0)

    total_errors = 0
    for file_path, findings in results.items():
        if findings:
            typer.echo(f"\n{file_path}:")
            for finding in findings:
                typer.echo(f"  [ERROR] [line {finding.line}] {finding.pattern}")
                typer.echo(f"     Match: {finding.value}")
                typer.echo(f"     Reason: {finding.reason}")
            total_errors += len(findings)
        else:
            typer.echo(f"[OK] {file_path}: Clean")

    typer.echo(f"\nSummary: {total_errors} errors in {len(results)} files")

    if total_errors > 0:
        raise typer.Exit(1)
