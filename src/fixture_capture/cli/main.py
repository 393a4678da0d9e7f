"""Main CLI entry point for fixture-capture.

Provides commands for:
- ingest: Sanitize a captured HTML page into a committed fixture
- validate: Check fixture files for secret-shaped patterns
"""

from __future__ import annotations

try:
    import typer
except ImportError as e:
    raise ImportError("CLI dependencies not installed. Install with: pip install fixture-capture[cli]") from e

from fixture_capture.cli.ingest import ingest
from fixture_capture.cli.validate import validate

app = typer.Typer(
    name="fixture-capture",
    help="Turn captured HTML pages into sanitized test fixtures.",
    no_args_is_help=True,
)

app.command()(ingest)
app.command()(validate)


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version flag was provided
    """
    if value:
        from fixture_capture import __version__

        typer.echo(f"fixture-capture {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    r"""Turn captured HTML pages into sanitized test fixtures.

    \b
    Examples:
        fixture-capture ingest --html page.html --source-url https://www.zhihu.com/question/123456789 --fixture zhihu-question
        fixture-capture validate tests/fixtures/zhihu-question.html
        fixture-capture validate --dir tests/fixtures
    """


if __name__ == "__main__":
    app()
