"""CLI for fixture-capture.

This module provides a Typer-based CLI for ingesting captured HTML pages
as sanitized test fixtures and for auditing committed fixtures.

Requires the 'cli' optional dependency: pip install fixture-capture[cli]
"""

from __future__ import annotations
