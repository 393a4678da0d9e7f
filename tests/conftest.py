"""Pytest configuration and fixtures for fixture-capture tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from fixture_capture.patterns import clear_pattern_cache


@pytest.fixture(autouse=True)
def _fresh_pattern_cache():
    """Isolate tests from patterns cached by earlier tests."""
    clear_pattern_cache()
    yield
    clear_pattern_cache()


@pytest.fixture
def write_html(tmp_path: Path):
    """Write an HTML capture to a temporary file."""

    def _write(html: str, name: str = "input.html") -> Path:
        path = tmp_path / name
        path.write_text(html, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def zhihu_page() -> str:
    """A captured answer page with names, ids, tokens and tracking params."""
    return """<!doctype html>
<html>
  <body>
    <article class="Post-content" data-custom-new="feature-alpha">
      <meta itemprop="name" content="Alice Example" />
      <a href="https://www.zhihu.com/people/alice-example">profile</a>
      <a href="https://www.zhihu.com/question/123456789123/answer/987654321987?utm_source=abc123&xsec_token=verylongtoken_abcdefghijklmnopqrstuvwxyz">post</a>
      <p data-user-id="123456789123">token ntn_abcd1234abcd1234</p>
    </article>
  </body>
</html>"""
