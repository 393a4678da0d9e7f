"""Tests for __main__.py entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch


class TestMainEntryPoint:
    """Tests for the __main__.py entry point."""

    @patch("fixture_capture.cli.main.app")
    def test_main_calls_app(self, mock_app: MagicMock) -> None:
        """Test main() calls the typer app."""
        from fixture_capture.__main__ import main

        main()

        mock_app.assert_called_once()

    def test_module_runnable(self) -> None:
        """Test module can be imported."""
        import fixture_capture.__main__

        assert hasattr(fixture_capture.__main__, "main")
