"""Tests for ``chatmcp serve``."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from chatmcp.cli import main


class TestServe:
    def test_runs_uvicorn_with_overrides(self, tmp_path: Path) -> None:
        config = tmp_path / "chatmcp.yaml"
        config.write_text("storage: postgrest\nport: 8080\nlog_level: warning\n")

        with patch("uvicorn.run") as run:
            result = CliRunner().invoke(
                main,
                ["serve", "--config", str(config), "--port", "9100", "--storage", "memory"],
            )

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        app = run.call_args.args[0]
        assert app.state.settings.storage == "memory"
        assert run.call_args.kwargs["port"] == 9100
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["log_level"] == "warning"

    def test_config_error_exits(self, tmp_path: Path) -> None:
        config = tmp_path / "chatmcp.yaml"
        config.write_text("storage: sqlite\n")

        with patch("uvicorn.run") as run:
            result = CliRunner().invoke(main, ["serve", "--config", str(config)])

        assert result.exit_code == 1
        assert "Config error" in result.output
        run.assert_not_called()
