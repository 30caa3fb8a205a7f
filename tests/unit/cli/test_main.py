"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from src.cli.main import GETTING_STARTED_MESSAGE, _configure_logging, app
from src.cli.models import ExitCode


runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_src_logger():
    """_configure_logging adds handlers to the 'src' logger; drop them after each test."""
    app_logger = logging.getLogger("src")
    handlers = list(app_logger.handlers)
    level = app_logger.level
    yield
    for handler in app_logger.handlers[len(handlers):]:
        handler.close()
    app_logger.handlers = handlers
    app_logger.setLevel(level)


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    @pytest.mark.parametrize("verbosity,level", [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ])
    def test_verbosity_levels(self, verbosity, level):
        with patch("logging.getLogger") as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            _configure_logging(verbosity)

            mock_get_logger.assert_called_with("src")
            mock_logger.setLevel.assert_called_with(level)

    def test_logdir_creates_log_file(self, tmp_path):
        logdir = tmp_path / "logs"

        _configure_logging(1, str(logdir))

        log_files = list(logdir.glob("gdocs-sync_*.log"))
        assert len(log_files) == 1


class TestMainCommand:
    """Option handling of the single command."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "gdocs-sync version 0.1.0" in result.output

    def test_no_args_without_config_shows_getting_started(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert GETTING_STARTED_MESSAGE.splitlines()[0] in result.output

    def test_init_requires_dir(self):
        result = runner.invoke(app, ["--init"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "Missing required option(s): --dir" in result.output

    def test_init_writes_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["--init", "--dir", "docs", "--title", "Handbook"])

        assert result.exit_code == 0
        assert (tmp_path / ".gdocs-sync" / "config.yaml").exists()
        assert (tmp_path / "docs").is_dir()
        assert "Configuration initialized successfully" in result.output

    def test_init_twice_fails(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["--init", "--dir", "docs"])

        result = runner.invoke(app, ["--init", "--dir", "docs"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "already exists" in result.output

    def test_sync_options_are_forwarded(self):
        with patch("src.cli.main.SyncCommand") as mock_command:
            mock_command.return_value.run.return_value = ExitCode.SYNC_FAILURES

            result = runner.invoke(app, ["docs/a.md", "--dryrun", "--force", "-v", "1"])

        assert result.exit_code == ExitCode.SYNC_FAILURES
        mock_command.return_value.run.assert_called_once_with(
            dry_run=True, force=True, single_file="docs/a.md", directory=None,
        )

    def test_dir_is_forwarded(self):
        with patch("src.cli.main.SyncCommand") as mock_command:
            mock_command.return_value.run.return_value = ExitCode.SUCCESS

            result = runner.invoke(app, ["--dir", "docs/guides"])

        assert result.exit_code == 0
        assert mock_command.return_value.run.call_args.kwargs["directory"] == "docs/guides"
