"""
Unit Tests for Centralized Logging.

Tests the logging configuration, structured fields, and source handling.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Put the root logger back the way the test found it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_contains_expected_values(self):
        """Should contain all recognized log source values."""
        from notekeeper.core.logging import VALID_SOURCES

        expected = frozenset({"cli", "tui", "gateway", "session", "internal"})
        assert VALID_SOURCES == expected

    def test_valid_sources_is_frozenset(self):
        """Should be a frozenset (immutable)."""
        from notekeeper.core.logging import VALID_SOURCES

        assert isinstance(VALID_SOURCES, frozenset)


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_load_logging_config_reads_yaml_file(self):
        """Should load configuration from logging.yaml."""
        from notekeeper.core import logging as logging_module

        test_config = {
            "level": "DEBUG",
            "format": "console",
            "handlers": {
                "console": {"enabled": True},
                "file": {
                    "enabled": False,
                    "path": "logs/notekeeper.jsonl",
                    "max_bytes": 5242880,
                    "backup_count": 3,
                },
            },
        }

        logging_module._logging_config = None

        with patch("notekeeper.core.logging.load_yaml_config", return_value=test_config):
            config = logging_module._load_logging_config()

            assert config["level"] == "DEBUG"
            assert config["handlers"]["file"]["enabled"] is False
            assert config["handlers"]["file"]["backup_count"] == 3

        logging_module._logging_config = None

    def test_load_logging_config_raises_if_file_missing(self):
        """Should raise FileNotFoundError if logging.yaml doesn't exist."""
        from notekeeper.core import logging as logging_module

        logging_module._logging_config = None

        with patch(
            "notekeeper.core.logging.load_yaml_config",
            side_effect=FileNotFoundError("Configuration file not found: logging.yaml"),
        ):
            with pytest.raises(FileNotFoundError) as exc_info:
                logging_module._load_logging_config()

            assert "logging.yaml" in str(exc_info.value)

        logging_module._logging_config = None

    def test_config_is_cached(self):
        """Should cache the configuration after first load."""
        from notekeeper.core import logging as logging_module

        logging_module._logging_config = None

        with patch(
            "notekeeper.core.logging.load_yaml_config",
            return_value={"level": "INFO", "format": "json"},
        ) as mock_load:
            config1 = logging_module._load_logging_config()
            config2 = logging_module._load_logging_config()

            assert config1 is config2
            mock_load.assert_called_once()

        logging_module._logging_config = None


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture
    def mock_logging_config(self):
        """Create a mock logging configuration."""
        return {
            "level": "WARNING",
            "format": "json",
            "handlers": {
                "console": {"enabled": True},
                "file": {
                    "enabled": True,
                    "path": "logs/notekeeper.jsonl",
                    "max_bytes": 10485760,
                    "backup_count": 5,
                },
            },
        }

    def test_setup_logging_configures_root_logger(self, mock_logging_config):
        """Should configure the root logger with correct level."""
        from notekeeper.core.logging import setup_logging

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="json", enable_file_logging=False)

            assert logging.getLogger().level == logging.DEBUG

    def test_console_handler_writes_to_stderr(self, mock_logging_config):
        """Log lines must not mix into piped command output."""
        import sys

        from notekeeper.core.logging import setup_logging

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(format_type="console", enable_file_logging=False)

            stream_handlers = [
                h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler
            ]
            assert len(stream_handlers) == 1
            assert stream_handlers[0].stream is sys.stderr

    def test_console_can_be_disabled(self, mock_logging_config):
        """The TUI owns the terminal, so it logs to file only."""
        from notekeeper.core.logging import setup_logging

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_console=False, enable_file_logging=False)

            assert logging.getLogger().handlers == []

    def test_setup_logging_with_file_logging_enabled(self, tmp_path, mock_logging_config):
        """Should create a single RotatingFileHandler for the JSONL file."""
        from notekeeper.core.logging import setup_logging

        log_file = tmp_path / "logs" / "notekeeper.jsonl"

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("notekeeper.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(level="INFO", format_type="json", enable_file_logging=True)

            handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
            assert "RotatingFileHandler" in handler_types
            assert log_file.parent.is_dir()

        for handler in logging.getLogger().handlers:
            handler.close()

    def test_setup_logging_uses_config_defaults(self, mock_logging_config):
        """Should use values from logging.yaml when not overridden."""
        from notekeeper.core.logging import setup_logging

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)

            assert logging.getLogger().level == logging.WARNING

    def test_http_library_loggers_are_quietened(self, mock_logging_config):
        from notekeeper.core.logging import setup_logging

        with patch("notekeeper.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

            assert logging.getLogger("httpx").level == logging.WARNING
            assert logging.getLogger("httpcore").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_structlog_logger(self):
        """Should return a structlog logger."""
        from notekeeper.core.logging import get_logger

        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_log_with_source_adds_source_field(self):
        """Should add source field to log call."""
        from notekeeper.core.logging import get_logger, log_with_source

        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "gateway", "info", "Note created", note_id=12)

            mock_info.assert_called_once_with("Note created", source="gateway", note_id=12)

    def test_log_with_source_raises_on_invalid_level(self):
        """Should raise AttributeError for invalid log levels (no fallback)."""
        from notekeeper.core.logging import get_logger, log_with_source

        logger = get_logger("test")

        with pytest.raises(AttributeError):
            log_with_source(logger, "cli", "nonexistent_level", "Test")


class TestResolveLogPath:
    """Tests for _resolve_log_path function."""

    def test_resolve_log_path_relative_to_project_root(self, tmp_path):
        """Should resolve path relative to project root."""
        from notekeeper.core.logging import _resolve_log_path

        with patch("notekeeper.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/notekeeper.jsonl") == tmp_path / "logs" / "notekeeper.jsonl"
