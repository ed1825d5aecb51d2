"""Unit tests for logging utilities."""

import logging
from unittest.mock import patch

import pytest

from src.utils import logging as logging_utils


@pytest.mark.unit
class TestLogging:
    """Test structlog configuration helpers."""

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_get_logger_configures_once(self) -> None:
        """Test loggers can be created and configuration is recorded."""
        logger = logging_utils.get_logger("tests.logging")

        assert logger is not None
        assert logging_utils._configured is True

    def test_configure_logging_reads_env_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test LOG_LEVEL controls the root logger level."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        with patch("src.utils.logging.logging.basicConfig") as mock_basic_config:
            logging_utils.configure_logging()

        assert mock_basic_config.call_args.kwargs["level"] == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_explicit_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an explicit level wins over the environment."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        with patch("src.utils.logging.logging.basicConfig") as mock_basic_config:
            logging_utils.configure_logging("warning")

        assert mock_basic_config.call_args.kwargs["level"] == logging.WARNING

    def test_reconfigure_changes_level(self) -> None:
        """Test a later call updates the level of an already configured root logger."""
        logging_utils.configure_logging("info")
        logging_utils.configure_logging("error")

        assert logging.getLogger().level == logging.ERROR

    def test_configure_logging_unknown_level(self) -> None:
        """Test unknown level names fall back to INFO."""
        with patch("src.utils.logging.logging.basicConfig") as mock_basic_config:
            logging_utils.configure_logging("chatty")

        assert mock_basic_config.call_args.kwargs["level"] == logging.INFO
