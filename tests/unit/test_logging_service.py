"""Tests for logging service configuration."""

import logging
from pathlib import Path

import pytest

from rentbook.services.logging import get_log_level, setup_server_logging


class TestServerLogging:
    """Test server logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self, tmp_path) -> None:
        """Verify setup_server_logging creates the log directory if missing."""
        log_file = tmp_path / "nested" / "server.log"
        assert not log_file.parent.exists()

        setup_server_logging(str(log_file))

        assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"))

        assert len(self.root_logger.handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_stdout_only_without_log_file(self) -> None:
        setup_server_logging("")

        assert len(self.root_logger.handlers) == 1
        assert not isinstance(self.root_logger.handlers[0], logging.FileHandler)

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path) -> None:
        log_file = str(tmp_path / "server.log")

        setup_server_logging(log_file)
        setup_server_logging(log_file)

        assert len(self.root_logger.handlers) == 2

    def test_configured_level_applies_to_handlers(self, tmp_path) -> None:
        setup_server_logging(str(tmp_path / "server.log"), level="WARNING")

        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_writes_formatted_messages_to_file(self, tmp_path) -> None:
        """Messages carry a timestamp, the logger name and the level."""
        log_file = Path(tmp_path) / "server.log"
        setup_server_logging(str(log_file))

        logging.getLogger("rentbook.test").info("Bill 7 created")
        for handler in self.root_logger.handlers:
            handler.flush()

        contents = log_file.read_text()
        assert "Bill 7 created" in contents
        assert "rentbook.test - INFO" in contents
        assert contents.startswith("[20")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("Error", logging.ERROR),
        ("verbose", logging.INFO),
        (None, logging.INFO),
    ],
)
def test_get_log_level(name, expected):
    assert get_log_level(name) == expected
