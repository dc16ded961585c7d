"""
Unit tests for the logging setup and stage logger.
"""

import json
import logging
import logging.handlers

import pytest
from rich.logging import RichHandler

from lando_pull.core.exceptions import RemoteBackupError
from lando_pull.utils.logging import (
    LOGGER_NAME,
    LogCategory,
    LogEntry,
    StageLogger,
    StructuredFormatter,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestLogEntry:
    """Test cases for LogEntry dataclass."""

    def test_defaults(self):
        entry = LogEntry(message="Test message")

        assert entry.level == "INFO"
        assert entry.category == LogCategory.SYSTEM
        assert entry.run_id is None
        assert entry.metadata == {}

    def test_to_json(self):
        entry = LogEntry(message="done", run_id="r1", stage="import", duration=1.5)

        data = json.loads(entry.to_json())

        assert data["run_id"] == "r1"
        assert data["stage"] == "import"
        assert data["duration"] == 1.5
        assert isinstance(data["timestamp"], str)


class TestStructuredFormatter:
    """Test cases for StructuredFormatter."""

    def test_format_plain_record(self):
        record = logging.LogRecord("lando_pull.x", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        record.remote = "example.com"

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["metadata"]["remote"] == "example.com"
        assert data["metadata"]["logger"] == "lando_pull.x"

    def test_format_attached_entry(self):
        entry = LogEntry(message="stage done", stage="transfer")
        record = logging.LogRecord("lando_pull.x", logging.INFO, __file__, 10, "ignored", None, None)
        record.log_entry = entry

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "stage done"
        assert data["stage"] == "transfer"


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_rich_console_handler(self):
        logger = setup_logging(level="DEBUG")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_structured_console_handler(self):
        logger = setup_logging(structured_logging=True)

        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_rotating_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "lando-pull.log"

        logger = setup_logging(log_file=str(log_file))
        get_logger("test").info("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
        assert "written to file" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_get_logger_namespace(self):
        assert get_logger("pull").name == "lando_pull.pull"


class TestStageLogger:
    """Test cases for StageLogger."""

    def test_complete_returns_duration(self, caplog):
        stage_logger = StageLogger("run1")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            stage_logger.step_start("transfer", LogCategory.TRANSFER)
            duration = stage_logger.step_complete("transfer", LogCategory.TRANSFER)

        assert duration >= 0
        assert "Starting stage: transfer" in caplog.text
        assert "Completed stage: transfer" in caplog.text
        record = caplog.records[-1]
        assert record.log_entry.run_id == "run1"
        assert record.log_entry.category == LogCategory.TRANSFER

    def test_failed_logs_exit_code_and_output(self, caplog):
        stage_logger = StageLogger("run1")
        error = RemoteBackupError("Failed to create remote backup", exit_code=2, output="mysqldump: Got error")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            stage_logger.step_start("remote_backup", LogCategory.BACKUP)
            stage_logger.step_failed("remote_backup", error, LogCategory.BACKUP)

        assert "Failed stage: remote_backup" in caplog.text
        assert "(exit code 2)" in caplog.text
        assert "mysqldump: Got error" in caplog.text
        failed = [r for r in caplog.records if "Failed stage" in r.getMessage()][0]
        assert failed.log_entry.error_code == "RemoteBackupError"
