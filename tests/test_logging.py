"""Tests for logging helpers."""

import logging

import pytest

from gdrive_backup.utils.logging import ContextualLogger, TimedOperation, get_logger, setup_logging


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / "logs" / "backup.log"

    logger = setup_logging(log_level="DEBUG", log_file=log_file, log_to_console=False)
    get_logger("test").info("hello file")

    for handler in logger.handlers:
        handler.flush()
    assert logger.name == "gdrive_backup"
    assert "gdrive_backup.test - INFO - hello file" in log_file.read_text()


def test_contextual_logger_formats_fields(caplog):
    log = ContextualLogger(logging.getLogger("gdrive_backup.test"), {"system": "backup"})

    with caplog.at_level(logging.INFO):
        log.info("Backup started", source="/data", destination="my docs")
        log.bind(run=2).error("Backup failed", err="")

    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        "Backup started | system=backup source=/data destination='my docs'",
        "Backup failed | system=backup run=2 err=''",
    ]
    assert caplog.records[1].levelno == logging.ERROR


def test_contextual_logger_without_fields(caplog):
    with caplog.at_level(logging.INFO):
        ContextualLogger(logging.getLogger("gdrive_backup.test")).info("plain")

    assert caplog.records[0].getMessage() == "plain"


def test_timed_operation(caplog):
    logger = logging.getLogger("gdrive_backup.test")

    with caplog.at_level(logging.INFO):
        with TimedOperation(logger, "backup"):
            pass
        with pytest.raises(RuntimeError):
            with TimedOperation(logger, "backup"):
                raise RuntimeError("boom")

    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "Starting backup"
    assert messages[1].startswith("Completed backup in ")
    assert messages[3].startswith("Failed backup after ") and messages[3].endswith("boom")
