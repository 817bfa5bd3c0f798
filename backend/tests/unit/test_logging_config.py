"""
Unit tests for logging configuration.

Covers the JSON and console formatters, rotating file handlers, and the
fallback to console-only logging when the log directory cannot be written.
"""

import json
import logging
from unittest.mock import patch

import pytest

from clinic.core.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    get_logger,
    setup_logging,
)

# Mark all tests in this module as logging tests
pytestmark = pytest.mark.logging


@pytest.fixture
def clean_logging():
    """Clean up logging handlers before and after each test."""
    root_logger = logging.getLogger()

    # Store original handlers
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    sql_logger = logging.getLogger("sqlalchemy.engine")
    original_sql_level = sql_logger.level

    yield

    # Restore original state
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    for handler in original_handlers:
        root_logger.addHandler(handler)

    root_logger.setLevel(original_level)
    sql_logger.setLevel(original_sql_level)


def make_record(msg="Appointment booked", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="clinic.services",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter_includes_context(self):
        record = make_record(context={"appointment_id": 12, "time_slot": "MORNING_1"})

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "clinic.services"
        assert payload["message"] == "Appointment booked"
        assert payload["context"] == {"appointment_id": 12, "time_slot": "MORNING_1"}

    def test_json_formatter_without_context(self):
        payload = json.loads(JSONFormatter().format(make_record()))

        assert "context" not in payload

    def test_console_formatter_appends_context_and_keeps_record(self):
        formatter = ConsoleFormatter("%(levelname)s | %(message)s")
        record = make_record(context={"doctor_id": 7})

        output = formatter.format(record)

        assert "Appointment booked" in output
        assert output.endswith("| {'doctor_id': 7}")
        # The shared record is not colourised for other handlers
        assert record.levelname == "INFO"


class TestSetupLogging:
    def test_console_handler_always_present(self, clean_logging, capsys):
        setup_logging(log_level="INFO")

        get_logger("clinic.test").info("Console handler test")

        captured = capsys.readouterr()
        assert "Console handler test" in captured.out
        stream_handlers = [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler)
        ]
        assert len(stream_handlers) == 1

    def test_json_console_output(self, clean_logging, capsys):
        setup_logging(log_level="INFO", use_json_format=True)
        capsys.readouterr()

        get_logger("clinic.test").info(
            "JSON test message", extra={"context": {"patient_id": 3}}
        )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "JSON test message"
        assert payload["context"] == {"patient_id": 3}

    def test_log_files_written(self, clean_logging, tmp_path):
        setup_logging(log_level="INFO", log_to_file=True, log_dir=tmp_path)

        logger = get_logger("clinic.test")
        logger.info("Slot released")
        logger.error("Storage failure")
        for handler in logging.getLogger().handlers:
            handler.flush()

        app_log = (tmp_path / "app.log").read_text(encoding="utf-8")
        error_log = (tmp_path / "clinic_errors.log").read_text(encoding="utf-8")
        assert "Slot released" in app_log
        assert "Storage failure" in app_log
        assert "Storage failure" in error_log
        assert "Slot released" not in error_log

    @pytest.mark.parametrize(
        "error_type,error_msg",
        [
            (OSError, "No space left on device"),
            (PermissionError, "Permission denied"),
        ],
    )
    def test_file_handler_failure_falls_back_to_console(
        self, clean_logging, capsys, tmp_path, error_type, error_msg
    ):
        with patch("logging.handlers.RotatingFileHandler") as mock_handler:
            mock_handler.side_effect = error_type(error_msg)

            setup_logging(log_level="INFO", log_to_file=True, log_dir=tmp_path)

            get_logger("clinic.test").info("Message after file handler failure")

        captured = capsys.readouterr()
        assert "Falling back to console-only logging" in captured.out
        assert "Message after file handler failure" in captured.out

    def test_repeated_setup_does_not_duplicate_handlers(self, clean_logging):
        root_logger = logging.getLogger()

        setup_logging(log_level="INFO")
        count_after_first = len(root_logger.handlers)
        setup_logging(log_level="DEBUG")

        assert len(root_logger.handlers) == count_after_first
        assert root_logger.level == logging.DEBUG

    def test_sql_echo_enables_engine_logger(self, clean_logging):
        setup_logging(log_level="INFO", enable_sql_echo=True)

        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
