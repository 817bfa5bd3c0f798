"""
Centralized logging configuration for the clinic scheduling backend.

Provides:
- one-line JSON records (always used for log files, optional on the console)
- a colourised console format for local runs
- rotating ``app.log`` / ``clinic_errors.log`` files
- SQLAlchemy statement timing when SQL echo is on

Usage:
    from clinic.core.logging_config import setup_logging, get_logger

    setup_logging(log_level="INFO", enable_sql_echo=True)

    logger = get_logger(__name__)
    logger.info("Appointment booked", extra={"context": {"appointment_id": 12}})
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sqlalchemy import event
from sqlalchemy.engine import Engine

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 5

_sql_timing_registered = False


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    The ``context`` dict passed through ``extra`` is emitted under its own
    key so log processors can filter on appointment, doctor or slot fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context = getattr(record, "context", None)
        if context is not None:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured level names, with any ``context`` appended after the message."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so file handlers sharing the record keep a plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"
        line = super().format(record)
        context = getattr(record, "context", None)
        if context:
            line = f"{line} | {context}"
        return line


def _resolve_level(log_level: Union[int, str]) -> int:
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, str(log_level).upper(), logging.INFO)


def _rotating_handler(
    path: Path, level: int, formatter: logging.Formatter
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _register_sql_timing() -> None:
    global _sql_timing_registered
    if _sql_timing_registered:
        return

    @event.listens_for(Engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(Engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.time() - conn.info["query_start_time"].pop(-1)) * 1000
        logging.getLogger("sqlalchemy.performance").info(
            f"Query executed in {elapsed_ms:.2f}ms",
            extra={
                "context": {
                    "sql_query": statement[:500],
                    "sql_duration_ms": round(elapsed_ms, 2),
                }
            },
        )

    _sql_timing_registered = True


def setup_logging(
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = False,
    use_json_format: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the root logger for the whole process.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Level name ("INFO") or number (logging.INFO)
        enable_sql_echo: Log SQLAlchemy statements together with their timings
        log_to_file: Also write rotating JSON log files under ``log_dir``
        use_json_format: JSON instead of the coloured console format on stdout
        log_dir: Directory for log files (defaults to ``backend/logs``)
    """
    level = _resolve_level(log_level)
    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent / "logs"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ConsoleFormatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)
        )
    root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            root_logger.addHandler(
                _rotating_handler(log_dir / "app.log", level, JSONFormatter())
            )
            root_logger.addHandler(
                _rotating_handler(
                    log_dir / "clinic_errors.log", logging.ERROR, JSONFormatter()
                )
            )
        except OSError as e:
            # Disk full, read-only filesystem, etc.: keep console logging only
            root_logger.warning(
                f"Failed to create log file handlers: {e}. "
                "Falling back to console-only logging.",
                extra={"context": {"component": "logging_setup"}},
            )

    if enable_sql_echo:
        sql_logger = logging.getLogger("sqlalchemy.engine")
        sql_logger.setLevel(logging.INFO)
        sql_logger.propagate = True
        _register_sql_timing()

    clinic_logger = logging.getLogger("clinic")
    clinic_logger.setLevel(level)
    clinic_logger.info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "sql_echo": enable_sql_echo,
                "log_to_file": log_to_file,
                "json_format": use_json_format,
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (normally the caller's ``__name__``)."""
    return logging.getLogger(name)
