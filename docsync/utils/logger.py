"""
Logging utility for docsync.
"""

import logging
import sys
import os
from typing import Optional
from pathlib import Path
from datetime import datetime


class RunIdFormatter(logging.Formatter):
    """
    Log format: timestamp | level | class | run_id | message
    """

    def formatTime(self, record, datefmt=None):
        ct = datetime.fromtimestamp(record.created)
        s = ct.strftime(datefmt or "%Y-%m-%d %H:%M:%S")
        return f"{s}.{int(record.msecs):03d}"

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, self.datefmt),
            record.levelname,
            getattr(record, "class_name", "N/A"),
            str(getattr(record, "run_id", "N/A")),
            record.getMessage(),
        ]
        log_line = " | ".join(parts)

        if record.exc_info:
            log_line += "\n" + self.formatException(record.exc_info)

        return log_line


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
) -> None:
    """
    Configure the root logger for docsync.

    Args:
        level: Log level name. Falls back to LOG_LEVEL (default: INFO)
        log_file: Optional file to append logs to. Falls back to LOG_FILE
        log_to_console: Whether to write logs to stdout (default: True)
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if log_file is None:
        log_file = os.getenv("LOG_FILE")

    formatter = RunIdFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers.clear()

    handlers = []
    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(getattr(logging, level))
        root_logger.addHandler(handler)

    _quiet_third_party_loggers()

    get_logger(__name__, "LoggingConfig").info(
        f"Logging configured: level={level}, console={log_to_console}, file={log_file or 'None'}",
        run_id="SYSTEM",
    )


def _quiet_third_party_loggers():
    """Keep HTTP client and SDK chatter out of run logs."""
    noisy_loggers = {
        "github": logging.WARNING,
        "urllib3": logging.WARNING,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "openai": logging.WARNING,
        "anthropic._base_client": logging.WARNING,
        "uvicorn.access": logging.WARNING,
    }

    for logger_name, log_level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(log_level)


class ContextLogger:
    """
    Logger wrapper that stamps the class name and pipeline run id.

    Usage:
        logger = get_logger(__name__, "BranchReconciler")
        logger.info("Created branch", run_id="48273945")
    """

    def __init__(self, name: str, class_name: str = "N/A"):
        self.logger = logging.getLogger(name)
        self.class_name = class_name

    def _log(self, level: int, msg: str, run_id: Optional[str] = None, **kwargs):
        extra = kwargs.pop("extra", {})
        extra["run_id"] = run_id or "N/A"
        extra["class_name"] = self.class_name
        self.logger.log(level, msg, extra=extra, **kwargs)

    def debug(self, msg: str, run_id: Optional[str] = None, **kwargs):
        self._log(logging.DEBUG, msg, run_id, **kwargs)

    def info(self, msg: str, run_id: Optional[str] = None, **kwargs):
        self._log(logging.INFO, msg, run_id, **kwargs)

    def warning(self, msg: str, run_id: Optional[str] = None, **kwargs):
        self._log(logging.WARNING, msg, run_id, **kwargs)

    def error(self, msg: str, run_id: Optional[str] = None, **kwargs):
        self._log(logging.ERROR, msg, run_id, **kwargs)

    def exception(self, msg: str, run_id: Optional[str] = None, **kwargs):
        kwargs["exc_info"] = True
        self._log(logging.ERROR, msg, run_id, **kwargs)

    def critical(self, msg: str, run_id: Optional[str] = None, **kwargs):
        self._log(logging.CRITICAL, msg, run_id, **kwargs)


def get_logger(name: str, class_name: str = "N/A") -> ContextLogger:
    """
    Get a run-aware logger instance.

    Args:
        name: Logger name (typically __name__ of the module)
        class_name: Name of the class using the logger
    """
    return ContextLogger(name, class_name)
