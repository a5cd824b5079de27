# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Structured logging for the module resolver.

Lifecycle events (module_installed, module_rolled_back, ...) are logged as
records whose message is the event name and whose extras carry the payload.
Both formatters lift the module a record is about into a fixed field, so
one module's history can be followed across a run.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName", "asctime"
}

# Payload keys promoted to top-level fields, in output order
LIFECYCLE_FIELDS = ("module_name", "error")


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output shape:
        {"timestamp", "level", "logger", "message",
         "module_name"?, "error"?, "context"?, "exception"?}

    module_name and error are top-level whenever the record carries them;
    any other extra fields are grouped under "context".
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _extras(record)
        for field in LIFECYCLE_FIELDS:
            if field in extras:
                log_data[field] = extras.pop(field)
        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter: '<time> - <logger> - <level> - [module] message'"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = record.message
        module_name = getattr(record, "module_name", None)
        if module_name is not None:
            message = f"[{module_name}] {message}"
            error = getattr(record, "error", None)
            if error:
                message = f"{message}: {error}"
        return f"{record.asctime} - {record.name} - {record.levelname} - {message}"


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_format: str = "json"
) -> logging.Logger:
    """
    Get configured logger instance.

    Args:
        name: Logger name (usually __name__)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type (json or text)

    Returns:
        Configured logger instance, writing to stderr (stdout carries CLI output)
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "INFO",
    **kwargs: Any
) -> None:
    """
    Log a lifecycle event.

    Args:
        logger: Logger instance
        event: Event name, used as the record message
        level: Log level
        **kwargs: Payload (module_name, error, ...); must avoid LogRecord attribute names
    """
    log_func = getattr(logger, level.lower())
    log_func(event, extra=kwargs)


def get_service_logger(service_name: str, config=None) -> logging.Logger:
    """
    Configure the package logger from config and return a service logger.

    Handlers live on the "module_resolver" logger, so every module logger
    (logging.getLogger(__name__)) inherits the configured format.
    """
    if config is None:
        from module_resolver.core.config import get_config
        config = get_config()
    get_logger("module_resolver", log_level=config.log_level, log_format=config.log_format)
    return logging.getLogger(f"module_resolver.{service_name}")
