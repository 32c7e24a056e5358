from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from vapecave.core.context import get_request_id

SERVICE_NAME = "vapecave-api"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def _build_logging_config(level: str = "INFO", environment: str = "development") -> Dict[str, Any]:
    level = level.upper()

    def _logger(logger_level: str = level) -> Dict[str, Any]:
        return {"handlers": ["default"], "level": logger_level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_context": {"()": RequestContextFilter}},
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
                "rename_fields": {"asctime": "timestamp", "levelname": "level", "name": "logger"},
                "static_fields": {"service": SERVICE_NAME, "environment": environment},
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["request_context"],
            }
        },
        "loggers": {
            "uvicorn": _logger(),
            "uvicorn.error": _logger(),
            "uvicorn.access": _logger(),
            # Statement echo stays off unless asked for explicitly.
            "sqlalchemy.engine": _logger("WARNING"),
            "vapecave": _logger(),
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: str = "INFO", environment: str = "development") -> None:
    logging.config.dictConfig(_build_logging_config(level, environment))
