"""
Structured logging for the plan engine.

Engine modules log through `logging.getLogger(__name__)` and attach plan
context (plan id, athlete id, week) with `plan_context()`. The JSON
formatter lifts that context to top-level keys so a partially written
plan can be traced across records.

Nothing is configured on import; the embedding application calls
setup_logging() once at startup.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from core.config import Settings, settings as default_settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries whose INFO output drowns out plan generation records
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def plan_context(**fields: Any) -> Dict[str, Dict[str, Any]]:
    """
    `extra=` payload for a log call, dropping unset fields.

        logger.error("Week write failed", extra=plan_context(plan_id=plan.id, week=3))
    """
    return {"extra_fields": {k: v for k, v in fields.items() if v is not None}}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Plan context from plan_context()
        log_data.update(getattr(record, "extra_fields", {}))

        # UUIDs and dates are rendered with str()
        return json.dumps(log_data, default=str)


def build_formatter(config: Settings) -> logging.Formatter:
    if config.LOG_FORMAT == "json" or config.ENVIRONMENT == "production":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(config: Optional[Settings] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route every record through a single console handler on the root logger.

    Args:
        config: Settings to read LOG_LEVEL / LOG_FORMAT / ENVIRONMENT from
        stream: Output stream (default: stdout)
    """
    config = config or default_settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(config))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
