"""
Logging for the task API.

Plain module loggers everywhere, plus JSON event records for the API layer:
one document per event with a fixed envelope and any extra fields.
"""

from datetime import datetime, timezone
from functools import partialmethod
from typing import Any, Dict, Optional
import json
import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Install a stdout handler on the root logger (once) at LOG_LEVEL or INFO."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


class StructuredLogger:
    """
    Emit events as JSON documents through a stdlib logger.

    Fields given to ``bind`` are repeated on every event of the returned
    logger, e.g. ``get_logger("taskboard.api").bind(route="/tasks")``.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.context = dict(context or {})

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger.name, {**self.context, **fields})

    def event(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "message": message,
            "logger": self.logger.name,
            **self.context,
            **fields,
        }
        self.logger.log(level, json.dumps(record, default=str), exc_info=exc_info)

    debug = partialmethod(event, logging.DEBUG)
    info = partialmethod(event, logging.INFO)
    warning = partialmethod(event, logging.WARNING)
    error = partialmethod(event, logging.ERROR)
    # Inside an except block only: attaches the active traceback
    exception = partialmethod(event, logging.ERROR, exc_info=True)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
