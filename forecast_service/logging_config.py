"""
Logging setup.

Standard library logging with a human-readable formatter by default and
a minimal JSON formatter for log shippers. Modules just do
``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

HUMAN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str = "INFO", json_logs: bool = False, force: bool = False) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Emit one JSON object per line instead of the human format.
    force : bool
        Replace handlers already on the root logger. Without it an
        existing configuration (uvicorn, pytest) is left in place.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_logs else logging.Formatter(HUMAN_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler], force=force)

    # httpx logs every request at INFO, which drowns the service's own lines.
    logging.getLogger("httpx").setLevel(logging.WARNING)
