from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

import structlog


def _utc_timestamp(_: Any, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(level: str | int = "INFO") -> None:
    """Send relay and uvicorn logs through structlog as JSON lines.

    Rejected records are logged at error level and accepted ones at debug,
    so ``level="DEBUG"`` traces every record the relay applies.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format="%(message)s")
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _utc_timestamp,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
