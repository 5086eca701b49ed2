"""
Structured logging for the mediator.

Analysis events carry their outcome (severity, tone, source, sequence)
as record extras; the JSON formatter lifts them into top-level keys so
log lines can be filtered by severity or by which analyzer answered.

    logger = get_logger("orchestrator")
    logger.info("Analysis complete", extra={"severity": "high", "source": "remote"})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


LOG_LEVEL = os.getenv("SAFETALK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("SAFETALK_LOG_FORMAT", "json")  # "json" or "text"

# Record extras promoted to top-level JSON keys
_EXTRA_FIELDS = (
    "severity", "tone", "source", "patterns_count", "sequence",
    "error", "error_type", "duration_ms", "status_code", "method", "path",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; message text is kept unescaped (UTF-8)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in _EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stdout handler to the ``safetalk`` logger.

    ``level`` and ``fmt`` default to SAFETALK_LOG_LEVEL / SAFETALK_LOG_FORMAT.
    Calling it again replaces the handler instead of stacking another.
    """
    level = (level or LOG_LEVEL).upper()
    fmt = fmt or LOG_FORMAT

    root = logging.getLogger("safetalk")
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    # The remote SDK logs every request at INFO
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"safetalk.{name}")
