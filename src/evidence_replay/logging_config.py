"""
JSON structured logging setup.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

# Extra fields copied into the JSON payload when present on the record
EXTRA_FIELDS = [
    "action",
    "path",
    "size_bytes",
    "blob_count",
    "mismatch_count",
    "break_count",
    "chain_hash_matched",
    "failed_checks",
    "duration_ms",
    "error",
    "endpoint",
    "status_code",
]


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data, default=str)


def setup_json_logging(
    level: str = "INFO",
    json_format: bool = True,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure logging for the evidence_replay package.

    Args:
        level: Log level name for the package logger
        json_format: Emit JSON lines instead of plain text
        stream: Output stream (default: stderr, keeping stdout for reports)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("evidence_replay")
    logger.setLevel(level.upper())

    # Clear existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level.upper())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    logger.propagate = False

    return logger
