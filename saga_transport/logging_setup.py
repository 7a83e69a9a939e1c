"""
Logging helpers for the saga HTTP transport.

``setup_structured_logger`` emits one JSON document per record, for log
aggregation systems. ``setup_logging`` is the plain text variant.
"""

import json
import logging
import sys
from typing import Any, Dict

EXTRA_FIELDS = ("method", "url", "status_code", "kind")


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON"""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string with timestamp, logger name, level, message and the
            transport fields present on the record
        """
        payload: Dict[str, Any] = {
            "ts": int(record.created * 1000),  # milliseconds
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                payload[field] = getattr(record, field)

        return json.dumps(payload, default=str)


def setup_structured_logger(level: int = logging.INFO, stream=None) -> logging.Logger:
    """
    Configure structured JSON logging for the transport.

    Args:
        level: Logging level (default: logging.INFO)
        stream: Output stream (default: stdout)

    Returns:
        The configured ``saga_transport`` logger

    Example:
        >>> logger = setup_structured_logger(logging.DEBUG)
        >>> logger.info("ready", extra={"method": "GET"})
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    transport_logger = logging.getLogger("saga_transport")
    transport_logger.setLevel(level)
    transport_logger.handlers = [handler]
    transport_logger.propagate = False
    return transport_logger


def setup_logging(debug: bool = False) -> None:
    """
    Setup plain text logging.

    Args:
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("saga_transport").setLevel(level)
