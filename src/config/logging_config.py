"""
JSON logging for the Drive Notes proxy.

Every record carries ``service: drive-notes`` so proxy logs can be picked out of
a shared stream. Call sites log statuses, provider reasons and file ids only;
tokens and authorization codes never reach a log line.
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "drive-notes"


def setup_logger(
    name: str = "drive_notes",
    level: Optional[str] = None,
) -> logging.Logger:
    """
    Return a logger that writes one JSON object per line to stdout.

    Args:
        name: Logger name (usually __name__ of calling module)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to LOG_LEVEL or INFO

    Returns:
        Configured logger instance
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    numeric_level = getattr(logging, level, logging.INFO)

    logger = logging.getLogger(name)

    # Modules call this at import time; attach the handler once.
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            static_fields={"service": SERVICE_NAME},
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(numeric_level)

    return logger


logger = setup_logger("drive_notes")


def route_server_logs(level: Optional[str] = None) -> None:
    """Send uvicorn's own loggers through the same JSON handler (run uvicorn with log_config=None)."""
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = setup_logger(name, level)
        server_logger.propagate = False
