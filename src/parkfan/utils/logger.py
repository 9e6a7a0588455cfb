"""
Park Fan Sync - Structured Logging
Provides JSON-formatted logging for log aggregation queries.
"""

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, config


def setup_logger(name: str = __name__) -> logging.Logger:
    """
    Configure structured JSON logger.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Sync completed", extra={
        ...     "job": "wait_times",
        ...     "duration_seconds": 12,
        ...     "parks_processed": 85
        ... })
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers (own handlers only; root may carry others)
    if logger.handlers:
        return logger

    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    return logger


# Global logger instance
logger = setup_logger('parkfan')


def log_sync_start(job: str, item_count: Optional[int] = None):
    """Log the start of a reconciliation pass."""
    logger.info("Sync started", extra={
        "event_type": "sync_start",
        "job": job,
        "item_count": item_count,
        "environment": config.environment
    })


def log_sync_complete(job: str, duration_seconds: float, succeeded: int = 0, failed: int = 0):
    """Log successful completion of a reconciliation pass."""
    logger.info("Sync completed", extra={
        "event_type": "sync_complete",
        "job": job,
        "duration_seconds": duration_seconds,
        "succeeded": succeeded,
        "failed": failed
    })


def log_sync_error(error: Exception, job: str, item: Optional[str] = None):
    """Log a reconciliation failure with context."""
    logger.error("Sync failed", extra={
        "event_type": "sync_error",
        "job": job,
        "item": item,
        "error_type": type(error).__name__,
        "error_message": str(error)
    }, exc_info=True)


def log_api_request(method: str, path: str, status_code: int, duration_ms: float):
    """Log API request metrics."""
    logger.info("API request", extra={
        "event_type": "api_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms
    })


def log_database_error(error: Exception, query_context: str = None):
    """Log database error with context."""
    logger.error("Database error", extra={
        "event_type": "database_error",
        "error_type": type(error).__name__,
        "error_message": str(error),
        "query_context": query_context
    }, exc_info=True)
