"""
Logging Configuration

structlog setup shared by the API, the cron endpoints and the Celery
workers. Console output in DEBUG, JSON lines otherwise, plus a JSON file
log outside DEBUG and tests.
"""

import logging
import sys
import uuid
from typing import Any, Dict, Optional
from pathlib import Path

import structlog
from structlog.stdlib import LoggerFactory
from pythonjsonlogger import jsonlogger

from pmhnp_hiring.core.config import get_settings

settings = get_settings()

# httpx logs every aggregator request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "celery.redirected")

LOG_FILE = Path("logs") / "app.log"


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger."""

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if settings.DEBUG
            else structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    if not settings.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if not settings.DEBUG and not settings.TESTING:
        LOG_FILE.parent.mkdir(exist_ok=True)

        file_handler = logging.FileHandler(LOG_FILE)
        file_handler.setFormatter(
            jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def get_run_logger(name: str, source: str, **context) -> structlog.stdlib.BoundLogger:
    """
    Logger for one ingestion run of a job source.

    Every line carries the source, any extra context (such as the chunk)
    and a short ``run_id`` so the lines of concurrent runs can be told apart.
    """
    return get_logger(name).bind(source=source, run_id=uuid.uuid4().hex[:8], **context)


def log_ingestion_activity(source: str, action: str, **kwargs) -> None:
    """
    Log a step of fetching from a job source.

    Args:
        source: Name of the job source
        action: What happened (fetched, skipped, ...)
        **kwargs: Counters and identifiers for the step
    """
    get_logger("ingestion").info("Ingestion activity", source=source, action=action, **kwargs)


def log_database_operation(operation: str, table: str, count: Optional[int] = None, **kwargs) -> None:
    """Log a bulk write such as unpublishing expired jobs."""
    get_logger("database").info(
        "Database operation",
        operation=operation,
        table=table,
        count=count,
        **kwargs
    )


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an exception with its type and the context it happened in.

    Must be called from inside the ``except`` block so the traceback is kept.
    """
    get_logger("errors").error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context or {},
        exc_info=True
    )


def log_performance_metric(
    metric_name: str,
    value: float,
    unit: str = "seconds",
    context: Optional[Dict[str, Any]] = None
) -> None:
    get_logger("performance").info(
        "Performance metric",
        metric=metric_name,
        value=value,
        unit=unit,
        context=context or {}
    )
