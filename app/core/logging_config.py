"""
Structured logging configuration for the application.

JSON logs in production, readable logs in development. Every record carries
the id of the request that produced it.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger

REQUEST_ID_HEADER = "X-Request-ID"

# Set by the request middleware in main.py; "-" outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


def new_request_id(incoming: Optional[str] = None) -> str:
    """Reuse a caller-supplied id, otherwise mint a short one."""
    if incoming:
        return incoming[:64]
    return uuid.uuid4().hex[:12]


class RequestIdFilter(logging.Filter):
    """Stamp the current request id on every record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that adds timestamp, level, logger and request id.
    """

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['request_id'] = getattr(record, 'request_id', '-')

        # Source location only for warnings and above
        if record.levelno >= logging.WARNING:
            log_record['line'] = record.lineno
            log_record['pathname'] = record.pathname


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON output for production, plain text for development
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(RequestIdFilter())

    if json_logs:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s')
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)

    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(console_handler)

    # Quiet noisy libraries
    for name in ("boto3", "botocore", "s3transfer", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)
