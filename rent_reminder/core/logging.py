"""
Structured logging configuration with correlation IDs.
"""
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog

# Context variables for request-scoped data
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)
room_number_var: ContextVar[Optional[int]] = ContextVar('room_number', default=None)

_service_name = "rent-reminder"
_service_version = "1.0.0"


def add_correlation_id(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add correlation ID to log events."""
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_request_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add command context information to log events."""
    room_number = room_number_var.get()
    if room_number is not None:
        event_dict.setdefault("room_number", room_number)
    return event_dict


def add_service_context(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add service context to log events."""
    event_dict["service"] = _service_name
    event_dict["version"] = _service_version
    return event_dict


def add_timestamp(
    logger, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["iso_timestamp"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    service_name: str = "rent-reminder",
    service_version: str = "1.0.0",
) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Standard library level name for emitted events
        service_name: Service name added to every event
        service_version: Service version added to every event
    """
    global _service_name, _service_version
    _service_name = service_name
    _service_version = service_version

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_service_context,
            add_request_context,
            add_correlation_id,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def get_business_logger() -> structlog.stdlib.BoundLogger:
    """Get a business event logger instance."""
    return structlog.get_logger("business")


def new_correlation_id() -> str:
    return str(uuid.uuid4())[:8]


@contextmanager
def correlation_context(correlation_id: Optional[str] = None, room_number: Optional[int] = None):
    """
    Context manager for setting correlation context.

    Values are restored when the block exits, so nested contexts and
    concurrent tasks keep their own ids. Without an explicit id the current
    one is kept, or a new one is generated.
    """
    correlation_token = correlation_id_var.set(
        correlation_id or correlation_id_var.get() or new_correlation_id()
    )
    room_token = room_number_var.set(room_number)
    try:
        yield correlation_id_var.get()
    finally:
        room_number_var.reset(room_token)
        correlation_id_var.reset(correlation_token)


def log_business_event(event_type: str, **kwargs):
    """
    Log a structured business event.

    Args:
        event_type: Type of business event
        **kwargs: Additional event data
    """
    logger = get_business_logger()
    logger.info("Business event", event_type=event_type, **kwargs)
