"""
INBM Admin Backend - Logging Infrastructure

This module provides structured logging with support for:
- JSON formatted logs for production
- Console formatted logs for development
- Request id binding for tracing
- Audit and security event loggers
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable, Dict, Optional, ParamSpec, TypeVar

import structlog
from structlog.types import Processor

from app.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_id_context: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add request_id and actor_id from context variables to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id

    actor_id = actor_id_context.get()
    if actor_id:
        event_dict["actor_id"] = actor_id

    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert the LOG_LEVEL name to a logging constant, INFO when unknown."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), None)
    return level if isinstance(level, int) else logging.INFO


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings),
    )

    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("vehicle_created", vehicle_id=12, plate="ABC1D23")
    """
    return structlog.get_logger(name)


def log_execution_time(
    log: structlog.stdlib.BoundLogger,
    operation: str,
    **extra_fields: Any
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to log execution time of a function.

    Args:
        log: Logger instance
        operation: Name of the operation being timed
        **extra_fields: Additional fields to include in the log

    Example:
        >>> @log_execution_time(log, "fipe_price_lookup")
        ... def get_price(brand: str, model: str, year: str) -> FipePrice:
        ...     ...
    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.info(
                    f"{operation}_completed",
                    duration_ms=round(duration_ms, 2),
                    success=True,
                    **extra_fields
                )
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.error(
                    f"{operation}_failed",
                    duration_ms=round(duration_ms, 2),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    **extra_fields
                )
                raise
        return wrapper
    return decorator


class AuditLogger:
    """
    Records who created, changed or removed which record.
    """

    def __init__(self) -> None:
        self.log = get_logger("audit")

    def log_record_created(self, resource: str, record_id: Any, actor_id: Optional[str]) -> None:
        self.log.info(
            "record_created",
            resource=resource,
            record_id=str(record_id),
            actor=actor_id,
        )

    def log_record_updated(
        self,
        resource: str,
        record_id: Any,
        actor_id: Optional[str],
        changes: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.log.info(
            "record_updated",
            resource=resource,
            record_id=str(record_id),
            actor=actor_id,
            changed_fields=sorted(changes) if changes else [],
        )

    def log_record_deleted(self, resource: str, record_id: Any, actor_id: Optional[str]) -> None:
        self.log.info(
            "record_deleted",
            resource=resource,
            record_id=str(record_id),
            actor=actor_id,
        )


class SecurityLogger:
    """
    Specialized logger for access-control events.
    """

    def __init__(self) -> None:
        self.log = get_logger("security")

    def log_unauthorized_access(self, user_id: str, resource: str, action: str) -> None:
        """Log a request rejected by role checks."""
        self.log.warning(
            "unauthorized_access",
            user_id=user_id,
            resource=resource,
            action=action,
        )

    def log_token_invalid(self, reason: str, ip_address: str) -> None:
        """Log a rejected bearer token."""
        self.log.warning(
            "token_invalid",
            reason=reason,
            ip_address=ip_address,
        )

    def log_login_failed(self, email: str, ip_address: str) -> None:
        self.log.warning(
            "login_failed",
            email=email,
            ip_address=ip_address,
        )

    def log_rate_limit_exceeded(self, ip_address: str, endpoint: str) -> None:
        self.log.warning(
            "rate_limit_exceeded",
            ip_address=ip_address,
            endpoint=endpoint,
        )


audit_logger = AuditLogger()
security_logger = SecurityLogger()
