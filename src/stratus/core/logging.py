"""Structured logging infrastructure for Stratus.

Provides structured logging using structlog with Stratus-specific context
such as the resource type and lifecycle operation being executed. Supports
console and JSON output, optionally to a rotating file.

Example usage:
    from stratus.core.logging import get_logger, configure_logging, with_context

    # Configure once at startup
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("retry")

    # Log with auto-context
    logger.info("retry.succeeded", attempts=3)

    # Correlate every entry emitted while a lifecycle operation runs
    ctx = OperationContext(resource_type="bucket", operation="create")
    with with_context(ctx):
        logger.warning("authz.decode_failed")  # includes resource_type, operation
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Sensitive field patterns that should never be logged
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "access_key",
    "token",
    "secret",
    "password",
    "credential",
    "bearer",
    "authorization",
    "encoded_message",
})


@dataclass(frozen=True)
class OperationContext:
    """Immutable context for correlating log entries of one lifecycle call.

    Attributes:
        resource_type: Name the resource was registered under (e.g. "bucket").
        operation: Lifecycle operation being executed (create, read, ...).
        request_id: Correlation id, unique per call unless supplied.
        component: Component name for the current operation.
    """

    resource_type: str
    operation: str | None = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    component: str = "unknown"

    def with_operation(self, operation: str) -> OperationContext:
        """Create a new context for a different lifecycle operation."""
        return OperationContext(
            resource_type=self.resource_type,
            operation=operation,
            request_id=self.request_id,
            component=self.component,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging (excludes None values)."""
        result: dict[str, Any] = {
            "resource_type": self.resource_type,
            "request_id": self.request_id,
            "component": self.component,
        }
        if self.operation is not None:
            result["operation"] = self.operation
        return result


# ContextVar keeps concurrent lifecycle calls isolated
_current_context: ContextVar[OperationContext | None] = ContextVar(
    "stratus_context", default=None
)


def get_current_context() -> OperationContext | None:
    """Get the current OperationContext if set."""
    return _current_context.get()


@contextmanager
def with_context(ctx: OperationContext) -> Iterator[OperationContext]:
    """Context manager that sets OperationContext for the duration of a block.

    All log calls within the block will automatically include the context
    fields when the _add_context processor is active.

    Args:
        ctx: The OperationContext to use for the block.

    Yields:
        The OperationContext that was set.
    """
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def _sanitize_value(key: str, value: Any) -> Any:
    """Return "[REDACTED]" for values whose key looks sensitive."""
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that sanitizes sensitive fields.

    Nested dicts are sanitized one level deep.
    """
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _add_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds OperationContext fields to log entries.

    Explicit bindings take precedence over context fields.
    """
    ctx = get_current_context()
    if ctx is not None:
        for key, value in ctx.to_dict().items():
            if key not in event_dict:
                event_dict[key] = value
    return event_dict


class StratusLogger:
    """Stratus-specific logger wrapper around structlog.

    The logger is bound to a component name and can have additional context
    bound for a specific scope.

    Note: the underlying structlog logger is fetched lazily on every call so
    loggers created at module import time still respect configuration set
    later via configure_logging().
    """

    def __init__(self, component: str, **initial_context: Any) -> None:
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> StratusLogger:
        """Create a new logger with additional bound context."""
        new_logger = StratusLogger.__new__(StratusLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def unbind(self, *keys: str) -> StratusLogger:
        """Create a new logger with specified keys removed."""
        new_logger = StratusLogger.__new__(StratusLogger)
        new_logger._component = self._component
        new_logger._context = {k: v for k, v in self._context.items() if k not in keys}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an exception with traceback. Call from within an except block."""
        self._get_logger().exception(event, **kw)


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console", "both"]


def _get_processors(include_timestamps: bool, include_context: bool) -> list[Processor]:
    """Build the shared structlog processor chain.

    The chain stops short of rendering: each handler's ProcessorFormatter
    picks its own renderer.
    """
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,  # Filter before processing
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]

    if include_context:
        processors.append(_add_context)

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ])

    return processors


def _formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
    include_context: bool = True,
    colors: bool = True,
) -> None:
    """Configure Stratus structured logging.

    This should be called once at application startup before any logging occurs.
    Host applications that already configure structlog may skip it entirely.

    Handlers by format:
        console: human-readable lines to stderr.
        json: JSON lines to ``file_path`` if given, otherwise to stdout.
        both: human-readable lines to stderr and JSON lines to ``file_path``.

    Args:
        level: Minimum log level to capture.
        format: Output format, see above.
        file_path: Log file path. Required if format="both".
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps in log entries.
        include_context: Whether to include OperationContext fields in log entries.
        colors: Whether console lines use ANSI colors.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)
    json_formatter = _formatter(structlog.processors.JSONRenderer())
    handlers: list[logging.Handler] = []

    if format in ("console", "both"):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=colors)))
        handlers.append(console_handler)

    if format in ("json", "both"):
        json_handler: logging.Handler
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            json_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
        else:
            json_handler = logging.StreamHandler(sys.stdout)
        json_handler.setFormatter(json_formatter)
        handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(log_level)
        root_logger.addHandler(handler)

    # cache_logger_on_first_use=False so module-level loggers pick up this config
    structlog.configure(
        processors=_get_processors(include_timestamps, include_context),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> StratusLogger:
    """Get a Stratus logger for a component.

    Args:
        component: The component name (e.g., "retry", "authz").
        **initial_context: Additional context to bind.

    Returns:
        A StratusLogger instance bound to the component.
    """
    return StratusLogger(component, **initial_context)


__all__ = [
    "LogFormat",
    "LogLevel",
    "OperationContext",
    "SENSITIVE_PATTERNS",
    "StratusLogger",
    "configure_logging",
    "get_current_context",
    "get_logger",
    "with_context",
]
