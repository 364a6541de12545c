# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across all components
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Provides structured, JSON-formatted logging for the quest mirror.

Features:
- Component-based loggers
- Contextual fields (quest_id, cache_key, sync_id)
- JSON output for log aggregation
- Named checkpoints at sync milestones

Context is stored in a ContextVar so concurrent requests served on one
event loop never see each other's fields.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("services.sync")

    with log_context(cache_key="discord_quests"):
        logger.info("Refreshing catalog", extra={"new_count": 3})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    API = "api"
    REPOSITORY = "repository"
    SERVICE = "service"
    PROVIDER = "provider"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class LogContext:
    """Contextual fields attached to every record logged inside log_context()."""
    quest_id: Optional[str] = None
    cache_key: Optional[str] = None
    sync_id: Optional[str] = None
    correlation_id: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


_current_context: ContextVar[Optional[LogContext]] = ContextVar(
    "quest_mirror_log_context", default=None
)


def get_current_context() -> LogContext:
    """Get current logging context."""
    context = _current_context.get()
    return context if context is not None else LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Example:
        with log_context(quest_id="1234", operation="ingest"):
            logger.info("Saving quest")
    """
    parent = get_current_context()
    new_context = LogContext(
        quest_id=kwargs.get("quest_id", parent.quest_id),
        cache_key=kwargs.get("cache_key", parent.cache_key),
        sync_id=kwargs.get("sync_id", parent.sync_id),
        correlation_id=kwargs.get("correlation_id", parent.correlation_id),
        component=kwargs.get("component", parent.component),
        operation=kwargs.get("operation", parent.operation),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    token = _current_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_context.reset(token)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_context: bool = True,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        if self.include_level:
            log_data["level"] = record.levelname

        if self.include_logger:
            log_data["logger"] = record.name

        log_data["message"] = record.getMessage()

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        if hasattr(record, "extra") and record.extra:
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Includes context fields inline for easy reading.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = []
        if context.cache_key:
            context_parts.append(f"cache={context.cache_key}")
        if context.sync_id:
            context_parts.append(f"sync={context.sync_id}")
        if context.quest_id:
            context_parts.append(f"quest={context.quest_id}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        message = record.getMessage()

        extra_str = ""
        if hasattr(record, "extra") and record.extra:
            extra_str = f" {record.extra}"

        result = f"{timestamp} {level} {record.name}{context_str}: {message}{extra_str}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes the current LogContext in all log messages.
    """

    def process(self, msg, kwargs):
        """Process log record to include context."""
        context = get_current_context()

        extra = dict(kwargs.get("extra", {}))
        extra.update(context.to_dict())
        if self.extra and self.extra.get("component"):
            extra.setdefault("component", self.extra["component"])

        # Stored under one attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "services.sync_service")
        component: Optional component type for categorization
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(
        base_logger,
        {"component": component.value if component else None},
    )


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (for production)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter = StructuredFormatter(include_context=True)
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named checkpoint.

    Checkpoints mark sync milestones (sync_started, sync_ingested,
    cache_written) so one refresh can be followed end to end.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    checkpoint_data = {
        "checkpoint": name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    context = get_current_context()
    if context.cache_key:
        checkpoint_data["cache_key"] = context.cache_key
    if context.sync_id:
        checkpoint_data["sync_id"] = context.sync_id
    if context.quest_id:
        checkpoint_data["quest_id"] = context.quest_id

    if data:
        checkpoint_data["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint_data})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
