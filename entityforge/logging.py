# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with generation context
# PURPOSE: Attach entity/column/dialect/artifact context to every log record
#          emitted while building entities and rendering artifacts
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ComponentType, LogContext, get_logger, configure_logging,
#          log_context, get_current_context, log_checkpoint
# ============================================================================
"""
Structured Logging

Every builder and generator module logs through get_logger(__name__, component).
Context is pushed with log_context() as work narrows from a project to an
entity, one artifact, and one column; the innermost context is attached to each
record under `record.extra` and rendered by both formatters.

Usage:
    from entityforge.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.DDL)

    with log_context(entity="User", dialect="postgres", artifact="ddl"):
        with log_context(column="email"):
            logger.debug("Rendering column")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union


class ComponentType(str, Enum):
    """Which part of the generation pipeline emitted a record."""
    BUILDER = "builder"
    DDL = "ddl"
    VALIDATION = "validation"
    OPENAPI = "openapi"
    PIPELINE = "pipeline"


# Context fields shown inline by HumanFormatter and copied into checkpoints
LOCATION_FIELDS = ("entity", "column", "dialect", "artifact")


@dataclass(frozen=True)
class LogContext:
    """
    Generation context in effect for the current thread.

    entity:    entity being built or rendered
    column:    column being checked or rendered
    dialect:   DDL dialect of the run
    artifact:  ddl | validation | component | document
    operation: build | generate | build_project_artifacts
    """
    entity: Optional[str] = None
    column: Optional[str] = None
    dialect: Optional[str] = None
    artifact: Optional[str] = None
    operation: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def merged(self, **changes: Any) -> "LogContext":
        """Child context: given fields override, extra dicts are combined."""
        extra = {**self.extra, **changes.pop("extra", {})}
        return replace(self, extra=extra, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields plus extra, flattened."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_EMPTY_CONTEXT = LogContext()
_local = threading.local()


def _stack() -> List[LogContext]:
    stack = getattr(_local, "stack", None)
    if stack is None:
        stack = _local.stack = []
    return stack


def get_current_context() -> LogContext:
    """Innermost context of this thread (empty outside log_context)."""
    stack = _stack()
    return stack[-1] if stack else _EMPTY_CONTEXT


@contextmanager
def log_context(**changes: Any) -> Iterator[LogContext]:
    """
    Narrow the logging context for the duration of a block.

    Unset fields are inherited from the enclosing context. Contexts are
    thread-local: worker threads start from an empty context.

    Raises:
        TypeError: unknown context field
    """
    context = get_current_context().merged(**changes)
    stack = _stack()
    stack.append(context)
    try:
        yield context
    finally:
        stack.pop()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _record_data(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    return getattr(record, "extra", None) or None


class StructuredFormatter(logging.Formatter):
    """JSON lines for log aggregation."""

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

    def _payload(self, record: logging.LogRecord) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.include_timestamp:
            payload["timestamp"] = _utc_now().strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        if self.include_level:
            payload["level"] = record.levelname
        if self.include_logger:
            payload["logger"] = record.name
        payload["message"] = record.getMessage()

        context = get_current_context().to_dict() if self.include_context else {}
        if context:
            payload["context"] = context

        data = _record_data(record)
        if data:
            payload["data"] = data
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return payload

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._payload(record), default=str)


class HumanFormatter(logging.Formatter):
    """
    One line per record for local runs:

        2026-10-18 09:00:00 DEBUG    entityforge.schema.sql_generator [entity=User, dialect=postgres]: ...
    """

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        location = ", ".join(
            f"{name}={getattr(context, name)}"
            for name in LOCATION_FIELDS
            if getattr(context, name) is not None
        )

        line = (
            f"{_utc_now():%Y-%m-%d %H:%M:%S} {record.levelname:<8} {record.name}"
            f"{f' [{location}]' if location else ''}: {record.getMessage()}"
        )
        data = _record_data(record)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that copies the current context and the component onto each
    record as `record.extra`.
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.get("extra", {}))
        data.update(get_current_context().to_dict())
        component = (self.extra or {}).get("component")
        if component:
            data.setdefault("component", component)
        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Context-aware logger for a module.

    Args:
        name: Logger name, normally __name__
        component: Pipeline component recorded on every record
    """
    return ContextLogger(
        logging.getLogger(name),
        {"component": component.value if component is not None else None},
    )


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of human-readable output
            (also selected by LOG_FORMAT=json)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    use_json = json_output or os.getenv("LOG_FORMAT", "").lower() == "json"
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if use_json else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
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
    Log a named checkpoint ("artifacts_generated", ...) at INFO.

    The record's extra holds the checkpoint name, the location fields of the
    current context, and `data` when given.
    """
    if logger is None:
        logger = logging.getLogger("entityforge.checkpoint")

    context = get_current_context()
    checkpoint: Dict[str, Any] = {"checkpoint": name}
    for key in LOCATION_FIELDS:
        value = getattr(context, key)
        if value is not None:
            checkpoint[key] = value
    if data:
        checkpoint["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint})


__all__ = [
    "ComponentType",
    "LogContext",
    "LOCATION_FIELDS",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
