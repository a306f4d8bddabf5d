"""Logging setup: structlog in front, stdlib ``logging`` underneath.

Library modules log with ``logging.getLogger(__name__)``; the HTTP layer
uses structlog's bound loggers for key/value events. Both end up on one
root handler and go through the same processor chain, so every line is
rendered the same way (JSON in production, coloured console locally) and
carries the current request's ``trace_id``.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

import structlog

_trace_id: ContextVar[str] = ContextVar("contacts_trace_id", default="")


def get_trace_id() -> str:
    """Current trace id; one is minted if the context has none yet."""
    current = _trace_id.get()
    if not current:
        current = new_trace_id()
    return current


def set_trace_id(trace_id: str) -> None:
    _trace_id.set(trace_id)


def new_trace_id() -> str:
    trace_id = uuid.uuid4().hex
    _trace_id.set(trace_id)
    return trace_id


def _inject_trace_id(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("trace_id", get_trace_id())
    return event_dict


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        _inject_trace_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(level: str = "INFO", format: str = "json") -> None:
    """Install the root handler and configure structlog.

    Args:
        level: Root level name, e.g. ``"DEBUG"``. Unknown names fall back
            to INFO.
        format: ``"json"`` or ``"console"``.
    """
    pre_chain = _pre_chain()
    renderer: Any
    if format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
