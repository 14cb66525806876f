# src/logging/context.py — v2
"""Contextual logging support: attach request_id, entry_point and signal to records.

Context variables are task-local, so concurrent ranking requests running
on one event loop never see each other's values.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_entry_point: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "entry_point", default=None
)
_signal: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "signal", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    request_id: str | None = None
    entry_point: str | None = None
    signal: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        entry_point=_entry_point.get(),
        signal=_signal.get(),
    )


def set_request_context(request_id: str) -> None:
    """Set request-level context (called once per ranking request)."""
    _request_id.set(request_id)


def set_entry_point_context(entry_point: str, signal: str | None = None) -> None:
    """Set entry-point context (seeds / filter) and optionally the signal."""
    _entry_point.set(entry_point)
    _signal.set(signal)


@contextmanager
def signal_context(signal: str) -> Iterator[None]:
    """Tag records emitted inside the block with a signal name."""
    token = _signal.set(signal)
    try:
        yield
    finally:
        _signal.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _entry_point.set(None)
    _signal.set(None)
