"""Request context for structured logging.

Provides context propagation using contextvars, enabling automatic
injection of the in-flight compression request id and input path into
log records.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_input_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_path", default=None
)


def set_request_context(request_id: str, input_path: Path | str | None = None) -> None:
    """Set the current request context."""
    _request_id.set(request_id)
    _input_path.set(str(input_path) if input_path is not None else None)


def clear_request_context() -> None:
    """Clear the current request context."""
    _request_id.set(None)
    _input_path.set(None)


@contextmanager
def request_context(
    request_id: str,
    input_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager for a compression request.

    Sets the request context on entry and restores the previous one on exit.

    Example:
        with request_context("a1b2c3", "/videos/clip.mov"):
            logger.info("Probing")  # Tagged with [a1b2c3]
    """
    old_request_id = _request_id.get()
    old_input_path = _input_path.get()
    try:
        set_request_context(request_id, input_path)
        yield
    finally:
        _request_id.set(old_request_id)
        _input_path.set(old_input_path)


def get_request_context() -> tuple[str | None, str | None]:
    """Get current request context as (request_id, input_path)."""
    return _request_id.get(), _input_path.get()


class RequestContextFilter(logging.Filter):
    """Logging filter that injects request context into log records.

    Adds request_id and input_path attributes for JSON output, and a compact
    request_tag like ``[a1b2c3] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        request_id, input_path = get_request_context()

        record.request_id = request_id
        record.input_path = input_path
        record.request_tag = f"[{request_id}] " if request_id else ""

        return True
