"""Structured logging module for sizefit.

Provides configurable logging with JSON format support and file rotation,
tagging records with the in-flight compression request.
"""

from sizefit.logging.config import configure_logging
from sizefit.logging.context import (
    RequestContextFilter,
    clear_request_context,
    get_request_context,
    request_context,
    set_request_context,
)
from sizefit.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "RequestContextFilter",
    "clear_request_context",
    "configure_logging",
    "get_request_context",
    "request_context",
    "set_request_context",
]
