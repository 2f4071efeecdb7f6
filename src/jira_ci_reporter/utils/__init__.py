"""Utility modules for the Jira CI reporter."""

from .debug import is_debug_mode
from .log_context import FieldLogger, get_field_logger

__all__ = [
    "is_debug_mode",
    "FieldLogger",
    "get_field_logger",
]
