"""Debug verbosity utilities.

Centralises the check for the plugin's verbose log levels so that every
module uses the same authoritative helper instead of duplicating the
case-insensitive comparison.
"""

import os
from typing import Optional

DEBUG_LEVELS = ("debug", "trace")


def is_debug_mode(level: Optional[str] = None) -> bool:
    """Return True when the log level asks for debug or trace output.

    Args:
        level: Configured log level. When None, PLUGIN_LOG_LEVEL is read
            from the environment.

    Returns:
        True if verbose diagnostics should be captured, False otherwise.
    """
    if level is None:
        level = os.getenv("PLUGIN_LOG_LEVEL", "")
    return level.strip().lower() in DEBUG_LEVELS
