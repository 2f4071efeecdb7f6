"""Core normalization logic."""

from .normalize import (
    ENVIRONMENTS,
    STATES,
    NormalizedReport,
    normalize,
    to_environment_enum,
    to_state_enum,
)

__all__ = [
    "ENVIRONMENTS",
    "STATES",
    "NormalizedReport",
    "normalize",
    "to_environment_enum",
    "to_state_enum",
]
