"""Jira CI reporter - report CI deployments and builds against Jira issues."""

from ._version import __version__
from .config import ConfigLoader, EventContext
from .errors import ReporterError
from .pipeline import run_report

__all__ = ["__version__", "ConfigLoader", "EventContext", "ReporterError", "run_report"]
