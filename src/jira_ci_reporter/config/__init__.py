"""Configuration loading for the Jira CI reporter."""

from .loader import ConfigLoader
from .schema import (
    DEFAULT_CONNECT_HOSTNAME,
    BuildInfo,
    CommitInfo,
    ConnectCredentials,
    Credentials,
    EventContext,
    OAuthCredentials,
    select_credentials,
)

__all__ = [
    "ConfigLoader",
    "DEFAULT_CONNECT_HOSTNAME",
    "BuildInfo",
    "CommitInfo",
    "ConnectCredentials",
    "Credentials",
    "EventContext",
    "OAuthCredentials",
    "select_credentials",
]
