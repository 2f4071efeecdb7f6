"""Shared result dataclasses for the reporting pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field

from .integrations.atlassian.auth import AuthToken
from .reports.card import Card


@dataclass(frozen=True)
class ResolvedContext:
    """Connectivity derived from the event context.

    Kept apart from the EventContext so the input is never written back to.
    """

    instance: str
    token: AuthToken
    cloud_id: str = ""


@dataclass
class RunResult:
    """Outcome of a successful reporting run."""

    issue_keys: list[str] = field(default_factory=list)
    scheme: str = ""
    payload_kind: str = ""
    state: str = ""
    environment: str = ""
    card: Card | None = None
