"""Normalization of CI vocabularies into Jira's deployment/build enums.

CI systems report states and environments in their own words (``killed``,
``errored``, ``prod``, ...). Jira only accepts a closed set of values, so
every outbound state and environment passes through these mappings.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config.schema import EventContext
from ..utils.log_context import FieldLogger

logger = logging.getLogger(__name__)

STATES = ("pending", "in_progress", "cancelled", "failed", "rolled_back", "successful", "unknown")
ENVIRONMENTS = ("production", "staging", "development", "testing", "unmapped")

DEFAULT_ENVIRONMENT = "production"
MAX_DESCRIPTION_LENGTH = 255
ELLIPSIS = "..."


def to_state_enum(value: str) -> str:
    """Map an upstream state to Jira's state enum.

    Args:
        value: State reported by the CI system (any case).

    Returns:
        One of :data:`STATES`; ``unknown`` for unrecognized input.
    """
    state = value.lower()
    if state in ["pending", "waiting"]:
        return "pending"
    elif state in ["running", "in_progress"]:
        return "in_progress"
    elif state in ["cancelled", "killed", "stopped", "terminated"]:
        return "cancelled"
    elif state in ["failed", "failure", "error", "errored"]:
        return "failed"
    elif state in ["rollback", "rolled_back"]:
        return "rolled_back"
    elif state in ["success", "successful"]:
        return "successful"
    return "unknown"


def to_environment_enum(value: str) -> str:
    """Map an upstream environment name to Jira's environment type enum.

    Returns:
        One of :data:`ENVIRONMENTS`; ``unmapped`` for unrecognized input.
    """
    environment = value.lower()
    if environment in ["prod", "production"]:
        return "production"
    elif environment in ["stage", "staging"]:
        return "staging"
    elif environment in ["dev", "development"]:
        return "development"
    elif environment in ["testing", "test"]:
        return "testing"
    return "unmapped"


def resolve_state(context: EventContext) -> str:
    """Explicit state override, else the build status, normalized."""
    if context.state:
        return to_state_enum(context.state)
    return to_state_enum(context.build.status)


def resolve_environment(context: EventContext) -> str:
    """Explicit environment name, else the deploy target, else production."""
    if context.environment_name:
        return to_environment_enum(context.environment_name)
    if context.deploy_target:
        return to_environment_enum(context.deploy_target)
    return DEFAULT_ENVIRONMENT


def resolve_environment_id(context: EventContext) -> str:
    """Explicit environment id, else the normalized environment."""
    if context.environment_id:
        return context.environment_id
    return resolve_environment(context)


def resolve_environment_type(context: EventContext) -> str:
    """Explicit environment type, else empty.

    Unlike the environment id this does not fall back to the normalized
    environment.
    """
    if context.environment_type:
        return context.environment_type
    return ""


def resolve_version(context: EventContext) -> str:
    """Semantic version, else tag name, else commit revision."""
    if context.semver:
        return context.semver
    if context.tag:
        return context.tag
    return context.commit.rev


def resolve_link(context: EventContext) -> str:
    """Deep link to the build, falling back to the commit in version control."""
    if context.link:
        return context.link
    if context.build.link:
        return context.build.link
    return context.commit.link


def truncate_description(text: str, log: Optional[logging.LoggerAdapter] = None) -> str:
    """Fit ``text`` into Jira's 255 character description limit."""
    if len(text) <= MAX_DESCRIPTION_LENGTH:
        return text
    (log or logger).warning("Commit message exceeds 255 characters; truncating to fit.")
    return text[: MAX_DESCRIPTION_LENGTH - len(ELLIPSIS)] + ELLIPSIS


@dataclass(frozen=True)
class NormalizedReport:
    """Event fields after normalization, ready for payload construction."""

    issue_keys: tuple[str, ...]
    state: str
    environment: str
    environment_id: str
    environment_type: str
    version: str
    link: str
    description: str


def normalize(
    context: EventContext, issue_keys: list[str], log: Optional[FieldLogger] = None
) -> NormalizedReport:
    """Derive the :class:`NormalizedReport` for an event."""
    return NormalizedReport(
        issue_keys=tuple(issue_keys),
        state=resolve_state(context),
        environment=resolve_environment(context),
        environment_id=resolve_environment_id(context),
        environment_type=resolve_environment_type(context),
        version=resolve_version(context),
        link=resolve_link(context),
        description=truncate_description(context.commit.message, log),
    )
