"""Jira issue key extraction from commit and pull request details."""

import re
from collections.abc import Iterable
from typing import Optional

from ..config.schema import EventContext
from ..errors import IssueNotFound
from ..utils.log_context import FieldLogger, get_field_logger


class IssueKeyExtractor:
    """Extract ``PROJECT-123`` style issue keys for a single Jira project.

    The key pattern is scoped to the configured project and is case
    sensitive, matching how Jira renders issue keys.
    """

    def __init__(self, project: str) -> None:
        """Initialize with the project key that scopes the pattern.

        Args:
            project: Jira project key, e.g. ``TEST``. An empty key matches nothing.
        """
        self.project = project
        self.pattern: Optional[re.Pattern[str]] = (
            re.compile(re.escape(project) + r"-\d+") if project else None
        )

    @staticmethod
    def join_sources(sources: Iterable[str]) -> str:
        """Concatenate text sources space-separated with a trailing newline."""
        return " ".join(sources) + "\n"

    @staticmethod
    def context_sources(context: EventContext) -> list[str]:
        """Text sources searched for issue keys, in priority order."""
        return [
            context.commit.message,
            context.pull_request_title,
            context.commit.source,
            context.commit.target,
            context.commit.branch,
        ]

    def extract_issue(self, sources: Iterable[str]) -> str:
        """Return the first issue key found across ``sources``, or ``""``."""
        if self.pattern is None:
            return ""
        match = self.pattern.search(self.join_sources(sources))
        return match.group(0) if match else ""

    def extract_issues(self, sources: Iterable[str]) -> list[str]:
        """Return every non-overlapping issue key in first-occurrence order.

        Duplicates are preserved.
        """
        if self.pattern is None:
            return []
        return self.pattern.findall(self.join_sources(sources))


def extract_issue(context: EventContext) -> str:
    """Scalar variant: the first issue key in the event's commit details."""
    extractor = IssueKeyExtractor(context.project)
    return extractor.extract_issue(extractor.context_sources(context))


def extract_issues(context: EventContext) -> list[str]:
    """Multi-key variant: all issue keys in the event's commit details."""
    extractor = IssueKeyExtractor(context.project)
    return extractor.extract_issues(extractor.context_sources(context))


def resolve_issue_keys(context: EventContext, log: Optional[FieldLogger] = None) -> list[str]:
    """Determine the issue keys to report against.

    Explicitly configured keys replace extraction entirely.

    Raises:
        IssueNotFound: If no explicit keys were given and none were extracted.
    """
    log = log or get_field_logger(__name__)
    if context.issue_keys:
        log.debug(f"Provided issue keys are: {', '.join(context.issue_keys)}")
        return list(context.issue_keys)

    issues = extract_issues(context)
    if not issues:
        log.debug("cannot find issue number")
        raise IssueNotFound(context.project)
    return issues
