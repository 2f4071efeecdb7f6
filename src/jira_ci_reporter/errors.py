"""Exception hierarchy for the Jira CI reporter.

Every failure that ends a run derives from :class:`ReporterError` so the CLI
can map it to a non-zero exit status with a single ``except`` clause.
"""

from typing import Optional


class ReporterError(Exception):
    """Base class for all errors that terminate a reporting run."""


class ConfigurationError(ReporterError):
    """Raised when plugin settings cannot be parsed."""


class MissingCredentials(ReporterError):
    """Neither an OAuth client id/secret pair nor a connect key was supplied."""

    def __init__(self) -> None:
        super().__init__(
            "No client id & secret or connect key provided. "
            "Specify PLUGIN_CLIENT_ID and PLUGIN_CLIENT_SECRET, or PLUGIN_CONNECT_KEY"
        )


class IssueNotFound(ReporterError):
    """No issue key was supplied explicitly or found in the commit details."""

    def __init__(self, project: str) -> None:
        self.project = project
        super().__init__(f"Failed to extract an issue number for project '{project}'")


class TenantLookupFailed(ReporterError):
    """The cloud id could not be resolved from the instance name."""

    def __init__(self, instance: str, reason: str) -> None:
        self.instance = instance
        super().__init__(f"Cannot get cloud id from instance '{instance}': {reason}")


class MissingCloudId(ReporterError):
    """Neither an instance name nor a cloud id was supplied."""

    def __init__(self) -> None:
        super().__init__("Cloud id is empty. Specify the cloud id or instance name")


class TokenRequestFailed(ReporterError):
    """A bearer token could not be obtained."""

    def __init__(self, scheme: str, reason: str, status_code: Optional[int] = None) -> None:
        self.scheme = scheme
        self.status_code = status_code
        super().__init__(f"Cannot create {scheme} token: {reason}")


class IssueLookupFailed(ReporterError):
    """The status of an issue could not be fetched before reporting."""

    def __init__(self, issue_key: str, reason: str, status_code: Optional[int] = None) -> None:
        self.issue_key = issue_key
        self.status_code = status_code
        super().__init__(f"Cannot look up status of issue {issue_key}: {reason}")


class IssueClosed(ReporterError):
    """The issue is closed, reporting against it is refused."""

    def __init__(self, issue_key: str, status: Optional[str]) -> None:
        self.issue_key = issue_key
        self.status = status
        shown = status if status else "<missing>"
        super().__init__(f"Issue {issue_key} is closed (status: {shown}); refusing to report")


class ReportRejected(ReporterError):
    """The bulk deployment or build report was not accepted."""

    def __init__(self, kind: str, reason: str, status_code: Optional[int] = None) -> None:
        self.kind = kind
        self.status_code = status_code
        super().__init__(f"Cannot create {kind}: {reason}")


class CardWriteFailed(ReporterError):
    """The status card could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not create adaptive card at {path}: {reason}")


class RunCancelled(ReporterError):
    """The run was cancelled or exceeded its deadline."""
