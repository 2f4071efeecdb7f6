"""Configuration dataclasses for a single reporting run."""

from dataclasses import dataclass, field
from typing import Optional, Union

DEFAULT_CONNECT_HOSTNAME = "https://jira-ci.harness.io"


@dataclass(frozen=True)
class CommitInfo:
    """Commit details of the triggering event."""

    message: str = ""
    branch: str = ""
    source: str = ""
    target: str = ""
    rev: str = ""
    link: str = ""
    author: str = ""


@dataclass(frozen=True)
class BuildInfo:
    """Build details of the triggering event."""

    number: int = 0
    status: str = ""
    link: str = ""


@dataclass(frozen=True)
class OAuthCredentials:
    """Atlassian OAuth 2.0 client-credentials pair."""

    client_id: str
    client_secret: str = field(repr=False)

    scheme = "oauth"


@dataclass(frozen=True)
class ConnectCredentials:
    """Connect key exchanged for a JWT at the connect hostname."""

    connect_key: str = field(repr=False)
    hostname: str = DEFAULT_CONNECT_HOSTNAME

    scheme = "connect"


Credentials = Union[OAuthCredentials, ConnectCredentials]


def select_credentials(
    client_id: str = "",
    client_secret: str = "",
    connect_key: str = "",
    connect_hostname: str = "",
) -> Optional[Credentials]:
    """Pick the authentication variant for a run.

    OAuth wins when both the client id and secret are set. Otherwise a
    connect key selects the Connect flow, with the hostname falling back to
    :data:`DEFAULT_CONNECT_HOSTNAME`. Returns None when neither is usable.
    """
    if client_id and client_secret:
        return OAuthCredentials(client_id=client_id, client_secret=client_secret)
    if connect_key:
        hostname = (connect_hostname or DEFAULT_CONNECT_HOSTNAME).rstrip("/")
        return ConnectCredentials(connect_key=connect_key, hostname=hostname)
    return None


@dataclass(frozen=True)
class EventContext:
    """Immutable description of the CI event being reported."""

    project: str = ""
    pipeline: str = ""
    instance: str = ""
    cloud_id: str = ""
    commit: CommitInfo = field(default_factory=CommitInfo)
    build: BuildInfo = field(default_factory=BuildInfo)
    pull_request_title: str = ""
    tag: str = ""
    semver: str = ""
    deploy_target: str = ""
    state: str = ""
    environment_name: str = ""
    environment_id: str = ""
    environment_type: str = ""
    link: str = ""
    issue_keys: tuple[str, ...] = ()
    credentials: Optional[Credentials] = None
    card_path: str = ""
    log_level: str = ""
    timeout: Optional[float] = None

    @property
    def client_id(self) -> str:
        if isinstance(self.credentials, OAuthCredentials):
            return self.credentials.client_id
        return ""
