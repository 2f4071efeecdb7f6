"""Refuse to report deployments against closed issues."""

from collections.abc import Iterable
from typing import Optional
from urllib.parse import quote

from requests.exceptions import RequestException

from ...errors import IssueClosed, IssueLookupFailed
from .auth import AuthToken
from .http import AtlassianHTTP, bearer_headers, format_network_error, is_success

CLOUD_ISSUE_URL = "https://api.atlassian.com/ex/jira/{cloud_id}/rest/api/3/issue/{issue}"
CLOSED_STATUS = "closed"


def fetch_issue_status(http: AtlassianHTTP, token: AuthToken, cloud_id: str, issue_key: str) -> Optional[str]:
    """Return the issue's status name, or None when the field is missing.

    Raises:
        IssueLookupFailed: On transport errors or non-2xx responses.
    """
    url = CLOUD_ISSUE_URL.format(cloud_id=cloud_id, issue=quote(issue_key))
    try:
        response = http.request("GET", url, headers=bearer_headers(token.value), params={"fields": "status"})
    except RequestException as e:
        raise IssueLookupFailed(issue_key, format_network_error(e)) from e

    if not is_success(response):
        raise IssueLookupFailed(
            issue_key, f"errorCode {response.status_code}", status_code=response.status_code
        )

    try:
        data = response.json()
    except ValueError as e:
        raise IssueLookupFailed(issue_key, f"invalid issue response: {e}") from e

    fields = data.get("fields") if isinstance(data, dict) else None
    if not isinstance(fields, dict):
        fields = {}
    status = fields.get("status") or {}
    name = status.get("name") if isinstance(status, dict) else None
    return name if isinstance(name, str) and name else None


def is_closed(status: Optional[str]) -> bool:
    """Closed when the status is missing or named ``closed`` in any case."""
    return status is None or status.lower() == CLOSED_STATUS


def ensure_issue_open(http: AtlassianHTTP, token: AuthToken, cloud_id: str, issue_key: str) -> None:
    """Veto reporting against a closed issue.

    Raises:
        IssueClosed: If the issue is closed or its status is unknown.
        IssueLookupFailed: If the status cannot be fetched.
    """
    status = fetch_issue_status(http, token, cloud_id, issue_key)
    if is_closed(status):
        raise IssueClosed(issue_key, status)
    http.log.debug(f"Issue {issue_key} is open (status: {status})")


def ensure_issues_open(http: AtlassianHTTP, token: AuthToken, cloud_id: str, issue_keys: Iterable[str]) -> None:
    """Apply :func:`ensure_issue_open` to every issue of the report."""
    for issue_key in issue_keys:
        ensure_issue_open(http, token, cloud_id, issue_key)
