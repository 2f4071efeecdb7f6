"""Bulk deployment/build reporting against Jira."""

from typing import Optional

from requests.exceptions import RequestException

from ...errors import ReportRejected
from .auth import AuthToken
from .http import AtlassianHTTP, bearer_headers, format_network_error, is_success
from .payloads import BUILD, DEPLOYMENT, BulkReportPayload

CLOUD_DEPLOYMENTS_URL = "https://api.atlassian.com/jira/deployments/0.1/cloud/{cloud_id}/bulk"
CONNECT_DEPLOYMENTS_URL = "https://{instance}.atlassian.net/rest/deployments/0.1/bulk"
CONNECT_BUILDS_URL = "https://{instance}.atlassian.net/rest/builds/0.1/bulk"
FROM_HEADER = "noreply@localhost"


class ReportingClient:
    """Send one bulk report per run to the endpoint matching the auth flow.

    OAuth tokens report through the Cloud REST API keyed by cloud id;
    Connect tokens report through the site's own REST API.
    """

    def __init__(self, http: AtlassianHTTP, token: AuthToken) -> None:
        self.http = http
        self.token = token

    def endpoint(self, kind: str, cloud_id: Optional[str] = None, instance: Optional[str] = None) -> str:
        """Resolve the bulk endpoint for {auth scheme x payload kind}."""
        if self.token.scheme == "oauth":
            if kind != DEPLOYMENT:
                raise ValueError("The Cloud API flow only reports deployments")
            return CLOUD_DEPLOYMENTS_URL.format(cloud_id=cloud_id)
        if kind == DEPLOYMENT:
            return CONNECT_DEPLOYMENTS_URL.format(instance=instance)
        if kind == BUILD:
            return CONNECT_BUILDS_URL.format(instance=instance)
        raise ValueError(f"Unknown payload kind: {kind}")

    def send(
        self,
        payload: BulkReportPayload,
        cloud_id: Optional[str] = None,
        instance: Optional[str] = None,
    ) -> None:
        """POST ``payload`` once.

        Raises:
            ReportRejected: On transport errors or non-2xx responses.
        """
        url = self.endpoint(payload.kind, cloud_id=cloud_id, instance=instance)
        headers = bearer_headers(self.token.value)
        headers["From"] = FROM_HEADER

        try:
            response = self.http.request("POST", url, headers=headers, json=payload.to_dict())
        except RequestException as e:
            raise ReportRejected(payload.kind, format_network_error(e)) from e

        self.http.trace(response)
        if not is_success(response):
            raise ReportRejected(
                payload.kind, f"errorCode {response.status_code}", status_code=response.status_code
            )
        self.http.log.debug(f"{payload.kind} accepted with status {response.status_code}")
