"""Jira Cloud site name and tenant resolution."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from requests.exceptions import RequestException

from ...errors import MissingCloudId, TenantLookupFailed
from ...utils.log_context import FieldLogger, get_field_logger
from .http import AtlassianHTTP, format_network_error, is_success

TENANT_INFO_URL = "https://{instance}.atlassian.net/_edge/tenant_info"


@dataclass(frozen=True)
class Tenant:
    """Jira Cloud tenant details."""

    cloud_id: str


def extract_instance_name(raw: str, log: Optional[FieldLogger] = None) -> str:
    """Extract the site name from a URL, hostname or bare name.

    ``https://acme.atlassian.net`` and ``acme.atlassian.net`` both yield
    ``acme``; a bare ``acme`` is returned unchanged. A URL that cannot be
    parsed is treated as a bare hostname.
    """
    if "://" in raw:
        try:
            hostname = urlparse(raw).hostname or ""
        except ValueError as e:
            (log or get_field_logger(__name__)).with_error(e).error(f"Error parsing URL instance={raw}")
        else:
            return hostname.split(".")[0]
    return raw.split(".")[0]


def lookup_tenant(http: AtlassianHTTP, instance: str) -> Tenant:
    """Fetch the tenant info of a Jira Cloud site.

    Raises:
        TenantLookupFailed: On transport errors, non-2xx responses or a
            response without a cloud id.
    """
    url = TENANT_INFO_URL.format(instance=instance)
    try:
        response = http.request("GET", url, headers={"Accept": "application/json"})
    except RequestException as e:
        raise TenantLookupFailed(instance, format_network_error(e)) from e

    if not is_success(response):
        raise TenantLookupFailed(instance, f"errorCode {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise TenantLookupFailed(instance, f"invalid tenant info response: {e}") from e

    cloud_id = data.get("cloudId") if isinstance(data, dict) else None
    if not cloud_id:
        raise TenantLookupFailed(instance, "tenant info response has no cloudId")
    return Tenant(cloud_id=str(cloud_id))


def resolve_cloud_id(http: AtlassianHTTP, instance_name: str, supplied_cloud_id: Optional[str]) -> str:
    """Return the cloud id to report against.

    A named instance is always looked up, taking precedence over a supplied
    cloud id.

    Raises:
        TenantLookupFailed: If the instance lookup fails.
        MissingCloudId: If neither an instance name nor a cloud id is set.
    """
    if instance_name:
        tenant = lookup_tenant(http, instance_name)
        http.log.debug(f"Resolved cloud id {tenant.cloud_id} for instance {instance_name}")
        return tenant.cloud_id
    if not supplied_cloud_id:
        raise MissingCloudId()
    return supplied_cloud_id
