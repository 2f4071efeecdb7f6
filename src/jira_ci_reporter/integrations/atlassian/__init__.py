"""Atlassian Jira Cloud integration: tenants, tokens, guard and bulk reports."""

from .auth import AuthToken, acquire_token
from .client import ReportingClient
from .guard import ensure_issue_open, ensure_issues_open
from .http import AtlassianHTTP, Deadline
from .instance import Tenant, extract_instance_name, resolve_cloud_id
from .payloads import (
    BuildPayload,
    DeploymentPayload,
    build_build_payload,
    build_deployment_payload,
    select_payload,
)

__all__ = [
    "AtlassianHTTP",
    "AuthToken",
    "BuildPayload",
    "Deadline",
    "DeploymentPayload",
    "ReportingClient",
    "Tenant",
    "acquire_token",
    "build_build_payload",
    "build_deployment_payload",
    "ensure_issue_open",
    "ensure_issues_open",
    "extract_instance_name",
    "resolve_cloud_id",
    "select_payload",
]
