"""Bulk report bodies for the Jira deployments and builds APIs."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from ...config.schema import EventContext
from ...core.normalize import NormalizedReport

DEPLOYMENT = "deployment"
BUILD = "build"


def _timestamp(moment: Optional[datetime]) -> str:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat()


@dataclass(frozen=True)
class DeploymentPayload:
    """``{"deployments": [...]}`` body for the deployments bulk API."""

    deployments: list[dict[str, Any]]
    kind: str = field(default=DEPLOYMENT, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"deployments": self.deployments}


@dataclass(frozen=True)
class BuildPayload:
    """``{"builds": [...]}`` body for the builds bulk API."""

    builds: list[dict[str, Any]]
    kind: str = field(default=BUILD, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"builds": self.builds}


BulkReportPayload = Union[DeploymentPayload, BuildPayload]


def build_deployment_payload(
    context: EventContext, report: NormalizedReport, now: Optional[datetime] = None
) -> DeploymentPayload:
    """Assemble a single-entry deployment report."""
    deployment = {
        "deploymentSequenceNumber": context.build.number,
        "updateSequenceNumber": context.build.number,
        "associations": [
            {
                "associationType": "issueIdOrKeys",
                "values": list(report.issue_keys),
            }
        ],
        "displayName": str(context.build.number),
        "url": report.link,
        "description": report.description,
        "lastUpdated": _timestamp(now),
        "state": report.state,
        "pipeline": {
            "id": context.pipeline,
            "displayName": context.pipeline,
            "url": report.link,
        },
        "environment": {
            "id": report.environment_id,
            "displayName": report.environment,
            "type": report.environment_type,
        },
    }
    return DeploymentPayload(deployments=[deployment])


def build_references(context: EventContext) -> list[dict[str, Any]]:
    """Commit and branch references of a build, empty when nothing is known."""
    commit = context.commit
    reference: dict[str, Any] = {}
    if commit.rev or commit.link:
        reference["commit"] = {"id": commit.rev, "repositoryUri": commit.link}
    if commit.branch and commit.link:
        reference["ref"] = {
            "name": commit.branch,
            "uri": f"{commit.link}/refs/{commit.branch}",
        }
    return [reference] if reference else []


def build_build_payload(
    context: EventContext, report: NormalizedReport, now: Optional[datetime] = None
) -> BuildPayload:
    """Assemble a single-entry build report; ``references`` only when non-empty."""
    build: dict[str, Any] = {
        "buildNumber": context.build.number,
        "description": report.description,
        "displayName": context.pipeline,
        "url": report.link,
        "lastUpdated": _timestamp(now),
        "pipelineId": context.pipeline,
        "issueKeys": list(report.issue_keys),
        "state": report.state,
        "updateSequenceNumber": context.build.number,
    }
    references = build_references(context)
    if references:
        build["references"] = references
    return BuildPayload(builds=[build])


def select_payload(
    context: EventContext,
    report: NormalizedReport,
    scheme: str,
    now: Optional[datetime] = None,
) -> BulkReportPayload:
    """Pick the payload for the auth scheme.

    OAuth always reports a deployment. Connect reports a deployment when an
    environment name was configured and a build otherwise.
    """
    if scheme == "connect" and not context.environment_name:
        return build_build_payload(context, report, now)
    return build_deployment_payload(context, report, now)
