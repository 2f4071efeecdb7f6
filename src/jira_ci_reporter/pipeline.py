"""Orchestration of a single reporting run.

The run proceeds strictly in sequence, each step depending on the previous:

  1. extract issue keys and normalize the event (no network)
  2. check that credentials were supplied (no network)
  3. resolve the cloud id (OAuth flow only) and obtain a bearer token
  4. refuse closed issues (OAuth flow only)
  5. send one bulk deployment or build report
  6. write the status card
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, TextIO

from .config.schema import Credentials, EventContext, OAuthCredentials
from .core.normalize import normalize
from .errors import CardWriteFailed, MissingCredentials, ReportRejected
from .extractors.tickets import resolve_issue_keys
from .integrations.atlassian.auth import acquire_token
from .integrations.atlassian.client import ReportingClient
from .integrations.atlassian.guard import ensure_issues_open
from .integrations.atlassian.http import AtlassianHTTP, Deadline
from .integrations.atlassian.instance import extract_instance_name, resolve_cloud_id
from .integrations.atlassian.payloads import select_payload
from .pipeline_types import ResolvedContext, RunResult
from .reports.card import Card, browse_links, write_card
from .utils.debug import is_debug_mode
from .utils.log_context import FieldLogger

logger = logging.getLogger(__name__)


def _resolve_connectivity(
    context: EventContext,
    credentials: Credentials,
    http: AtlassianHTTP,
    instance_name: str,
    issues: list[str],
) -> ResolvedContext:
    if isinstance(credentials, OAuthCredentials):
        cloud_id = resolve_cloud_id(http, instance_name, context.cloud_id)
        token = acquire_token(http, credentials)
        ensure_issues_open(http, token, cloud_id, issues)
        return ResolvedContext(instance=instance_name, token=token, cloud_id=cloud_id)

    token = acquire_token(http, credentials)
    return ResolvedContext(instance=instance_name, token=token)



def run_report(
    context: EventContext,
    http: Optional[AtlassianHTTP] = None,
    log: Optional[FieldLogger] = None,
    deadline: Optional[Deadline] = None,
    now: Optional[datetime] = None,
    streams: Optional[dict[str, TextIO]] = None,
) -> RunResult:
    """Report the event to Jira and write the status card.

    Args:
        context: Event being reported.
        http: Transport to use; built from the context when omitted.
        log: Logger carrying run fields; derived from the module logger when omitted.
        deadline: Cancellation/timeout control when ``http`` is built here.
        now: Timestamp for ``lastUpdated``; defaults to the current time.
        streams: Stream overrides for the card's stdout/stderr targets.

    Returns:
        RunResult describing what was reported.

    Raises:
        ReporterError: Any failure; nothing is retried.
    """
    log = (log or FieldLogger(logger)).with_fields(
        client_id=context.client_id,
        cloud_id=context.cloud_id,
        project_id=context.project,
        pipeline=context.pipeline,
    )
    instance_name = extract_instance_name(context.instance, log)
    log = log.with_fields(instance=instance_name)

    issues = resolve_issue_keys(context, log)
    log = log.with_fields(issues=",".join(issues))
    log.debug("successfully extracted all issues")

    report = normalize(context, issues, log)
    log = log.with_fields(
        environment=report.environment,
        state=report.state,
        environment_type=report.environment_type,
        environment_id=report.environment_id,
    )

    if context.credentials is None:
        log.debug(
            "client id and secret are empty. specify the client id and secret or specify connect key"
        )
        raise MissingCredentials()

    if http is None:
        http = AtlassianHTTP(
            deadline=deadline or Deadline(context.timeout),
            debug=is_debug_mode(context.log_level),
            log=log,
        )

    resolved = _resolve_connectivity(context, context.credentials, http, instance_name, issues)

    payload = select_payload(context, report, resolved.token.scheme, now)
    log.info(f"creating {payload.kind}")
    try:
        ReportingClient(http, resolved.token).send(
            payload, cloud_id=resolved.cloud_id, instance=resolved.instance
        )
    except ReportRejected as e:
        log.with_error(e).error(f"cannot create {payload.kind}")
        raise

    card = Card(
        pipeline=context.pipeline,
        instance=instance_name,
        project=context.project,
        state=report.state,
        version=report.version,
        environment=report.environment,
        url=browse_links(instance_name, issues) if instance_name else [],
    )
    try:
        write_card(context.card_path, card, streams, log)
    except CardWriteFailed as e:
        log.with_error(e).error("Could not create adaptive card")
        raise

    return RunResult(
        issue_keys=issues,
        scheme=resolved.token.scheme,
        payload_kind=payload.kind,
        state=report.state,
        environment=report.environment,
        card=card,
    )
