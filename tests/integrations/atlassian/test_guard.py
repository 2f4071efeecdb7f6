"""
Tests for the closed-issue guard.
"""

import logging

import pytest

from jira_ci_reporter.errors import IssueClosed, IssueLookupFailed
from jira_ci_reporter.integrations.atlassian.auth import AuthToken
from jira_ci_reporter.integrations.atlassian.guard import (
    CLOUD_ISSUE_URL,
    ensure_issue_open,
    ensure_issues_open,
    fetch_issue_status,
    is_closed,
)
from jira_ci_reporter.integrations.atlassian.http import AtlassianHTTP
from jira_ci_reporter.utils.log_context import FieldLogger

TOKEN = AuthToken(value="tok-1", scheme="oauth")


def _issue_url(key):
    return CLOUD_ISSUE_URL.format(cloud_id="cloud-1", issue=key)


def _status_body(name):
    return {"key": "TEST-1", "fields": {"status": {"name": name}}}


class TestIsClosed:
    """Test cases for is_closed."""

    @pytest.mark.parametrize("status", ["Closed", "closed", "CLOSED", None])
    def test_closed(self, status):
        """Closed in any case, or a missing status, counts as closed."""
        assert is_closed(status)

    @pytest.mark.parametrize("status", ["Open", "In Progress", "Done", "Reopened"])
    def test_open(self, status):
        assert not is_closed(status)


class TestFetchIssueStatus:
    """Test cases for fetch_issue_status."""

    def test_fetch_status(self, transport, http, make_response):
        """Only the status field is requested, with the bearer token."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=_status_body("In Progress")))

        assert fetch_issue_status(http, TOKEN, "cloud-1", "TEST-1") == "In Progress"
        call = transport.calls[0]
        assert call["url"] == "https://api.atlassian.com/ex/jira/cloud-1/rest/api/3/issue/TEST-1"
        assert call["params"] == {"fields": "status"}
        assert call["headers"]["Authorization"] == "Bearer tok-1"

    def test_missing_status(self, transport, http, make_response):
        """A body without a status yields None."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data={"fields": {}}))

        assert fetch_issue_status(http, TOKEN, "cloud-1", "TEST-1") is None

    @pytest.mark.parametrize("body", [{"fields": "oops"}, {"fields": ["status"]}, ["TEST-1"]])
    def test_malformed_fields(self, transport, http, make_response, body):
        """A body whose fields are not an object yields None."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=body))

        assert fetch_issue_status(http, TOKEN, "cloud-1", "TEST-1") is None

    def test_lookup_failure(self, transport, http, make_response):
        """Non-2xx answers fail the lookup."""
        transport.add("GET", _issue_url("TEST-1"), make_response(status=404, json_data={"errorMessages": []}))

        with pytest.raises(IssueLookupFailed) as excinfo:
            fetch_issue_status(http, TOKEN, "cloud-1", "TEST-1")
        assert excinfo.value.status_code == 404
        assert excinfo.value.issue_key == "TEST-1"


class TestEnsureIssuesOpen:
    """Test cases for ensure_issue_open and ensure_issues_open."""

    def test_open_issue_passes(self, transport, http, make_response):
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=_status_body("Open")))
        ensure_issue_open(http, TOKEN, "cloud-1", "TEST-1")

    def test_closed_issue_refused(self, transport, http, make_response):
        """A closed issue vetoes the report."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=_status_body("Closed")))

        with pytest.raises(IssueClosed) as excinfo:
            ensure_issue_open(http, TOKEN, "cloud-1", "TEST-1")
        assert excinfo.value.status == "Closed"

    def test_missing_status_refused(self, transport, http, make_response):
        """An unknown status is treated as closed."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data={"fields": {"status": None}}))

        with pytest.raises(IssueClosed) as excinfo:
            ensure_issue_open(http, TOKEN, "cloud-1", "TEST-1")
        assert excinfo.value.status is None

    def test_every_issue_checked(self, transport, http, make_response):
        """All issues are checked in order; the first closed one stops the run."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=_status_body("Open")))
        transport.add("GET", _issue_url("TEST-2"), make_response(json_data=_status_body("closed")))
        transport.add("GET", _issue_url("TEST-3"), make_response(json_data=_status_body("Open")))

        with pytest.raises(IssueClosed) as excinfo:
            ensure_issues_open(http, TOKEN, "cloud-1", ["TEST-1", "TEST-2", "TEST-3"])

        assert excinfo.value.issue_key == "TEST-2"
        assert transport.urls() == [_issue_url("TEST-1"), _issue_url("TEST-2")]

    def test_malformed_fields_refused(self, transport, http, make_response):
        """Unreadable fields count as an unknown status."""
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data={"fields": "oops"}))

        with pytest.raises(IssueClosed) as excinfo:
            ensure_issue_open(http, TOKEN, "cloud-1", "TEST-1")
        assert excinfo.value.status is None

    def test_logs_with_run_fields(self, transport, make_response, caplog):
        """Guard records carry the fields of the logger the transport was given."""
        log = FieldLogger(logging.getLogger("jira_ci_reporter.tests"), {"project_id": "TEST"})
        http = AtlassianHTTP(session_factory=transport.session_factory, log=log)
        transport.add("GET", _issue_url("TEST-1"), make_response(json_data=_status_body("Open")))

        with caplog.at_level(logging.DEBUG):
            ensure_issue_open(http, TOKEN, "cloud-1", "TEST-1")

        record = [r for r in caplog.records if r.getMessage().startswith("Issue TEST-1 is open")][0]
        assert record.fields["project_id"] == "TEST"
