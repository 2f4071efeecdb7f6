"""
Tests for Jira site name extraction and cloud id resolution.
"""

import logging

import pytest
import requests

from jira_ci_reporter.errors import MissingCloudId, TenantLookupFailed
from jira_ci_reporter.integrations.atlassian.instance import (
    TENANT_INFO_URL,
    extract_instance_name,
    lookup_tenant,
    resolve_cloud_id,
)
from jira_ci_reporter.utils.log_context import FieldLogger

ACME_TENANT_URL = TENANT_INFO_URL.format(instance="acme")


class TestExtractInstanceName:
    """Test cases for extract_instance_name."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("http://test.com", "test"),
            ("https://subdomain.test.com", "subdomain"),
            ("ftp://ftp.test.org", "ftp"),
            ("https://acme.atlassian.net/jira/software", "acme"),
            ("instance.test.com", "instance"),
            ("subdomain.instance.test.org", "subdomain"),
            ("localhost", "localhost"),
            ("invalid-url", "invalid-url"),
            ("", ""),
        ],
    )
    def test_extract(self, raw, expected):
        """URLs, hostnames and bare names all reduce to the first label."""
        assert extract_instance_name(raw) == expected

    def test_url_without_hostname(self):
        """A scheme with no host yields an empty name."""
        assert extract_instance_name("http://") == ""

    def test_unparsable_url_treated_as_hostname(self):
        """A URL that cannot be parsed falls back to splitting on dots."""
        assert extract_instance_name("https://[acme.atlassian.net") == "https://[acme"

    def test_parse_error_logged_with_run_fields(self, caplog):
        log = FieldLogger(logging.getLogger("jira_ci_reporter.tests"), {"project_id": "TEST"})

        with caplog.at_level(logging.ERROR):
            extract_instance_name("https://[acme.atlassian.net", log)

        record = [r for r in caplog.records if r.getMessage().startswith("Error parsing URL")][0]
        assert record.fields["project_id"] == "TEST"
        assert "error" in record.fields

    def test_idempotent(self):
        """Extracting from an extracted name changes nothing."""
        for raw in ["https://acme.atlassian.net", "acme.atlassian.net", "acme"]:
            name = extract_instance_name(raw)
            assert extract_instance_name(name) == name


class TestLookupTenant:
    """Test cases for lookup_tenant."""

    def test_lookup_returns_cloud_id(self, transport, http, make_response):
        """The cloudId of the tenant info document is returned."""
        transport.add("GET", ACME_TENANT_URL, make_response(json_data={"cloudId": "cloud-123"}))

        tenant = lookup_tenant(http, "acme")

        assert tenant.cloud_id == "cloud-123"
        assert transport.urls() == ["https://acme.atlassian.net/_edge/tenant_info"]

    def test_non_success_status(self, transport, http, make_response):
        """A non-2xx answer fails the lookup."""
        transport.add("GET", ACME_TENANT_URL, make_response(status=404, text="not found"))

        with pytest.raises(TenantLookupFailed, match="errorCode 404"):
            lookup_tenant(http, "acme")

    def test_missing_cloud_id(self, transport, http, make_response):
        """A document without cloudId fails the lookup."""
        transport.add("GET", ACME_TENANT_URL, make_response(json_data={"other": "x"}))

        with pytest.raises(TenantLookupFailed, match="no cloudId"):
            lookup_tenant(http, "acme")

    def test_invalid_json(self, transport, http, make_response):
        """An unparsable body fails the lookup."""
        transport.add("GET", ACME_TENANT_URL, make_response(text="<html>"))

        with pytest.raises(TenantLookupFailed, match="invalid tenant info"):
            lookup_tenant(http, "acme")

    def test_transport_error(self, transport, http, make_response):
        """Connection failures are reported as lookup failures."""
        transport.add("GET", ACME_TENANT_URL, exc=requests.ConnectionError("[Errno 111] Connection refused"))

        with pytest.raises(TenantLookupFailed, match="Connection refused"):
            lookup_tenant(http, "acme")


class TestResolveCloudId:
    """Test cases for resolve_cloud_id."""

    def test_instance_lookup_beats_supplied_id(self, transport, http, make_response):
        """A named instance is looked up even when a cloud id was supplied."""
        transport.add("GET", ACME_TENANT_URL, make_response(json_data={"cloudId": "looked-up"}))

        assert resolve_cloud_id(http, "acme", "supplied") == "looked-up"

    def test_supplied_id_without_instance(self, transport, http):
        """The supplied id is used verbatim without any request."""
        assert resolve_cloud_id(http, "", "supplied") == "supplied"
        assert transport.calls == []

    def test_neither_set(self, transport, http):
        """With neither an instance nor a cloud id the run cannot proceed."""
        with pytest.raises(MissingCloudId):
            resolve_cloud_id(http, "", "")
        assert transport.calls == []
