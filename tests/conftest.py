"""Shared fixtures: a recording stand-in for ``requests.Session``."""

import json
import logging

import pytest
import requests

from jira_ci_reporter.config.schema import (
    BuildInfo,
    CommitInfo,
    ConnectCredentials,
    EventContext,
    OAuthCredentials,
)
from jira_ci_reporter.integrations.atlassian.http import AtlassianHTTP


def _make_response(status=200, json_data=None, text=None, headers=None, reason="OK"):
    """Build a real ``requests.Response`` with the given body."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    if json_data is not None:
        body = json.dumps(json_data)
        response.headers["Content-Type"] = "application/json"
    else:
        body = text or ""
    response.headers.update(headers or {})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeTransport:
    """Routes requests to canned responses and records every call.

    Routes match on method and URL (query parameters are passed separately
    and recorded, not matched).
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.opened = 0
        self.closed = 0

    def add(self, method, url, response=None, exc=None):
        self.routes[(method, url)] = (response, exc)
        return self

    def session_factory(self):
        return FakeSession(self)

    def handle(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if (method, url) not in self.routes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response, exc = self.routes[(method, url)]
        if exc is not None:
            raise exc
        return response

    def urls(self, method=None):
        return [call["url"] for call in self.calls if method is None or call["method"] == method]


class FakeSession:
    def __init__(self, transport):
        self.transport = transport

    def __enter__(self):
        self.transport.opened += 1
        return self

    def __exit__(self, *exc_info):
        self.transport.closed += 1
        return False

    def request(self, method, url, **kwargs):
        return self.transport.handle(method, url, **kwargs)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging changes made by CLI invocations."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("jira_ci_reporter").setLevel(logging.NOTSET)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def http(transport):
    return AtlassianHTTP(session_factory=transport.session_factory)


@pytest.fixture
def oauth_context():
    """Event context for the OAuth flow against the ``acme`` site."""
    return EventContext(
        project="TEST",
        pipeline="deploy-api",
        instance="acme",
        commit=CommitInfo(
            message="TEST-1 fix login redirect",
            branch="main",
            rev="6d2ab7e",
            link="https://github.com/acme/api/commit/6d2ab7e",
        ),
        build=BuildInfo(number=42, status="success", link="https://ci.example.com/acme/api/42"),
        credentials=OAuthCredentials(client_id="client-1", client_secret="secret-1"),
    )


@pytest.fixture
def connect_context():
    """Event context for the Connect flow against the ``acme`` site."""
    return EventContext(
        project="TEST",
        pipeline="build-api",
        instance="https://acme.atlassian.net",
        commit=CommitInfo(
            message="TEST-7 add healthcheck",
            branch="feature/TEST-7",
            rev="9f00c31",
            link="https://github.com/acme/api",
        ),
        build=BuildInfo(number=7, status="running", link="https://ci.example.com/acme/api/7"),
        credentials=ConnectCredentials(connect_key="connect-key-1"),
    )


@pytest.fixture
def make_response():
    return _make_response
