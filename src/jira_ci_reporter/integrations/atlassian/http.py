"""HTTP transport shared by every Atlassian call of a run.

Each request opens its own ``requests.Session`` inside a ``with`` block so
the connection is released on every exit path. All requests are bounded by
the run :class:`Deadline`; nothing is retried.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, Optional

import requests
from requests.exceptions import Timeout

from ...errors import RunCancelled
from ...utils.log_context import FieldLogger

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
USER_AGENT = "jira-ci-reporter/1.0"
_DNS_FAILURES = ("Name or service not known", "nodename nor servname", "getaddrinfo failed")


class Deadline:
    """Run-wide timeout and external cancellation flag."""

    def __init__(self, timeout: Optional[float] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._expires_at = clock() + timeout if timeout else None
        self._cancel_reason: Optional[str] = None

    def cancel(self, reason: str = "run cancelled") -> None:
        """Mark the run as cancelled; the next check raises RunCancelled."""
        self._cancel_reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancel_reason is not None

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self) -> None:
        """Raise RunCancelled if the run was cancelled or is out of time."""
        if self._cancel_reason is not None:
            raise RunCancelled(self._cancel_reason)
        if self.expired:
            raise RunCancelled("run deadline exceeded")

    def request_timeout(self, default: float) -> float:
        """Timeout for the next request: ``default`` capped by the time left."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)


def bearer_headers(token: str) -> dict[str, str]:
    """Headers for an authenticated JSON call."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def format_network_error(error: requests.RequestException) -> str:
    """Describe a transport failure for an error message.

    ``ConnectTimeout`` is both a timeout and a connection error; it is
    reported as a timeout.
    """
    detail = str(error)
    if isinstance(error, Timeout):
        return f"request timed out ({detail})"
    if isinstance(error, requests.exceptions.SSLError):
        return f"TLS handshake failed ({detail})"
    if isinstance(error, requests.ConnectionError):
        if any(marker in detail for marker in _DNS_FAILURES):
            return f"host not found ({detail})"
        if "Connection refused" in detail:
            return f"connection refused ({detail})"
        return f"connection failed ({detail})"
    return f"request failed ({detail})"


def dump_response(response: requests.Response) -> str:
    """Render status line, headers and body of a response for diagnostics."""
    lines = [f"HTTP/1.1 {response.status_code} {response.reason or ''}".rstrip()]
    for name, value in response.headers.items():
        lines.append(f"{name}: {value}")
    return "\r\n".join(lines) + "\r\n\r\n" + (response.text or "")


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code <= 299


class AtlassianHTTP:
    """Sequential, deadline-bounded HTTP access for one run."""

    def __init__(
        self,
        deadline: Optional[Deadline] = None,
        debug: bool = False,
        session_factory: Callable[[], requests.Session] = requests.Session,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        log: Optional[FieldLogger] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            deadline: Run deadline checked before every request.
            debug: Log full responses of report calls for diagnostics.
            session_factory: Callable returning a fresh session per request.
            request_timeout: Per-request timeout in seconds before capping.
            log: Logger carrying the run fields.
        """
        self.deadline = deadline or Deadline()
        self.debug = debug
        self.session_factory = session_factory
        self.request_timeout = request_timeout
        self.log = log or FieldLogger(logger)

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        json: Any = None,
        params: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        """Perform one request.

        Raises:
            RunCancelled: If the run is cancelled or its deadline is exhausted.
            requests.RequestException: On any other transport failure.
        """
        self.deadline.check()
        timeout = self.deadline.request_timeout(self.request_timeout)
        request_headers = {"User-Agent": USER_AGENT}
        request_headers.update(headers or {})

        self.log.debug(f"{method} {url}")
        try:
            with self.session_factory() as session:
                response = session.request(
                    method,
                    url,
                    headers=request_headers,
                    json=json,
                    params=params,
                    timeout=timeout,
                )
        except Timeout as e:
            if self.deadline.expired:
                raise RunCancelled(f"run deadline exceeded during {method} {url}") from e
            raise
        return response

    def trace(self, response: requests.Response) -> None:
        """Log the full response when debug verbosity was requested."""
        if not self.debug:
            return
        self.log.with_fields(status=response.status_code, response=dump_response(response)).info(
            "request complete"
        )
