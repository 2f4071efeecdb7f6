"""Bearer token acquisition for the two Atlassian integration flows.

* OAuth client credentials: the token is valid against ``api.atlassian.com``.
* Connect: a connect key is exchanged for a JWT valid against the site's
  ``{instance}.atlassian.net`` REST endpoints.
"""

from dataclasses import dataclass, field

from requests.exceptions import RequestException

from ...config.schema import ConnectCredentials, Credentials, OAuthCredentials
from ...errors import TokenRequestFailed
from .http import AtlassianHTTP, format_network_error, is_success

OAUTH_TOKEN_URL = "https://api.atlassian.com/oauth/token"
OAUTH_AUDIENCE = "api.atlassian.com"


@dataclass(frozen=True)
class AuthToken:
    """Bearer token for a single run. Never cached or persisted."""

    value: str = field(repr=False)
    scheme: str


def request_oauth_token(http: AtlassianHTTP, credentials: OAuthCredentials) -> AuthToken:
    """Exchange a client id/secret pair for an access token.

    Raises:
        TokenRequestFailed: On transport errors, non-2xx responses or a
            response without ``access_token``.
    """
    payload = {
        "audience": OAUTH_AUDIENCE,
        "grant_type": "client_credentials",
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }
    try:
        response = http.request(
            "POST", OAUTH_TOKEN_URL, headers={"Content-Type": "application/json"}, json=payload
        )
    except RequestException as e:
        raise TokenRequestFailed("oauth", format_network_error(e)) from e

    if not is_success(response):
        raise TokenRequestFailed(
            "oauth", f"errorCode {response.status_code}", status_code=response.status_code
        )

    try:
        data = response.json()
    except ValueError as e:
        raise TokenRequestFailed("oauth", f"invalid token response: {e}") from e

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not isinstance(access_token, str) or not access_token:
        raise TokenRequestFailed("oauth", "token response has no access_token")
    return AuthToken(value=access_token, scheme=OAuthCredentials.scheme)


def request_connect_token(http: AtlassianHTTP, credentials: ConnectCredentials) -> AuthToken:
    """Exchange a connect key for a JWT; the whole response body is the token.

    Raises:
        TokenRequestFailed: On transport errors or non-2xx responses.
    """
    url = f"{credentials.hostname}/token"
    try:
        response = http.request(
            "GET", url, headers={"Authorization": f"Bearer {credentials.connect_key}"}
        )
    except RequestException as e:
        raise TokenRequestFailed("connect", format_network_error(e)) from e

    if not is_success(response):
        raise TokenRequestFailed(
            "connect", f"errorCode {response.status_code}", status_code=response.status_code
        )
    return AuthToken(value=response.text, scheme=ConnectCredentials.scheme)


def acquire_token(http: AtlassianHTTP, credentials: Credentials) -> AuthToken:
    """Obtain a bearer token for whichever flow ``credentials`` selects."""
    if isinstance(credentials, OAuthCredentials):
        http.log.debug("creating oauth token for deployment")
        return request_oauth_token(http, credentials)
    if isinstance(credentials, ConnectCredentials):
        http.log.debug("creating jwt token from connect key")
        return request_connect_token(http, credentials)
    raise TypeError(f"Unsupported credentials type: {type(credentials).__name__}")
