"""Vimeo OAuth 2 flows using Authlib.

This module provides the two token grants the Vimeo API supports for
third-party apps:
- Authorization code: send the user to an authorization URL, then exchange
  the code delivered on your redirect URI for a user access token.
- Client credentials: request an app-level token for unauthenticated calls.

Tokens are returned to the caller and never stored.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from authlib.common.urls import add_params_to_uri
from authlib.integrations.httpx_client import OAuth2Client

from vimeo_utils.config import API_BASE_URL, AUTH_ENDPOINTS, DEFAULT_HEADERS, DEFAULT_SCOPE

logger = logging.getLogger(__name__)


def normalize_scope(scope: str | Sequence[str] | None) -> str:
    """Normalize scopes to a space delimited string.

    Args:
        scope: A list of scope names, a space delimited string, or None.

    Returns:
        Space delimited scopes, "public" when none were given.
    """
    if not scope:
        return DEFAULT_SCOPE
    if isinstance(scope, str):
        return scope
    return " ".join(scope)


class VimeoOAuth:
    """Vimeo OAuth management using Authlib.

    Example:
        >>> oauth = VimeoOAuth(client_id="abc", client_secret="xyz")
        >>> url = oauth.build_authorization_endpoint(
        ...     "https://example.com/callback", scope=["public", "upload"], state="s1"
        ... )
        >>> # After the user is redirected back with ?code=...
        >>> token = oauth.access_token(code, "https://example.com/callback")
        >>> token["access_token"]
    """

    AUTHORIZE_URL = f"{API_BASE_URL}{AUTH_ENDPOINTS['authorization']}"
    TOKEN_URL = f"{API_BASE_URL}{AUTH_ENDPOINTS['access_token']}"
    CLIENT_CREDENTIALS_URL = f"{API_BASE_URL}{AUTH_ENDPOINTS['client_credentials']}"

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ):
        """Initialize Vimeo OAuth.

        Args:
            client_id: OAuth client identifier.
            client_secret: OAuth client secret.
            transport: Optional httpx transport used for token requests.
            timeout: Request timeout in seconds.
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport
        self._timeout = timeout

    def _session(self) -> OAuth2Client:
        """Create an OAuth session authenticating the app with HTTP Basic."""
        kwargs: dict[str, Any] = {"timeout": self._timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        return OAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_endpoint_auth_method="client_secret_basic",
            **kwargs,
        )

    def _token_headers(self) -> dict[str, str]:
        return {**DEFAULT_HEADERS, "Content-Type": "application/x-www-form-urlencoded"}

    def build_authorization_endpoint(
        self,
        redirect_uri: str,
        scope: str | Sequence[str] | None = None,
        state: str | None = None,
    ) -> str:
        """Build the URL the user should be sent to for authorization.

        The destination lets the user accept or deny connecting with Vimeo and
        each requested scope. Once done, the user is redirected back to
        ``redirect_uri``.

        Args:
            redirect_uri: URI that will exchange a code for an access token.
                Must match the URI in your API app settings.
            scope: Scope names as a list or a space delimited string.
                Defaults to "public".
            state: Unique value returned to you on your redirect URI.

        Returns:
            Authorization URL.
        """
        params = [
            ("response_type", "code"),
            ("client_id", self.client_id or ""),
            ("redirect_uri", redirect_uri),
            ("scope", normalize_scope(scope)),
        ]
        if state:
            params.append(("state", state))

        return add_params_to_uri(self.AUTHORIZE_URL, params)

    def access_token(self, code: str, redirect_uri: str) -> dict[str, Any]:
        """Exchange an authorization code for an access token.

        Args:
            code: The code provided on your ``redirect_uri``.
            redirect_uri: The exact ``redirect_uri`` given to
                ``build_authorization_endpoint``.

        Returns:
            The token payload (access_token, token_type, scope, user, ...).
        """
        with self._session() as session:
            token = session.fetch_token(
                self.TOKEN_URL,
                headers=self._token_headers(),
                grant_type="authorization_code",
                code=code,
                redirect_uri=redirect_uri,
            )

        logger.info(f"Exchanged authorization code for token with scope: {token.get('scope')}")
        return dict(token)

    def generate_client_credentials(self, scope: str | Sequence[str] | None = None) -> dict[str, Any]:
        """Generate an unauthenticated (app-level) access token.

        Args:
            scope: Scope names as a list or a space delimited string.
                Defaults to "public".

        Returns:
            The token payload.
        """
        with self._session() as session:
            token = session.fetch_token(
                self.CLIENT_CREDENTIALS_URL,
                headers=self._token_headers(),
                grant_type="client_credentials",
                scope=normalize_scope(scope),
            )

        logger.info(f"Generated client credentials token with scope: {token.get('scope')}")
        return dict(token)
