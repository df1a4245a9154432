"""Tests for Vimeo OAuth flows."""

import base64
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from vimeo_utils import VimeoClient, VimeoOAuth
from vimeo_utils.oauth import normalize_scope


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


class TestNormalizeScope:
    """Test scope normalization."""

    def test_default_scope(self):
        """Should default to public when no scope is given."""
        assert normalize_scope(None) == "public"
        assert normalize_scope("") == "public"
        assert normalize_scope([]) == "public"

    def test_list_scope(self):
        """Should join list scopes with spaces."""
        assert normalize_scope(["public", "private", "upload"]) == "public private upload"

    def test_string_scope(self):
        """Should keep space delimited strings as-is."""
        assert normalize_scope("public upload") == "public upload"


class TestAuthorizationEndpoint:
    """Test authorization URL generation."""

    @pytest.fixture
    def oauth(self):
        return VimeoOAuth(client_id="client-id", client_secret="client-secret")

    def test_url_target(self, oauth):
        """Should point at the Vimeo authorization endpoint."""
        url = oauth.build_authorization_endpoint("https://example.com/cb")
        parts = urlsplit(url)
        assert parts.scheme == "https"
        assert parts.netloc == "api.vimeo.com"
        assert parts.path == "/oauth/authorize"

    def test_required_params(self, oauth):
        """Should include response type, client id and redirect uri."""
        query = _query(oauth.build_authorization_endpoint("https://example.com/cb"))
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["client-id"]
        assert query["redirect_uri"] == ["https://example.com/cb"]

    def test_scope_defaults_to_public(self, oauth):
        """Should request the public scope when none is given."""
        query = _query(oauth.build_authorization_endpoint("https://example.com/cb"))
        assert query["scope"] == ["public"]

    def test_scope_list(self, oauth):
        """Should join a list of scopes with spaces."""
        url = oauth.build_authorization_endpoint("https://example.com/cb", ["public", "upload"])
        assert _query(url)["scope"] == ["public upload"]

    def test_scope_string(self, oauth):
        """Should accept a space delimited scope string."""
        url = oauth.build_authorization_endpoint("https://example.com/cb", "public edit")
        assert _query(url)["scope"] == ["public edit"]

    def test_state_included_when_given(self, oauth):
        """Should include state when provided."""
        url = oauth.build_authorization_endpoint("https://example.com/cb", state="xyz")
        assert _query(url)["state"] == ["xyz"]

    @pytest.mark.parametrize("state", [None, ""])
    def test_state_omitted_when_empty(self, oauth, state):
        """Should not include state when missing or empty."""
        url = oauth.build_authorization_endpoint("https://example.com/cb", state=state)
        assert "state" not in _query(url)

    def test_client_delegates(self):
        """Should be reachable through VimeoClient."""
        client = VimeoClient(client_id="client-id", client_secret="client-secret")
        url = client.build_authorization_endpoint("https://example.com/cb", state="s")
        assert _query(url)["client_id"] == ["client-id"]
        assert _query(url)["state"] == ["s"]


class TestTokenRequests:
    """Test token grants against a mock transport."""

    TOKEN = {"access_token": "new-token", "token_type": "bearer", "scope": "public"}

    def _basic(self) -> str:
        return "Basic " + base64.b64encode(b"client-id:client-secret").decode()

    def test_access_token(self, make_transport):
        """Should exchange a code with a form-encoded authorization_code grant."""
        transport = make_transport(httpx.Response(200, json=self.TOKEN))
        oauth = VimeoOAuth("client-id", "client-secret", transport=transport)

        token = oauth.access_token("the-code", "https://example.com/cb")

        assert token["access_token"] == "new-token"
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.vimeo.com/oauth/access_token"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.headers["Authorization"] == self._basic()

        body = parse_qs(request.content.decode())
        assert body["grant_type"] == ["authorization_code"]
        assert body["code"] == ["the-code"]
        assert body["redirect_uri"] == ["https://example.com/cb"]

    def test_client_credentials(self, make_transport):
        """Should request an app token with a client_credentials grant."""
        transport = make_transport(httpx.Response(200, json=self.TOKEN))
        oauth = VimeoOAuth("client-id", "client-secret", transport=transport)

        token = oauth.generate_client_credentials(["public", "private"])

        assert token["token_type"] == "bearer"
        request = transport.requests[0]
        assert str(request.url) == "https://api.vimeo.com/oauth/authorize/client"
        body = parse_qs(request.content.decode())
        assert body["grant_type"] == ["client_credentials"]
        assert body["scope"] == ["public private"]

    def test_client_credentials_default_scope(self, make_transport):
        """Should request the public scope by default."""
        transport = make_transport(httpx.Response(200, json=self.TOKEN))
        oauth = VimeoOAuth("client-id", "client-secret", transport=transport)

        oauth.generate_client_credentials()

        body = parse_qs(transport.requests[0].content.decode())
        assert body["scope"] == ["public"]

    def test_transport_error_propagates(self, make_transport):
        """Should re-raise transport errors unchanged."""
        error = httpx.ConnectError("connection refused")
        transport = make_transport(error)
        client = VimeoClient("client-id", "client-secret", transport=transport)

        with pytest.raises(httpx.ConnectError):
            client.access_token("the-code", "https://example.com/cb")

        with pytest.raises(httpx.ConnectError):
            client.generate_client_credentials()
