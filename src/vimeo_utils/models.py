"""Data models for the Vimeo client."""

from __future__ import annotations

import base64
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from vimeo_utils.exceptions import VimeoUploadError


@dataclass
class ClientCredentials:
    """OAuth 2 credentials shared by every request of a client.

    Only ``access_token`` may change after construction.
    """

    client_id: str | None = None
    client_secret: str | None = None
    access_token: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("client_id", "client_secret") and name in self.__dict__:
            raise AttributeError(f"{name} cannot be changed after construction")
        super().__setattr__(name, value)

    def authorization_header(self) -> str | None:
        """Get the Authorization header value for outgoing requests.

        A bearer token wins over client credentials. Exactly one form is
        returned, or None when neither is configured.
        """
        if self.access_token:
            return f"Bearer {self.access_token}"
        if self.client_id and self.client_secret:
            basic = f"{self.client_id}:{self.client_secret}".encode()
            return f"Basic {base64.b64encode(basic).decode('ascii')}"
        return None


@dataclass
class RequestOptions:
    """A fully or partially resolved API request."""

    url: str | None = None
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None

    @classmethod
    def from_value(cls, options: str | dict[str, Any] | RequestOptions) -> RequestOptions:
        """Coerce a bare url, a dict or an existing instance into RequestOptions."""
        if isinstance(options, RequestOptions):
            return cls(
                url=options.url,
                method=options.method,
                headers=dict(options.headers),
                data=options.data,
            )
        if isinstance(options, str):
            return cls(url=options)
        return cls(
            url=options.get("url"),
            method=options.get("method") or "GET",
            headers=dict(options.get("headers") or {}),
            data=options.get("data", options.get("body")),
        )


@dataclass
class UploadAttempt:
    """Server descriptor returned when declaring an upload."""

    uri: str
    upload_link: str
    name: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any], uri: str | None = None) -> UploadAttempt:
        """Build an attempt from an intent-declaration response.

        Args:
            data: Parsed response body.
            uri: Resource URI overriding the one in the response.

        Raises:
            VimeoUploadError: If the response has no upload link or uri.
        """
        if not isinstance(data, dict):
            raise VimeoUploadError(f"Unexpected upload response: {data!r}")

        upload_link = (data.get("upload") or {}).get("upload_link")
        resource_uri = uri or data.get("uri")
        if not upload_link:
            raise VimeoUploadError("Upload response is missing an upload link")
        if not resource_uri:
            raise VimeoUploadError("Upload response is missing a resource uri")

        return cls(uri=resource_uri, upload_link=upload_link, name=data.get("name"))


def _noop(*args: Any) -> None:
    return None


@dataclass
class UploadCallbacks:
    """Callbacks fired while an upload is initiated and transferred."""

    on_complete: Callable[[str], Any] | None = None
    on_progress: Callable[[int, int], Any] | None = None
    on_error: Callable[[Any], Any] | None = None

    def complete(self, uri: str) -> None:
        (self.on_complete or _noop)(uri)

    def progress(self, bytes_sent: int, bytes_total: int) -> None:
        (self.on_progress or _noop)(bytes_sent, bytes_total)

    def error(self, error: Any) -> None:
        (self.on_error or _noop)(error)
