"""Vimeo API client with authentication.

Provides authenticated requests against api.vimeo.com and resumable uploads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx

from vimeo_utils.config import (
    API_BASE_URL,
    DEFAULT_HEADERS,
    JSON_BODY_METHODS,
    UPLOAD_RETRY_DELAYS,
    get_env_credentials,
)
from vimeo_utils.exceptions import VimeoError, VimeoRequestError
from vimeo_utils.models import ClientCredentials, RequestOptions, UploadAttempt, UploadCallbacks
from vimeo_utils.oauth import VimeoOAuth
from vimeo_utils.upload import (
    FILE_NOT_FOUND_MESSAGE,
    TusUpload,
    UploadFile,
    apply_tus_approach,
    normalize_upload_args,
    resolve_file_name,
    resolve_file_size,
)

logger = logging.getLogger(__name__)


class VimeoClient:
    """Vimeo API client with authentication.

    Requests carry a bearer token when one is set, otherwise the app's client
    credentials as HTTP Basic.

    Example:
        >>> client = VimeoClient(
        ...     client_id="your-client-id",
        ...     client_secret="your-client-secret",
        ...     access_token="your-access-token",
        ... )
        >>> me = client.request("/me")
        >>> handle = client.upload("video.mp4", {"name": "Demo"}, on_complete=print)
        >>> handle.start()

    Note:
        ``set_access_token`` mutates state read by every request and is not
        thread-safe. Use ``with_access_token`` to get an independent client.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        access_token: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ):
        """Initialize Vimeo client.

        Args:
            client_id: OAuth client ID. If None, reads from VIMEO_CLIENT_ID env var.
            client_secret: OAuth client secret. If None, reads from VIMEO_CLIENT_SECRET.
            access_token: Pre-authorized access token. If None, reads from VIMEO_ACCESS_TOKEN.
            transport: Optional httpx transport for API and OAuth requests.
            timeout: Request timeout in seconds.
        """
        env = get_env_credentials()
        self.credentials = ClientCredentials(
            client_id=client_id or env["client_id"],
            client_secret=client_secret or env["client_secret"],
            access_token=access_token or env["access_token"],
        )
        self._transport = transport
        self._timeout = timeout
        self._client = httpx.Client(base_url=API_BASE_URL, timeout=timeout, transport=transport)
        self.oauth = VimeoOAuth(
            self.credentials.client_id,
            self.credentials.client_secret,
            transport=transport,
            timeout=timeout,
        )

    @property
    def client_id(self) -> str | None:
        return self.credentials.client_id

    @property
    def client_secret(self) -> str | None:
        return self.credentials.client_secret

    def set_access_token(self, access_token: str | None) -> None:
        """Set a user access token to be used with subsequent requests."""
        self.credentials.access_token = access_token

    def with_access_token(self, access_token: str) -> VimeoClient:
        """Get a new client sharing this client's app credentials and transport."""
        return VimeoClient(
            self.client_id,
            self.client_secret,
            access_token,
            transport=self._transport,
            timeout=self._timeout,
        )

    # =========================================================================
    # OAuth
    # =========================================================================

    def build_authorization_endpoint(
        self,
        redirect_uri: str,
        scope: str | Sequence[str] | None = None,
        state: str | None = None,
    ) -> str:
        """Build the URL the user should be sent to for authorization."""
        return self.oauth.build_authorization_endpoint(redirect_uri, scope, state)

    def access_token(self, code: str, redirect_uri: str) -> dict[str, Any]:
        """Exchange an authorization code for an access token."""
        return self.oauth.access_token(code, redirect_uri)

    def generate_client_credentials(self, scope: str | Sequence[str] | None = None) -> dict[str, Any]:
        """Generate an app-level access token for unauthenticated requests."""
        return self.oauth.generate_client_credentials(scope)

    # =========================================================================
    # Requests
    # =========================================================================

    def build_request_options(
        self, options: str | dict[str, Any] | RequestOptions
    ) -> RequestOptions:
        """Resolve request options with defaults and authentication.

        Args:
            options: Url string, dict or RequestOptions.

        Returns:
            RequestOptions with method, headers and data populated.

        Raises:
            VimeoRequestError: If no url is provided.
        """
        resolved = RequestOptions.from_value(options)
        if not isinstance(resolved.url, str):
            raise VimeoRequestError("You must provide an API url")

        resolved.method = resolved.method.upper()

        # Caller headers win over the defaults
        for key, value in DEFAULT_HEADERS.items():
            if not resolved.headers.get(key):
                resolved.headers[key] = value

        authorization = self.credentials.authorization_header()
        if authorization:
            resolved.headers["Authorization"] = authorization

        if resolved.method in JSON_BODY_METHODS and not resolved.headers.get("Content-Type"):
            resolved.headers["Content-Type"] = "application/json"

        return resolved

    def request(self, options: str | dict[str, Any] | RequestOptions) -> Any:
        """Perform an API call.

        Can be called two ways:

        1. Url: ``client.request("/me")`` sends ``GET https://api.vimeo.com/me``.
        2. Options: a dict or RequestOptions with ``url`` (required, may
           include a query string), ``method``, ``headers`` and ``data``.

        Args:
            options: Url string or request options.

        Returns:
            Parsed response body, or a VimeoRequestError (returned, not raised)
            when no url is provided.

        Raises:
            httpx.HTTPError: If the request fails or the API returns an error status.
        """
        try:
            resolved = self.build_request_options(options)
        except VimeoRequestError as e:
            return e

        body = self._encode_body(resolved)
        logger.debug(f"{resolved.method} {resolved.url}")

        response = self._client.request(
            resolved.method, resolved.url, headers=resolved.headers, **body
        )
        response.raise_for_status()
        return self._parse_response(response)

    def _encode_body(self, options: RequestOptions) -> dict[str, Any]:
        """Get httpx body arguments matching the request content type."""
        if options.data is None:
            return {}

        content_type = options.headers.get("Content-Type", "")
        if "json" in content_type:
            return {"json": options.data}
        if content_type.startswith("application/x-www-form-urlencoded"):
            return {"data": options.data}
        return {"content": options.data}

    def _parse_response(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        if "json" in response.headers.get("Content-Type", ""):
            return response.json()
        return response.text

    # =========================================================================
    # Uploads
    # =========================================================================

    def upload(
        self,
        file: UploadFile,
        params: dict[str, Any] | Callable | None = None,
        on_complete: Callable[[str], Any] | None = None,
        on_progress: Callable[[int, int], Any] | None = None,
        on_error: Callable[[Any], Any] | None = None,
        *,
        callbacks: UploadCallbacks | None = None,
    ) -> TusUpload | None:
        """Upload a local file as a new video.

        https://developer.vimeo.com/api/reference/videos#upload_video

        Args:
            file: Path or binary file object to upload.
            params: Parameters for the new video (name, privacy, ...). May be
                omitted, in which case the callbacks shift left by one.
            on_complete: Called with the new video URI when the upload completes.
            on_progress: Called with (bytes_sent, bytes_total).
            on_error: Called with a message or error when the upload fails.
            callbacks: All three callbacks at once, overriding the positional ones.

        Returns:
            An unstarted TusUpload, or None if the upload could not be initiated.
        """
        params, callbacks = normalize_upload_args(
            params, on_complete, on_progress, on_error, callbacks
        )
        return self._start_attempt(
            file, params, callbacks, "/me/videos?fields=uri,name,upload"
        )

    def replace(
        self,
        file: UploadFile,
        video_uri: str,
        params: dict[str, Any] | Callable | None = None,
        on_complete: Callable[[str], Any] | None = None,
        on_progress: Callable[[int, int], Any] | None = None,
        on_error: Callable[[Any], Any] | None = None,
        *,
        callbacks: UploadCallbacks | None = None,
    ) -> TusUpload | None:
        """Replace the source file of an existing video.

        https://developer.vimeo.com/api/reference/videos#create_video_version

        Args:
            file: Path or binary file object to upload.
            video_uri: URI of the video to replace (e.g. "/videos/12345").
            params: Parameters for the new version. May be omitted.
            on_complete: Called with ``video_uri`` when the upload completes.
            on_progress: Called with (bytes_sent, bytes_total).
            on_error: Called with a message or error when the upload fails.
            callbacks: All three callbacks at once, overriding the positional ones.

        Returns:
            An unstarted TusUpload, or None if the upload could not be initiated.
        """
        params, callbacks = normalize_upload_args(
            params, on_complete, on_progress, on_error, callbacks
        )
        return self._start_attempt(
            file,
            params,
            callbacks,
            f"{video_uri}/versions?fields=upload",
            video_uri=video_uri,
        )

    def _start_attempt(
        self,
        file: UploadFile,
        params: dict[str, Any],
        callbacks: UploadCallbacks,
        url: str,
        video_uri: str | None = None,
    ) -> TusUpload | None:
        """Declare an upload to the API and build its transfer handle."""
        try:
            file_size = resolve_file_size(file)
        except OSError as e:
            logger.warning(f"Cannot stat upload source {file!r}: {e}")
            callbacks.error(FILE_NOT_FOUND_MESSAGE)
            return None

        if video_uri is not None:
            file_name = resolve_file_name(file)
            if file_name:
                params["file_name"] = file_name

        apply_tus_approach(params, file_size)

        try:
            data = self.request({"url": url, "method": "POST", "data": params})
            attempt = UploadAttempt.from_response(data, uri=video_uri)
        except (httpx.HTTPError, VimeoError, ValueError) as e:
            logger.warning(f"Unable to initiate an upload: {e}")
            callbacks.error(f"Unable to initiate an upload. [{e}]")
            return None

        logger.info(f"Upload attempt created for {attempt.uri} ({file_size} bytes)")
        return TusUpload(
            file,
            attempt.upload_link,
            file_size,
            retry_delays=UPLOAD_RETRY_DELAYS,
            on_success=lambda: callbacks.complete(attempt.uri),
            on_progress=callbacks.progress,
            on_error=callbacks.error,
        )

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
