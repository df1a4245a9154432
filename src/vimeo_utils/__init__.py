"""Vimeo API client: OAuth flows, authenticated requests and tus uploads."""

__version__ = "0.1.0"

from vimeo_utils.client import VimeoClient  # noqa: E402
from vimeo_utils.exceptions import VimeoError, VimeoRequestError, VimeoUploadError  # noqa: E402
from vimeo_utils.models import (  # noqa: E402
    ClientCredentials,
    RequestOptions,
    UploadAttempt,
    UploadCallbacks,
)
from vimeo_utils.oauth import VimeoOAuth  # noqa: E402
from vimeo_utils.upload import TusUpload  # noqa: E402

__all__ = [
    "VimeoClient",
    "VimeoOAuth",
    "TusUpload",
    "ClientCredentials",
    "RequestOptions",
    "UploadAttempt",
    "UploadCallbacks",
    "VimeoError",
    "VimeoRequestError",
    "VimeoUploadError",
]
