"""Resumable video uploads over the tus protocol.

The byte transfer itself is delegated to ``tusclient``. This module resolves
what to send (file size and name), shapes the upload parameters the API
expects, and wraps the tus uploader in a handle that reports progress,
completion and errors through callbacks.

See https://tus.io/ and https://developer.vimeo.com/api/upload/videos
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Sequence
from typing import IO, Any

from tusclient import client as tus_client
from tusclient.exceptions import TusCommunicationError

from vimeo_utils.config import DEFAULT_HEADERS, UPLOAD_RETRY_DELAYS
from vimeo_utils.models import UploadCallbacks

logger = logging.getLogger(__name__)

FILE_NOT_FOUND_MESSAGE = "Unable to locate file to upload."
DEFAULT_CHUNK_SIZE = 128 * 1024 * 1024

UploadFile = str | os.PathLike | IO[bytes]


def is_path(file: Any) -> bool:
    """Check whether an upload source is a filesystem path."""
    return isinstance(file, (str, os.PathLike))


def resolve_file_size(file: UploadFile) -> int:
    """Get the size in bytes of an upload source.

    Paths are stat'ed. File-like objects report their ``size`` attribute when
    they have one, otherwise they are measured by seeking to the end.

    Raises:
        OSError: If a path cannot be stat'ed.
    """
    if is_path(file):
        return os.stat(file).st_size

    size = getattr(file, "size", None)
    if size is not None:
        return int(size)

    position = file.tell()
    try:
        return file.seek(0, os.SEEK_END)
    finally:
        file.seek(position)


def resolve_file_name(file: UploadFile) -> str | None:
    """Get the base name of an upload source, if it has one."""
    if is_path(file):
        return os.path.basename(os.fspath(file))

    name = getattr(file, "name", None)
    if isinstance(name, (str, os.PathLike)):
        return os.path.basename(os.fspath(name))
    return None


def apply_tus_approach(params: dict[str, Any], size: int) -> dict[str, Any]:
    """Force the tus upload approach and size onto upload parameters.

    Any other keys the caller put under ``upload`` are kept. ``params`` is
    updated in place and returned.
    """
    upload = params.get("upload")
    if not isinstance(upload, dict):
        upload = {}
    upload["approach"] = "tus"
    upload["size"] = size
    params["upload"] = upload
    return params


def normalize_upload_args(
    params: dict[str, Any] | Callable | None,
    on_complete: Callable | None,
    on_progress: Callable | None,
    on_error: Callable | None,
    callbacks: UploadCallbacks | None = None,
) -> tuple[dict[str, Any], UploadCallbacks]:
    """Resolve the params dict and callbacks of an upload call.

    ``callbacks`` takes precedence over positional callbacks. When ``params``
    is callable it is the completion callback and the remaining callbacks
    shift left by one.
    """
    if callable(params):
        on_complete, on_progress, on_error = params, on_complete, on_progress
        params = None

    if callbacks is None:
        callbacks = UploadCallbacks(on_complete, on_progress, on_error)

    return (params if params is not None else {}), callbacks


class TusUpload:
    """Handle for a single resumable transfer.

    The transfer does not begin until ``start()`` is called.

    Example:
        >>> handle = client.upload("video.mp4", {"name": "Demo"}, on_complete=print)
        >>> if handle:
        ...     handle.start()
    """

    def __init__(
        self,
        file: UploadFile,
        url: str,
        upload_size: int,
        retry_delays: Sequence[int] = UPLOAD_RETRY_DELAYS,
        on_success: Callable[[], Any] | None = None,
        on_progress: Callable[[int, int], Any] | None = None,
        on_error: Callable[[Any], Any] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        headers: dict[str, str] | None = None,
    ):
        """Initialize the transfer handle.

        Args:
            file: Path or binary file object to send.
            url: Upload link returned by the API.
            upload_size: Total bytes to send.
            retry_delays: Delays in milliseconds before each retry of a failed chunk.
            on_success: Called once all bytes are acknowledged.
            on_progress: Called with (bytes_sent, bytes_total) after each chunk.
            on_error: Called with the error when the retry schedule is exhausted.
            chunk_size: Bytes per PATCH request.
            headers: Extra headers sent with every tus request.
        """
        self.file = file
        self.url = url
        self.upload_size = upload_size
        self.retry_delays = tuple(retry_delays)
        self.chunk_size = chunk_size
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.offset = 0
        self.is_started = False
        self.is_aborted = False

        self._on_success = on_success
        self._on_progress = on_progress
        self._on_error = on_error

    def _create_uploader(self):
        """Create a tus uploader bound to the existing upload link."""
        client = tus_client.TusClient(self.url, headers=self.headers)
        source = {"file_path": os.fspath(self.file)} if is_path(self.file) else {"file_stream": self.file}
        return client.uploader(url=self.url, chunk_size=self.chunk_size, retries=0, **source)

    def start(self) -> bool:
        """Run the transfer to completion, failure or abort.

        Returns:
            False if the handle was already started, True otherwise.
        """
        if self.is_started:
            logger.warning(f"Upload to {self.url} already started")
            return False
        self.is_started = True

        attempt = 0
        uploader = None
        while not self.is_aborted:
            try:
                if uploader is None:
                    uploader = self._create_uploader()
                elif attempt:
                    uploader.offset = uploader.get_offset()

                self.offset = uploader.offset
                if self.offset >= self.upload_size:
                    break

                uploader.upload_chunk()
            except TusCommunicationError as e:
                if attempt >= len(self.retry_delays):
                    logger.error(f"Upload to {self.url} failed after {attempt} retries: {e}")
                    if self._on_error and not self.is_aborted:
                        self._on_error(e)
                    return True

                delay = self.retry_delays[attempt]
                attempt += 1
                logger.warning(f"Upload chunk failed, retrying in {delay}ms: {e}")
                time.sleep(delay / 1000)
                continue
            except (ValueError, OSError) as e:
                # Unreadable source, not retried
                logger.error(f"Upload to {self.url} failed: {e}")
                if self._on_error and not self.is_aborted:
                    self._on_error(e)
                return True

            attempt = 0
            self.offset = uploader.offset
            if self._on_progress and not self.is_aborted:
                self._on_progress(self.offset, self.upload_size)

        if self.is_aborted:
            logger.info(f"Upload to {self.url} aborted at {self.offset} bytes")
            return True

        logger.info(f"Upload to {self.url} complete ({self.upload_size} bytes)")
        if self._on_success:
            self._on_success()
        return True

    def abort(self) -> None:
        """Stop the transfer after the chunk in flight."""
        self.is_aborted = True
