"""Shared fixtures for Vimeo client tests."""

import os
from collections.abc import Callable
from unittest.mock import patch

import httpx
import pytest


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it handles."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response] | httpx.Response | Exception):
        self.requests: list[httpx.Request] = []
        self._responder = responder
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self._responder, Exception):
            raise self._responder
        if isinstance(self._responder, httpx.Response):
            return self._responder
        return self._responder(request)


@pytest.fixture
def make_transport():
    """Build a RecordingTransport from a response, an exception or a handler."""
    return RecordingTransport


@pytest.fixture(autouse=True)
def clean_env():
    """Keep VIMEO_* variables from the developer's environment out of tests."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("VIMEO_")}
    with patch.dict(os.environ, env, clear=True):
        yield
