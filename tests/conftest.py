"""Shared fixtures: a recording fake Sisense transport and a mocked client."""

import json
import logging
from unittest.mock import MagicMock

import httpx
import pytest

from core.models import SisenseConfig
from core.sisense import SisenseClient

BASE_URL = "https://test-sisense.com"
API_KEY = "test-token"


class FakeSisense:
    """httpx.MockTransport handler that records requests and replays canned responses.

    `routes` maps "METHOD /path" (as sent, still percent-encoded) to either
    an httpx.Response, a JSON-able value (returned with status 200), or an
    exception to raise.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.raw_path.decode("ascii").split("?")[0]
        outcome = self.routes.get(f"{request.method} {path}")
        if outcome is None:
            return httpx.Response(404, text="no route")
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        return httpx.Response(200, text=json.dumps(outcome))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def logger():
    return logging.getLogger("tests.sisense_mcp")


@pytest.fixture
def fake_sisense():
    return FakeSisense()


@pytest.fixture
def client(fake_sisense, logger):
    return SisenseClient(
        SisenseConfig(url=BASE_URL, api_key=API_KEY),
        logger=logger,
        transport=fake_sisense.transport,
    )


@pytest.fixture
def unconfigured_client(fake_sisense, logger):
    return SisenseClient(SisenseConfig(url="", api_key=""), logger=logger, transport=fake_sisense.transport)


@pytest.fixture
def mock_client():
    """A SisenseClient stand-in: async methods become AsyncMocks."""
    mock = MagicMock(spec=SisenseClient)
    mock.is_configured.return_value = True
    return mock
