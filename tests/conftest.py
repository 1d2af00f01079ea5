"""Shared fixtures: env isolation and clients backed by httpx.MockTransport."""

import os

import httpx
import pytest

from juicewrld_api.api.client import JuiceWRLDClient
from juicewrld_api.config import ClientConfig

BASE_URL = "https://api.test/juicewrld"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove JUICEWRLD_* env vars so tests see actual defaults."""
    for var in list(os.environ):
        if var.startswith("JUICEWRLD_"):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config():
    return ClientConfig(_env_file=None, base_url=BASE_URL)


@pytest.fixture
def make_client(config):
    """Build a client whose requests go to `handler(request) -> Response`.

    Every request seen is appended to the returned client's `requests` list.
    """
    clients = []

    def _make(handler, **kwargs):
        seen: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = JuiceWRLDClient(
            config=config, transport=httpx.MockTransport(_record), **kwargs,
        )
        client.requests = seen
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
