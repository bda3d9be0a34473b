"""Shared test fixtures for shiorictl tests."""

import json

import pytest

from shiorictl.config import Config, ServerConfig
from shiorictl.logging_setup import reset_logging
from shiorictl.transport import Response


class FakeTransport:
    """Records sent requests and replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def queue(self, status_code=200, body=None, text=None):
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.responses.append(Response(status_code=status_code, text=text))

    def queue_login(self, token="tok_abc", expires=2_000_000_000):
        self.queue(body={"ok": True, "message": {"token": token, "expires": expires}})

    def send(self, request):
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def operations(self):
        return [r.operation for r in self.requests]


@pytest.fixture
def make_transport():
    """Factory fixture that creates FakeTransport instances."""
    def _make_transport(*responses):
        return FakeTransport(*responses)
    return _make_transport


@pytest.fixture
def fake_transport(make_transport):
    return make_transport()


@pytest.fixture
def make_config():
    """Factory fixture that creates Config instances pointing at a test server."""
    def _make_config(**overrides):
        server = {
            "url": "https://shiori.example.com",
            "username": "alice",
            "password": "secret",
        }
        server.update(overrides)
        return Config(server=ServerConfig(**server))
    return _make_config


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()
