"""Shared fixtures for OpenAgenda SDK tests."""

import json

import httpx
import pytest

from openagenda_sdk import OpenAgendaClient


class FakeAPI:
    """Routes requests to canned responses and records what was sent."""

    def __init__(self):
        self.routes: dict[tuple[str, str], list[httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, json_body=None, status_code: int = 200, text=None):
        if text is None:
            text = json.dumps(json_body if json_body is not None else {})
        response = httpx.Response(status_code, text=text)
        self.routes.setdefault((method, path), []).append(response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        responses = self.routes.get((request.method, request.url.path))
        if not responses:
            return httpx.Response(404, text=json.dumps({"message": "not found"}))
        # The last canned response repeats once the others are used up
        return responses.pop(0) if len(responses) > 1 else responses[0]

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def api():
    return FakeAPI()


@pytest.fixture
def client(api):
    """A client with a public key only."""
    with OpenAgendaClient(
        public_key="test-public-key",
        client_options={"transport": api.transport},
    ) as client:
        yield client


@pytest.fixture
def writer(api):
    """A client with both keys."""
    with OpenAgendaClient(
        public_key="test-public-key",
        secret_key="test-secret-key",
        client_options={"transport": api.transport},
    ) as client:
        yield client
