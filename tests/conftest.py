from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from prompt2sql.store import MemoryCredentialStore


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, body: object | None = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_body(self) -> dict[str, object]:
        return json.loads(self.requests[-1].content)


def completion(content: str | None) -> dict[str, object]:
    return {
        "id": "cmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


@pytest.fixture
def store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture
def mock_http() -> Callable[[RecordingHandler], httpx.AsyncClient]:
    def factory(handler: RecordingHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
