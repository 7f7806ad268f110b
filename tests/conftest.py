"""Shared test fixtures.

`requests.post` is replaced per test so adapter tests never touch the network;
the rate limiter is reset so HTTP tests do not leak counts into each other.
"""

import pytest

from app.api import rate_limit
from app.llm import client


class FakeResponse:
    """Minimal stand-in for `requests.Response`."""

    def __init__(self, status_code=200, payload=None, raise_on_json=False):
        self.status_code = status_code
        self._payload = payload
        self._raise_on_json = raise_on_json

    def json(self):
        if self._raise_on_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class PostRecorder:
    """Callable replacing `requests.post`; records calls, replays one response."""

    def __init__(self):
        self.calls = []
        self.response = FakeResponse()
        self.exception = None

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.exception is not None:
            raise self.exception
        return self.response

    def respond(self, status_code=200, payload=None, raise_on_json=False):
        self.response = FakeResponse(status_code, payload, raise_on_json)

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def fake_post(monkeypatch):
    recorder = PostRecorder()
    monkeypatch.setattr(client.requests, "post", recorder)
    return recorder


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limit.limiter.reset()
    yield
    rate_limit.limiter.reset()
