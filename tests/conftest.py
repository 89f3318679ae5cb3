import io
import json
import urllib.error

import pytest

from core.alchemy import AlchemyClient
from core.config import Settings
from core.dispatcher import ToolDispatcher
from core.executor import RequestExecutor
from core.opensea import OpenSeaClient

FIXED_NOW = "2026-01-01T00:00:00.000Z"


class FakeResponse:
    """Mimics the object urllib.request.urlopen returns."""

    def __init__(self, payload=None, status=200, reason="OK", raw=None):
        self.status = status
        self.reason = reason
        self._raw = raw if raw is not None else json.dumps(payload).encode("utf-8")

    def read(self):
        return self._raw

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def http_error(status, reason, url="https://example.test"):
    return urllib.error.HTTPError(url, status, reason, hdrs=None, fp=io.BytesIO(b""))


class FakeHTTP:
    """Stands in for urlopen: routes each request by a URL fragment.

    Each route holds a queue of outcomes (payload dict, FakeResponse or an
    exception to raise).  The last outcome repeats once the queue is down
    to one entry.
    """

    def __init__(self):
        self.routes = []
        self.requests = []

    def add(self, fragment, *outcomes):
        self.routes.append((fragment, list(outcomes)))

    def __call__(self, request, timeout=None):
        self.requests.append(request)
        for fragment, outcomes in self.routes:
            if fragment in request.full_url:
                outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
                if isinstance(outcome, BaseException):
                    raise outcome
                if isinstance(outcome, FakeResponse):
                    return outcome
                return FakeResponse(outcome)
        raise AssertionError(f"unexpected request to {request.full_url}")

    @property
    def urls(self):
        return [request.full_url for request in self.requests]

    def body(self, index=-1):
        return json.loads(self.requests[index].data.decode("utf-8"))


@pytest.fixture
def fake_http():
    return FakeHTTP()


@pytest.fixture
def sleeps():
    """Records every delay the executor asks for instead of sleeping."""
    return []


@pytest.fixture
def settings():
    return Settings(alchemy_api_key="test-key", opensea_api_key="os-key")


@pytest.fixture
def executor(fake_http, sleeps):
    return RequestExecutor(opener=fake_http, sleep=sleeps.append)


def make_dispatcher(settings, executor):
    return ToolDispatcher(
        alchemy=AlchemyClient(settings, executor),
        opensea=OpenSeaClient(settings, executor),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def dispatcher(settings, executor):
    return make_dispatcher(settings, executor)
