import dataclasses
import json
import socket
import urllib.error

import pytest

from core.config import Settings
from core.errors import RequestError
from core.executor import RequestDescriptor, RequestExecutor

from tests.conftest import FakeResponse, http_error

URL = "https://api.example.test/thing"


def test_success_pays_rate_limit_delay_once(executor, fake_http, sleeps):
    fake_http.add("example.test", {"ok": True})

    assert executor.execute(RequestDescriptor.get(URL)) == {"ok": True}
    assert len(fake_http.requests) == 1
    assert sleeps == [1.0]


def test_429_retries_with_additive_backoff_then_succeeds(executor, fake_http, sleeps):
    fake_http.add(
        "example.test",
        http_error(429, "Too Many Requests"),
        http_error(429, "Too Many Requests"),
        http_error(429, "Too Many Requests"),
        {"ok": True},
    )

    assert executor.execute(RequestDescriptor.get(URL)) == {"ok": True}
    assert len(fake_http.requests) == 4
    # rate limit, backoff 1s, rate limit, backoff 2s, rate limit, backoff 4s, rate limit
    assert sleeps == [1.0, 1.0, 1.0, 2.0, 1.0, 4.0, 1.0]


def test_429_gives_up_after_four_attempts(executor, fake_http, sleeps):
    fake_http.add("example.test", http_error(429, "Too Many Requests"))

    with pytest.raises(RequestError) as excinfo:
        executor.execute(RequestDescriptor.get(URL))

    error = excinfo.value
    assert len(fake_http.requests) == 4
    assert error.attempts == 4
    assert error.status == 429
    assert error.retryable
    assert isinstance(error.cause, RequestError)
    assert "HTTP 429" in str(error)
    assert sleeps == [1.0, 1.0, 1.0, 2.0, 1.0, 4.0, 1.0]


def test_network_errors_are_retried(executor, fake_http):
    fake_http.add("example.test", urllib.error.URLError("Name or service not known"))

    with pytest.raises(RequestError, match="Network error: Name or service not known"):
        executor.execute(RequestDescriptor.get(URL))
    assert len(fake_http.requests) == 4


def test_timeout_then_success(executor, fake_http):
    fake_http.add("example.test", socket.timeout("timed out"), {"ok": 1})

    assert executor.execute(RequestDescriptor.get(URL)) == {"ok": 1}
    assert len(fake_http.requests) == 2


@pytest.mark.parametrize("status, reason", [(404, "Not Found"), (500, "Internal Server Error"), (401, "Unauthorized")])
def test_other_http_errors_are_not_retried(executor, fake_http, sleeps, status, reason):
    fake_http.add("example.test", http_error(status, reason))

    with pytest.raises(RequestError) as excinfo:
        executor.execute(RequestDescriptor.get(URL))

    assert len(fake_http.requests) == 1
    assert sleeps == [1.0]
    assert excinfo.value.status == status
    assert not excinfo.value.retryable
    assert str(excinfo.value) == f"HTTP {status}: {reason}"


def test_non_2xx_status_from_opener_is_classified(executor, fake_http):
    fake_http.add("example.test", FakeResponse({}, status=503, reason="Service Unavailable"))

    with pytest.raises(RequestError, match="HTTP 503: Service Unavailable"):
        executor.execute(RequestDescriptor.get(URL))
    assert len(fake_http.requests) == 1


def test_invalid_json_is_terminal(executor, fake_http):
    fake_http.add("example.test", FakeResponse(raw=b"<html>nope</html>"))

    with pytest.raises(RequestError, match="Invalid JSON"):
        executor.execute(RequestDescriptor.get(URL))
    assert len(fake_http.requests) == 1


def test_zero_retries_means_single_attempt(fake_http, sleeps):
    executor = RequestExecutor(max_retries=0, opener=fake_http, sleep=sleeps.append)
    fake_http.add("example.test", http_error(429, "Too Many Requests"))

    with pytest.raises(RequestError):
        executor.execute(RequestDescriptor.get(URL))
    assert len(fake_http.requests) == 1
    assert sleeps == [1.0]


def test_backoff_doubles_from_base():
    executor = RequestExecutor(backoff_base=0.5)
    assert [executor.backoff_delay(n) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]


def test_from_settings_copies_policy(fake_http):
    settings = Settings(rate_limit_delay=0.25, max_retries=5, backoff_base=2.0, request_timeout=7)
    executor = RequestExecutor.from_settings(settings, opener=fake_http)

    assert executor.rate_limit_delay == 0.25
    assert executor.max_retries == 5
    assert executor.backoff_base == 2.0
    assert executor.timeout == 7


def test_post_sends_json_body_and_merged_headers(executor, fake_http):
    fake_http.add("example.test", {"result": {}})
    descriptor = RequestDescriptor.post_json(URL, {"a": 1}, headers={"X-API-KEY": "secret"})

    executor.execute(descriptor)

    request = fake_http.requests[0]
    assert request.get_method() == "POST"
    assert json.loads(request.data) == {"a": 1}
    assert request.get_header("Content-type") == "application/json"
    assert request.get_header("X-api-key") == "secret"


def test_get_drops_none_params():
    descriptor = RequestDescriptor.get(URL, {"a": "1", "b": None, "c": 3})
    assert descriptor.url == f"{URL}?a=1&c=3"
    assert descriptor.method == "GET"


def test_descriptor_is_immutable():
    descriptor = RequestDescriptor.get(URL, headers={"X": "1"})

    with pytest.raises(dataclasses.FrozenInstanceError):
        descriptor.url = "https://elsewhere.test"
    with pytest.raises(TypeError):
        descriptor.headers["X"] = "2"


def test_label_hides_url_in_display_name():
    assert RequestDescriptor.get(URL, label="alchemy:getNFTs").display_name == "alchemy:getNFTs"
    assert RequestDescriptor.get(URL).display_name == "api.example.test"
