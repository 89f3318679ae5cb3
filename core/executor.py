# =============================================================================
# core/executor.py  —  Resilient Request Executor (rate limit + retry)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Issues ONE logical outbound HTTP call and returns the parsed JSON body.
#   Every provider call in the project goes through RequestExecutor.execute().
#
# THE ATTEMPT LOOP:
#
#     ┌──▶ sleep(rate_limit_delay)          paid before EVERY attempt
#     │    send request
#     │      2xx          → parse JSON → return   (bad JSON is terminal)
#     │      429          → retryable
#     │      other non-2xx→ terminal RequestError("HTTP <status>: <reason>")
#     │      DNS/refused/timeout → retryable
#     │    retryable and attempt_count < max_retries:
#     │      sleep(backoff_base * 2^attempt_count)
#     └───── attempt_count += 1
#          otherwise → RequestError wrapping the last cause
#
#   The two sleeps are additive.  With the defaults (1s throttle, 3 retries,
#   1s backoff base) a call that keeps hitting 429 sleeps
#   1 + 1 + 1 + 2 + 1 + 4 + 1 = 11 seconds before giving up.
#
#   Retry-After headers are not read.  Retries are local to one execute()
#   call; nothing is shared between calls.
# =============================================================================

import http.client
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from core.config import BACKOFF_BASE, MAX_RETRIES, RATE_LIMIT_DELAY, REQUEST_TIMEOUT, Settings
from core.errors import RequestError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType({
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": "nft-scanner-mcp/1.0",
})

TOO_MANY_REQUESTS = 429


# -----------------------------------------------------------------------------
# RequestDescriptor — what to send (immutable once built)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class RequestDescriptor:
    """A single outbound HTTP request.

    `label` names the call in log lines so URLs carrying API keys in their
    path never get logged.
    """

    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    label: str = ""

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def get(
        cls,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        label: str = "",
    ) -> "RequestDescriptor":
        """Build a GET request, dropping query params whose value is None."""
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if query:
            url = f"{url}?{urllib.parse.urlencode(query)}"
        return cls(url=url, headers=headers or {}, label=label)

    @classmethod
    def post_json(
        cls,
        url: str,
        body: Any,
        headers: Optional[Mapping[str, str]] = None,
        label: str = "",
    ) -> "RequestDescriptor":
        return cls(url=url, method="POST", headers=headers or {}, body=body, label=label)

    @property
    def display_name(self) -> str:
        return self.label or urllib.parse.urlsplit(self.url).netloc


# -----------------------------------------------------------------------------
# AttemptState — bookkeeping for one execute() call
# -----------------------------------------------------------------------------
@dataclass
class AttemptState:
    descriptor: RequestDescriptor
    attempt_count: int = 0             # retries already spent (0 on the first try)
    last_error: Optional[RequestError] = None


class RequestExecutor:
    """Rate-limited, retrying HTTP client returning parsed JSON.

    Args:
        rate_limit_delay: Seconds slept before every attempt.
        max_retries: Extra attempts allowed after the first.
        backoff_base: Seconds; the delay before retry n (n = 0, 1, ...) is
            backoff_base * 2**n.
        timeout: Per-attempt socket timeout in seconds.
        opener: Callable with urllib.request.urlopen's signature.
        sleep: Callable taking seconds; time.sleep unless a test swaps it.
    """

    def __init__(
        self,
        rate_limit_delay: float = RATE_LIMIT_DELAY,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = BACKOFF_BASE,
        timeout: float = REQUEST_TIMEOUT,
        opener: Optional[Callable[..., Any]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.timeout = timeout
        self._opener = opener or urllib.request.urlopen
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RequestExecutor":
        return cls(
            rate_limit_delay=settings.rate_limit_delay,
            max_retries=settings.max_retries,
            backoff_base=settings.backoff_base,
            timeout=settings.request_timeout,
            **kwargs,
        )

    def backoff_delay(self, attempt_count: int) -> float:
        """Delay slept after a retryable failure on attempt `attempt_count`."""
        return (2 ** attempt_count) * self.backoff_base

    def execute(self, descriptor: RequestDescriptor) -> Any:
        """Send `descriptor` until it succeeds, fails terminally, or runs out of retries.

        Returns:
            The response body parsed as JSON.

        Raises:
            RequestError: on a non-retryable failure (immediately) or after
                1 + max_retries retryable failures.  `.cause` holds the last
                underlying error.
        """
        state = AttemptState(descriptor)

        while True:
            self._sleep(self.rate_limit_delay)
            try:
                return self._attempt(state)
            except RequestError as exc:
                exc.attempts = state.attempt_count + 1
                if not exc.retryable:
                    raise
                state.last_error = exc

            if state.attempt_count >= self.max_retries:
                attempts = state.attempt_count + 1
                logger.error(
                    "%s failed after %d attempts: %s",
                    descriptor.display_name, attempts, state.last_error,
                )
                raise RequestError(
                    f"{state.last_error} (gave up after {attempts} attempts)",
                    cause=state.last_error,
                    status=state.last_error.status,
                    retryable=True,
                    attempts=attempts,
                ) from state.last_error

            delay = self.backoff_delay(state.attempt_count)
            logger.warning(
                "%s attempt %d failed (%s); retrying in %.1fs",
                descriptor.display_name, state.attempt_count + 1, state.last_error, delay,
            )
            self._sleep(delay)
            state.attempt_count += 1

    # -------------------------------------------------------------------------
    # One attempt
    # -------------------------------------------------------------------------
    def _attempt(self, state: AttemptState) -> Any:
        descriptor = state.descriptor
        logger.debug(
            "%s %s (attempt %d)", descriptor.method, descriptor.display_name, state.attempt_count + 1
        )

        data = None
        if descriptor.body is not None:
            data = json.dumps(descriptor.body).encode("utf-8")

        request = urllib.request.Request(
            descriptor.url,
            data=data,
            headers={**DEFAULT_HEADERS, **descriptor.headers},
            method=descriptor.method,
        )

        try:
            with self._opener(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                reason = getattr(response, "reason", "")
                raw = response.read()
        except urllib.error.HTTPError as exc:
            raise _status_error(exc.code, exc.reason, exc) from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            reason = getattr(exc, "reason", None) or exc
            raise RequestError(f"Network error: {reason}", cause=exc, retryable=True) from exc

        if not 200 <= status < 300:
            raise _status_error(status, reason)

        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise RequestError(
                f"Invalid JSON from {descriptor.display_name}: {exc}", cause=exc, status=status
            ) from exc


def _status_error(
    status: int, reason: Any, cause: Optional[BaseException] = None
) -> RequestError:
    return RequestError(
        f"HTTP {status}: {reason}",
        cause=cause,
        status=status,
        retryable=status == TOO_MANY_REQUESTS,
    )
