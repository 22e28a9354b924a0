"""HTTP client for the prompt evaluation service.

One logical request is at most MAX_RETRIES POSTs, run strictly one after the
other:

    IDLE → ATTEMPTING(n) → SUCCESS
                         → RETRYING(delay) → ATTEMPTING(n + 1)
                         → FAILED

Retry decisions:
  - 4xx: validation/auth problems never heal on their own, fail immediately.
  - 5xx: the service (a cold Lambda, usually) had a transient problem, retry.
  - network errors and timeouts: retry.
  - anything else: a bug, not flakiness, so it propagates unchanged.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass

import requests

from promptlens_core.api.errors import ReviewAPIError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://2pdp5lkd4g5a4hi3aigcdxighe0ebgjy.lambda-url.us-east-1.on.aws/"
DEFAULT_TIMEOUT_MS = 180_000

MAX_RETRIES = 3
BACKOFF_DELAYS_MS = (5_000, 10_000, 20_000)

# Substrings of OS/transport error messages that indicate a dropped connection.
_NETWORK_ERROR_MARKERS = ("ECONNRESET", "ETIMEDOUT", "socket hang up")


def is_retryable_error(error: BaseException) -> bool:
    """Return True for timeouts and connection-level failures."""
    if isinstance(error, (requests.Timeout, requests.ConnectionError, TimeoutError, ConnectionError)):
        return True
    name = type(error).__name__
    if "Timeout" in name or "Abort" in name:
        return True
    message = str(error)
    return any(marker in message for marker in _NETWORK_ERROR_MARKERS) or "network" in message.lower()


class RetryPhase(enum.Enum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class RetryState:
    """Bookkeeping for a single logical request; never shared between calls."""

    max_attempts: int = MAX_RETRIES
    backoff_ms: tuple[int, ...] = BACKOFF_DELAYS_MS
    phase: RetryPhase = RetryPhase.IDLE
    attempt: int = -1
    delay_ms: int = 0
    last_error: BaseException | None = None

    @property
    def can_attempt(self) -> bool:
        return self.phase in (RetryPhase.IDLE, RetryPhase.RETRYING) and self.attempt < self.max_attempts - 1

    def begin_attempt(self) -> None:
        self.attempt += 1
        self.delay_ms = 0
        self.phase = RetryPhase.ATTEMPTING

    def succeed(self) -> None:
        self.phase = RetryPhase.SUCCESS

    def fail(self, error: BaseException) -> None:
        self.last_error = error
        self.phase = RetryPhase.FAILED

    def retry_after(self, error: BaseException) -> bool:
        """Record a transient failure. Returns True if another attempt is allowed."""
        self.last_error = error
        if self.attempt >= self.max_attempts - 1:
            self.phase = RetryPhase.FAILED
            return False
        self.delay_ms = self.backoff_ms[min(self.attempt, len(self.backoff_ms) - 1)]
        self.phase = RetryPhase.RETRYING
        return True


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"API error: {response.status_code}"


class ReviewClient:
    """Sends evaluation requests with bounded retry and fixed backoff.

    ``session`` and ``log`` are injectable so the client can be exercised
    without a network or a configured logging setup. A session the client
    creates itself is closed by ``close()`` or on leaving a ``with`` block;
    an injected session belongs to the caller.

    ``timeout_ms`` is passed to requests as both the connect and the read
    timeout. The read timeout bounds the wait for each chunk of the response,
    not the whole attempt, so a server that keeps trickling bytes can hold an
    attempt open past ``timeout_ms``.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        session: requests.Session | None = None,
        log: logging.Logger | None = None,
    ):
        self.api_url = api_url
        self.timeout_ms = timeout_ms
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.log = log or logger

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> ReviewClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def send(self, request: dict) -> dict:
        """POST ``request`` as JSON and return the decoded response body.

        Raises ReviewAPIError for HTTP failures, or the last network error once
        the attempt budget is spent.
        """
        state = RetryState()
        while state.can_attempt:
            state.begin_attempt()
            try:
                response = self.session.post(
                    self.api_url,
                    json=request,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout_ms / 1000,
                )
            except Exception as e:
                if is_retryable_error(e) and state.retry_after(e):
                    self._backoff(state)
                    continue
                state.fail(e)
                raise

            status = response.status_code
            if 400 <= status < 500:
                error = ReviewAPIError(_error_message(response), status_code=status)
                state.fail(error)
                raise error

            if status >= 500:
                error = ReviewAPIError(f"API returned {status}", status_code=status)
                if state.retry_after(error):
                    self._backoff(state)
                    continue
                raise error

            try:
                data = response.json()
            except ValueError as e:
                state.fail(e)
                raise ReviewAPIError(f"API returned invalid JSON (status {status})", status_code=status) from e
            state.succeed()
            return data

        # Unreachable in practice: every path above returns or raises.
        if state.last_error is not None:
            raise state.last_error
        raise ReviewAPIError("All retry attempts exhausted")

    def _backoff(self, state: RetryState) -> None:
        self.log.warning(
            "API call failed (attempt %d/%d): %s. Retrying in %ds...",
            state.attempt + 1,
            state.max_attempts,
            state.last_error,
            state.delay_ms // 1000,
        )
        time.sleep(state.delay_ms / 1000)


def call_review_api(
    api_url: str,
    request: dict,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    session: requests.Session | None = None,
    log: logging.Logger | None = None,
) -> dict:
    """Convenience wrapper: one request through a fresh ReviewClient."""
    with ReviewClient(api_url, timeout_ms=timeout_ms, session=session, log=log) as client:
        return client.send(request)
