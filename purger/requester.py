"""
purger.requester — Single-attempt HTTP execution and response classification.

``RateLimitedRequester.execute`` performs exactly one network call and turns
the response into a tagged ``Outcome``.  It never sleeps: on a 429 it reports
how long the caller should wait and leaves the waiting to the caller.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

import requests

from purger.throttle import REQUEST_TIMEOUT

# Length of response text kept in error outcomes
BODY_SNIPPET_CHARS = 200


class OutcomeKind(str, Enum):
    OK = "ok"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class RequestSpec:
    method: str
    url: str
    headers: dict = field(default_factory=dict)
    params: Optional[dict] = None


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    status: Optional[int] = None
    body: Any = None
    wait_ms: int = 0

    @classmethod
    def ok(cls, body: Any = None, status: int = 200) -> "Outcome":
        return cls(OutcomeKind.OK, status=status, body=body)

    @classmethod
    def rate_limited(cls, wait_ms: int, body: Any = None) -> "Outcome":
        return cls(OutcomeKind.RATE_LIMITED, status=429, body=body, wait_ms=wait_ms)

    @classmethod
    def error(cls, status: Optional[int], body: Any = None) -> "Outcome":
        return cls(OutcomeKind.ERROR, status=status, body=body)

    @classmethod
    def fatal(cls, status: int, body: Any = None) -> "Outcome":
        return cls(OutcomeKind.FATAL, status=status, body=body)

    @property
    def is_transport_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR and self.status is None

    def describe(self) -> str:
        """Short human-readable summary used in logs and failure reports."""
        if self.is_transport_error:
            return f"transport error: {self.body}"
        label = f"HTTP {self.status}" if self.status is not None else self.kind.value
        if self.body in (None, ""):
            return label
        return f"{label}: {str(self.body)[:BODY_SNIPPET_CHARS]}"


def _header_wait_ms(value: Optional[str]) -> Optional[int]:
    """``retry-after`` header → milliseconds (whole seconds, fraction dropped)."""
    if value is None:
        return None
    try:
        seconds = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None
    return seconds * 1000 if seconds >= 0 else None


def _body_wait_ms(body: Any) -> Optional[int]:
    """JSON body ``retry_after`` (fractional seconds) → ceil milliseconds."""
    if not isinstance(body, dict):
        return None
    raw = body.get("retry_after")
    if not raw or isinstance(raw, bool):
        return None
    try:
        wait_ms = math.ceil(float(raw) * 1000)
    except (TypeError, ValueError, OverflowError):
        return None
    return wait_ms if wait_ms >= 0 else None


def compute_wait_ms(
    headers: Mapping,
    body: Any,
    default_wait_ms: int,
    min_delay_ms: int,
) -> int:
    """
    Decide how long to back off after a 429.

    Precedence: ``retry-after`` header, then ``retry_after`` in the JSON body,
    then ``default_wait_ms``.  The result is never below ``min_delay_ms``.
    """
    wait_ms = _header_wait_ms(headers.get("retry-after") if headers else None)
    if wait_ms is None:
        wait_ms = _body_wait_ms(body)
    if wait_ms is None:
        wait_ms = default_wait_ms
    return max(wait_ms, min_delay_ms)


def _json_or_none(resp) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


class RateLimitedRequester:
    """Issues one request per ``execute`` call and classifies the response."""

    def __init__(self, min_delay_ms: int, default_wait_ms: int, timeout: float = REQUEST_TIMEOUT):
        self.min_delay_ms = min_delay_ms
        self.default_wait_ms = default_wait_ms
        self.timeout = timeout

    def execute(self, request: RequestSpec) -> Outcome:
        try:
            resp = requests.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            return Outcome.error(None, f"{type(e).__name__}: {e}")

        status = resp.status_code

        if status == 429:
            body = _json_or_none(resp)
            wait_ms = compute_wait_ms(resp.headers, body, self.default_wait_ms, self.min_delay_ms)
            return Outcome.rate_limited(wait_ms, body=body)

        if status == 401:
            return Outcome.fatal(status, resp.text)

        if 200 <= status < 300:
            if status == 204 or not resp.content:
                return Outcome.ok(None, status=status)
            try:
                return Outcome.ok(resp.json(), status=status)
            except ValueError:
                return Outcome.error(status, resp.text)

        return Outcome.error(status, resp.text)
