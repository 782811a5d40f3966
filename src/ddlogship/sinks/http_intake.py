"""
HTTP delivery to the Datadog logs intake API.

``IntakeSender`` POSTs a serialized batch with bounded retries:

- 2xx: delivered
- transport failure (connect, timeout, network): retried
- 4xx: not retried, the same payload would be rejected again
- 5xx or any other status: retried

When the budget is exhausted the last error is raised to the caller.
"""

from __future__ import annotations

import time
from typing import Callable, Final

import httpx

from ..core import diagnostics
from ..core.errors import DeliveryError, DeliveryTransportError, RemoteStatusError
from ..core.retry import RetryPolicy
from ..core.serialization import CONTENT_TYPE, SerializedView
from ..metrics.metrics import MetricsCollector

API_KEY_HEADER: Final[str] = "DD-API-KEY"
INTAKE_PATH: Final[str] = "/v1/input/{api_key}"

_LOCAL_MARKERS: Final[tuple[str, ...]] = ("localhost", "127.0.0.1")


def is_local_site(site: str) -> bool:
    return any(marker in site for marker in _LOCAL_MARKERS)


def intake_url(site: str, api_key: str) -> str:
    """Build the intake URL; loopback sites use plain HTTP."""
    path = INTAKE_PATH.format(api_key=api_key)
    if is_local_site(site):
        return f"http://{site}{path}"
    return f"https://http-intake.logs.{site}{path}"


def _body_snippet(response: httpx.Response) -> str | None:
    try:
        return response.text[:256]
    except Exception:
        return None


class IntakeSender:
    """Sends serialized batches to the intake endpoint over a shared client."""

    def __init__(
        self,
        *,
        site: str,
        api_key: str,
        timeout: float,
        retry: RetryPolicy,
        client: httpx.Client | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._url = intake_url(site, api_key)
        self._api_key = api_key
        self._timeout = timeout
        self._retry = retry
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._metrics = metrics
        self._sleep = sleep

    @property
    def url(self) -> str:
        return self._url

    def _headers(self, payload: SerializedView) -> dict[str, str]:
        headers = {
            "Content-Type": CONTENT_TYPE,
            API_KEY_HEADER: self._api_key,
        }
        if payload.content_encoding:
            headers["Content-Encoding"] = payload.content_encoding
        return headers

    def send(self, payload: SerializedView, *, batch_size: int) -> None:
        """Deliver ``payload``, raising the last ``DeliveryError`` on failure."""
        headers = self._headers(payload)
        last_error: DeliveryError | None = None

        for attempt in range(self._retry.attempts):
            if attempt > 0:
                self._sleep(self._retry.delay_for(attempt))
            if self._metrics is not None:
                self._metrics.record_attempt(retry=attempt > 0)

            try:
                response = self._client.post(
                    self._url,
                    content=payload.data,
                    headers=headers,
                    timeout=self._timeout,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                last_error = DeliveryTransportError(
                    "failed to send request",
                    attempts=attempt + 1,
                    batch_size=batch_size,
                    cause=exc,
                )
                diagnostics.debug(
                    "intake-sender",
                    "delivery attempt failed",
                    attempt=attempt + 1,
                    error=str(exc),
                )
                continue

            if 200 <= response.status_code < 300:
                return

            status_error = RemoteStatusError(
                response.status_code,
                attempts=attempt + 1,
                batch_size=batch_size,
                body=_body_snippet(response),
            )
            last_error = status_error
            diagnostics.debug(
                "intake-sender",
                "delivery attempt rejected",
                attempt=attempt + 1,
                status_code=response.status_code,
            )
            if not status_error.retryable:
                break

        if last_error is None:
            raise DeliveryError(
                "no delivery attempt was made", batch_size=batch_size
            )
        raise last_error

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
