"""
Root pytest configuration.
"""

from __future__ import annotations

import gzip
import json
import os
import threading
from collections.abc import Generator
from typing import Any

import httpx
import pytest


def get_test_timeout(base: float, max_multiplier: float = 5.0) -> float:
    """Apply CI timeout multiplier to a base timeout value.

    Environment:
        CI_TIMEOUT_MULTIPLIER: Multiplier for CI environments (default: 1.0)
    """
    raw = os.getenv("CI_TIMEOUT_MULTIPLIER", "1.0")
    try:
        multiplier = float(raw) if raw else 1.0
        multiplier = min(multiplier, max_multiplier)
    except ValueError:
        multiplier = 1.0
    return base * multiplier


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests that talk to a real HTTP server on loopback",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the cached internal-logging flag around each test."""
    import ddlogship.core.diagnostics as diag

    diag._reset_for_tests()
    yield
    diag._reset_for_tests()


@pytest.fixture(autouse=True)
def reset_shutdown_registry() -> Generator[None, None, None]:
    import ddlogship.core.shutdown as shutdown

    shutdown._reset_for_tests()
    yield
    shutdown._reset_for_tests()


@pytest.fixture()
def capture_diagnostics(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[list[dict[str, Any]], None, None]:
    import ddlogship.core.diagnostics as diag

    monkeypatch.setenv("DDLOGSHIP_INTERNAL_LOGGING_ENABLED", "true")
    captured: list[dict[str, Any]] = []
    diag.set_writer_for_tests(captured.append)
    yield captured


class RecordingIntake:
    """In-process stand-in for the intake API behind ``httpx.MockTransport``.

    ``outcomes`` are consumed one per request: an int is a status code, an
    exception is raised from the transport, a Response is returned as is.
    Once exhausted every request is answered with 202.
    """

    def __init__(self, outcomes: list[Any] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()
        self.received = threading.Event()

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
            outcome: Any = self.outcomes.pop(0) if self.outcomes else 202
        self.received.set()
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome)
        return outcome

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    @staticmethod
    def decode(request: httpx.Request) -> list[dict[str, Any]]:
        body = request.content
        if request.headers.get("Content-Encoding") == "gzip":
            body = gzip.decompress(body)
        return json.loads(body)

    def batches(self) -> list[list[dict[str, Any]]]:
        with self._lock:
            requests = list(self.requests)
        return [self.decode(r) for r in requests]


@pytest.fixture()
def intake() -> RecordingIntake:
    return RecordingIntake()
