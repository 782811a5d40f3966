"""
Retry budget and linear backoff for batch delivery.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with a delay that grows linearly per retry.

    The first attempt is never delayed; retry ``n`` (1-based) waits
    ``delay * n`` seconds.
    """

    max_retries: int = 3
    delay: float = 0.1

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")

    @property
    def attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait before zero-based ``attempt``."""
        if attempt <= 0:
            return 0.0
        return self.delay * attempt
