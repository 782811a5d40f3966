"""
Error hierarchy for the batching shipper.

Every failure the writer can surface is a ``ShipperError`` tagged with an
``ErrorCategory``. Construction-fatal errors are raised immediately; batch
failures are reported to the configured error handler and raised to the
caller that triggered the flush, if any.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    SERIALIZATION = "serialization"
    COMPRESSION = "compression"
    TRANSPORT = "transport"
    REMOTE = "remote"
    LIFECYCLE = "lifecycle"


class ShipperError(Exception):
    """Base class for all ddlogship errors."""

    category: ErrorCategory = ErrorCategory.LIFECYCLE

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class MissingCredentialError(ShipperError, ValueError):
    """Raised at construction when no API key is configured."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str = "API key is required") -> None:
        super().__init__(message)


class SerializationError(ShipperError):
    category = ErrorCategory.SERIALIZATION


class CompressionError(ShipperError):
    category = ErrorCategory.COMPRESSION


class DeliveryError(ShipperError):
    """A batch could not be delivered within the retry budget."""

    category = ErrorCategory.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        attempts: int = 0,
        batch_size: int = 0,
        category: ErrorCategory | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, category=category, cause=cause)
        self.attempts = attempts
        self.batch_size = batch_size


class RemoteStatusError(DeliveryError):
    """The intake endpoint answered with a non-2xx status."""

    category = ErrorCategory.REMOTE

    def __init__(
        self,
        status_code: int,
        *,
        attempts: int = 0,
        batch_size: int = 0,
        body: str | None = None,
    ) -> None:
        super().__init__(
            f"datadog API error: status {status_code}",
            attempts=attempts,
            batch_size=batch_size,
        )
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        # Client errors will not succeed on a resend of the same payload
        return not 400 <= self.status_code < 500


class DeliveryTransportError(DeliveryError):
    """Connection, timeout or other transport-level failure."""

    category = ErrorCategory.TRANSPORT
    retryable = True


class WriterClosedError(ShipperError):
    category = ErrorCategory.LIFECYCLE

    def __init__(self, message: str = "writer is closed") -> None:
        super().__init__(message)


@runtime_checkable
class ErrorHandler(Protocol):
    """Sink for irrecoverable batch failures, injected at construction."""

    def __call__(self, error: ShipperError) -> None:  # pragma: no cover
        ...


__all__ = [
    "CompressionError",
    "DeliveryError",
    "DeliveryTransportError",
    "ErrorCategory",
    "ErrorHandler",
    "MissingCredentialError",
    "RemoteStatusError",
    "SerializationError",
    "ShipperError",
    "WriterClosedError",
]
