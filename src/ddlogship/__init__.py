"""
Public entrypoints for ddlogship.

Ships application log records to the Datadog logs intake API in batches,
with size- and time-triggered flushing, bounded retries and optional gzip
compression.

Example:
    from ddlogship import DatadogWriter, Level

    writer = DatadogWriter(api_key=os.environ["DD_API_KEY"], service="api")
    writer.log(Level.INFO, "service started")
    writer.close()
"""

from __future__ import annotations

from ._version import __version__
from .core.config import WriterConfig
from .core.entry import LogEntry, Record
from .core.errors import (
    CompressionError,
    DeliveryError,
    DeliveryTransportError,
    ErrorCategory,
    ErrorHandler,
    MissingCredentialError,
    RemoteStatusError,
    SerializationError,
    ShipperError,
    WriterClosedError,
)
from .core.levels import Level, map_level
from .core.settings import WriterSettings
from .core.writer import DatadogWriter
from .metrics.metrics import MetricsCollector

__all__ = [
    "CompressionError",
    "DatadogWriter",
    "DeliveryError",
    "DeliveryTransportError",
    "ErrorCategory",
    "ErrorHandler",
    "Level",
    "LogEntry",
    "MetricsCollector",
    "MissingCredentialError",
    "Record",
    "RemoteStatusError",
    "SerializationError",
    "ShipperError",
    "VERSION",
    "WriterClosedError",
    "WriterConfig",
    "WriterSettings",
    "__version__",
    "map_level",
]

# Version info for compatibility
VERSION = __version__
