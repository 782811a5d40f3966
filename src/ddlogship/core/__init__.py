"""Core batching, serialization and configuration for ddlogship."""

from .config import WriterConfig, build_tags, parse_config
from .entry import LogEntry, Record, build_entry
from .errors import (
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
from .levels import Level, map_level
from .writer import DatadogWriter

__all__ = [
    "CompressionError",
    "DatadogWriter",
    "DeliveryError",
    "DeliveryTransportError",
    "ErrorCategory",
    "ErrorHandler",
    "Level",
    "LogEntry",
    "MissingCredentialError",
    "Record",
    "RemoteStatusError",
    "SerializationError",
    "ShipperError",
    "WriterClosedError",
    "WriterConfig",
    "build_entry",
    "build_tags",
    "map_level",
    "parse_config",
]
