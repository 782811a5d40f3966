"""
Batch serialization and compression.

Batches are serialized to a JSON array with orjson, which produces bytes
directly without an intermediate str. Compression uses gzip at the
configured level. Both failures are fatal for the batch: retrying would
not make a malformed payload well-formed.
"""

from __future__ import annotations

import gzip
from dataclasses import dataclass
from typing import Any, Final, Sequence

import orjson

from .entry import LogEntry
from .errors import CompressionError, SerializationError

CONTENT_TYPE: Final[str] = "application/json"
GZIP_ENCODING: Final[str] = "gzip"


def _default(obj: Any) -> Any:
    """Default serializer hook for unsupported types.

    Keep minimal; callers should put plain JSON types in record fields.
    """
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@dataclass
class SerializedView:
    """Serialized payload plus the content encoding applied to it."""

    data: bytes
    content_encoding: str | None = None

    @property
    def view(self) -> memoryview:
        return memoryview(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)


def serialize_entries(entries: Sequence[LogEntry]) -> SerializedView:
    """Serialize entries, in order, to a JSON array."""
    try:
        data = orjson.dumps([entry.to_dict() for entry in entries], default=_default)
    except TypeError as e:
        raise SerializationError("failed to marshal log entries", cause=e) from e
    return SerializedView(data=data)


def gzip_payload(
    view: SerializedView, *, compresslevel: int = 6
) -> SerializedView:
    """Return a gzip-compressed copy of ``view``."""
    try:
        data = gzip.compress(view.data, compresslevel=compresslevel)
    except Exception as e:
        raise CompressionError("failed to compress payload", cause=e) from e
    return SerializedView(data=data, content_encoding=GZIP_ENCODING)
