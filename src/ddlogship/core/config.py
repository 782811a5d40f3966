"""
Writer configuration.

``WriterConfig`` is immutable once built. Numeric options that are left
unset, zero or negative fall back to their defaults instead of failing
validation, so a partially filled configuration is always usable. The API
key is the one option without a default; its absence is reported by the
writer at construction time.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Final, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .errors import ErrorHandler

DEFAULT_SITE: Final[str] = "datadoghq.com"
DEFAULT_SOURCE: Final[str] = "python"
DEFAULT_BATCH_SIZE: Final[int] = 1000
DEFAULT_FLUSH_INTERVAL: Final[float] = 1.0
DEFAULT_TIMEOUT: Final[float] = 10.0
DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_RETRY_DELAY: Final[float] = 0.1
DEFAULT_COMPRESSION_LEVEL: Final[int] = 6

_POSITIVE_FIELDS: Final[tuple[str, ...]] = (
    "batch_size",
    "flush_interval",
    "timeout",
    "max_retries",
    "retry_delay",
)


class WriterConfig(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    api_key: str = Field(default="", description="Datadog API key")
    site: str = Field(default=DEFAULT_SITE, description="Datadog site or host:port")
    service: str = ""
    environment: str = ""
    version: str = ""
    source: str = DEFAULT_SOURCE
    hostname: str = ""
    tags: dict[str, str] = Field(default_factory=dict)
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        description="Entries buffered before a synchronous flush",
    )
    flush_interval: float = Field(
        default=DEFAULT_FLUSH_INTERVAL,
        description="Seconds between timer-triggered flushes",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, description="Per-request timeout in seconds"
    )
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = Field(
        default=DEFAULT_RETRY_DELAY,
        description="Base delay in seconds, multiplied by the retry number",
    )
    enable_compression: bool = False
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    on_error: ErrorHandler | None = None
    drain_on_exit: bool = False

    @field_validator("api_key", mode="before")
    @classmethod
    def _coerce_api_key(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("site", "source", mode="before")
    @classmethod
    def _default_blank_strings(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("service", "environment", "version", "hostname", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Mapping[str, Any] | None) -> dict[str, str]:
        if value is None:
            return {}
        return {str(k): str(v) for k, v in dict(value).items()}

    @field_validator(*_POSITIVE_FIELDS, mode="before")
    @classmethod
    def _default_non_positive(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if isinstance(value, timedelta):
            value = value.total_seconds()
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, str):
            if not value.strip():
                return default
            try:
                numeric = float(value)
            except ValueError:
                # Let the field's own validation reject it
                return value
            return default if numeric <= 0 else value
        if isinstance(value, (int, float)) and value <= 0:
            return default
        return value

    @field_validator("compression_level", mode="before")
    @classmethod
    def _clamp_compression_level(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return DEFAULT_COMPRESSION_LEVEL
        if isinstance(value, int) and not 1 <= value <= 9:
            return DEFAULT_COMPRESSION_LEVEL
        return value


def parse_config(
    config: WriterConfig | Mapping[str, Any] | None = None, **overrides: Any
) -> WriterConfig:
    """Build a ``WriterConfig`` from a model, a mapping or keyword options.

    Keyword overrides win over values in ``config``.
    """
    if isinstance(config, WriterConfig):
        if not overrides:
            return config
        data = config.model_dump()
    elif config is None:
        data = {}
    else:
        data = dict(config)
    data.update(overrides)
    return WriterConfig(**data)


def build_tags(tags: Mapping[str, str]) -> str:
    """Join ``key:value`` pairs with commas. Order is not significant."""
    return ",".join(f"{key}:{value}" for key, value in tags.items())
