"""
Environment-driven settings using Pydantic v2 Settings.

``WriterSettings`` reads the conventional ``DD_*`` variables so a hosting
application can build a writer without wiring every option by hand.
``DiagnosticsSettings`` controls internal diagnostics output.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    NoDecode,
    SettingsConfigDict,
)

from .config import WriterConfig
from .errors import ErrorHandler


class WriterSettings(BaseSettings):
    """Writer options sourced from ``DD_*`` environment variables."""

    api_key: str = Field(default="", description="Datadog API key")
    site: str = Field(default="", description="Datadog site, e.g. datadoghq.eu")
    service: str = ""
    env: str = Field(default="", description="Deployment environment tag")
    version: str = ""
    source: str = ""
    hostname: str = ""
    # Raw env value goes to _parse_tags instead of being JSON-decoded first
    tags: Annotated[dict[str, str], NoDecode] = Field(default_factory=dict)
    batch_size: int = 0
    flush_interval: float = 0.0
    timeout: float = 0.0
    max_retries: int = 0
    retry_delay: float = 0.0
    enable_compression: bool = False

    model_config = SettingsConfigDict(
        env_prefix="DD_",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _parse_tags(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return cls._parse_env_tags(value)
        return value

    @staticmethod
    def _parse_env_tags(raw: str) -> dict[str, str]:
        """Parse a JSON object or a ``k:v,k2:v2`` list into a mapping."""
        raw = raw.strip()
        if not raw:
            return {}
        if raw.startswith("{"):
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid tags JSON: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError("tags must decode to a JSON object")
            return {str(k): str(v) for k, v in data.items()}
        tags: dict[str, str] = {}
        for part in raw.split(","):
            part = part.strip()
            if not part:
                continue
            key, _, value = part.partition(":")
            tags[key.strip()] = value.strip()
        return tags

    def to_config(
        self,
        *,
        on_error: ErrorHandler | None = None,
        **overrides: Any,
    ) -> WriterConfig:
        data: dict[str, Any] = {
            "api_key": self.api_key,
            "site": self.site,
            "service": self.service,
            "environment": self.env,
            "version": self.version,
            "source": self.source,
            "hostname": self.hostname,
            "tags": self.tags,
            "batch_size": self.batch_size,
            "flush_interval": self.flush_interval,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_delay": self.retry_delay,
            "enable_compression": self.enable_compression,
            "on_error": on_error,
        }
        data.update(overrides)
        return WriterConfig(**data)


class DiagnosticsSettings(BaseSettings):
    internal_logging_enabled: bool = Field(
        default=False, description="Emit DEBUG/WARN diagnostics for internal errors"
    )

    model_config = SettingsConfigDict(
        env_prefix="DDLOGSHIP_",
        extra="ignore",
        case_sensitive=False,
    )
