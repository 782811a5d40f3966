from __future__ import annotations

import time

import pytest

import ddlogship.core.entry as entry_mod
from ddlogship.core.config import WriterConfig, build_tags
from ddlogship.core.entry import LogEntry, Record, build_entry
from ddlogship.core.levels import Level


def _config(**kwargs: object) -> WriterConfig:
    return WriterConfig(api_key="k", **kwargs)  # type: ignore[arg-type]


def test_build_entry_stamps_time_and_copies_message(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(entry_mod, "now_ms", lambda: 1_700_000_000_123)
    cfg = _config(service="api", environment="prod", version="2.0", hostname="h1")

    entry = build_entry(Record(Level.WARN, "disk almost full"), cfg, "team:core")

    assert entry.timestamp == 1_700_000_000_123
    assert entry.status == "warn"
    assert entry.message == "disk almost full"
    assert entry.service == "api"
    assert entry.env == "prod"
    assert entry.version == "2.0"
    assert entry.hostname == "h1"
    assert entry.source == "python"
    assert entry.tags == "team:core"


def test_now_ms_is_milliseconds() -> None:
    before = int(time.time() * 1000)
    value = entry_mod.now_ms()
    after = int(time.time() * 1000)
    assert before - 1 <= value <= after + 1


def test_empty_message_is_kept_and_unknown_level_is_info() -> None:
    entry = build_entry(Record("bogus", ""), _config(), "")
    data = entry.to_dict()
    assert data["message"] == ""
    assert data["status"] == "info"


def test_to_dict_omits_empty_descriptive_fields() -> None:
    entry = LogEntry(timestamp=1, status="info", message="m")
    assert entry.to_dict() == {"timestamp": 1, "status": "info", "message": "m"}


def test_to_dict_wire_keys() -> None:
    cfg = _config(
        service="svc",
        source="go",
        environment="dev",
        version="v1",
        hostname="host",
        tags={"a": "1"},
    )
    data = build_entry(Record(Level.ERROR, "boom"), cfg, build_tags(cfg.tags)).to_dict()

    assert data["service"] == "svc"
    assert data["ddsource"] == "go"
    assert data["ddtags"] == "a:1"
    assert data["env"] == "dev"
    assert data["version"] == "v1"
    assert data["hostname"] == "host"
    assert isinstance(data["timestamp"], int)


def test_extra_fields_are_flattened_without_overriding_reserved_keys() -> None:
    record = Record(
        Level.INFO,
        "user login",
        fields={"user_id": 42, "message": "spoofed", "status": "error", "ok": True},
    )
    data = build_entry(record, _config(service="svc"), "").to_dict()

    assert data["user_id"] == 42
    assert data["ok"] is True
    assert data["message"] == "user login"
    assert data["status"] == "info"
    assert data["service"] == "svc"


def test_record_fields_are_copied() -> None:
    fields = {"a": 1}
    entry = build_entry(Record(Level.INFO, "m", fields=fields), _config(), "")
    fields["a"] = 2
    assert entry.fields == {"a": 1}
