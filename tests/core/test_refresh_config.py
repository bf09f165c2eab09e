# tests/core/test_refresh_config.py
"""Tests for RefreshConfig persistence and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from refreshable.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TRACE_EVENTS,
    SCHEMA_VERSION,
    RefreshConfig,
    RefreshConfigData,
)
from refreshable.core.coordinator import ConcurrencyPolicy


def test_load_defaults_when_missing(config_path: Path) -> None:
    """Missing file -> defaults, nothing written."""
    cfg = RefreshConfig.load(config_path=config_path)
    assert cfg.path == config_path
    assert cfg.data.schema_version == SCHEMA_VERSION
    assert cfg.get_attribute("concurrency") == DEFAULT_CONCURRENCY
    assert cfg.get_trace_events() is DEFAULT_TRACE_EVENTS
    assert cfg.get_log_level() == DEFAULT_LOG_LEVEL
    assert cfg.get_policy() is ConcurrencyPolicy.PARALLEL
    assert not config_path.exists()


def test_create_if_missing_writes_defaults(config_path: Path) -> None:
    RefreshConfig.load(config_path=config_path, create_if_missing=True)
    assert config_path.exists()

    loaded = json.loads(config_path.read_text(encoding="utf-8"))
    assert loaded["schema_version"] == SCHEMA_VERSION
    assert loaded["concurrency"] == DEFAULT_CONCURRENCY


def test_save_and_load_roundtrip(config_path: Path) -> None:
    cfg = RefreshConfig.load(config_path=config_path)
    cfg.set_policy(ConcurrencyPolicy.SEQUENTIAL)
    cfg.set_attribute("trace_events", True)
    cfg.set_attribute("log_level", "DEBUG")
    cfg.save()

    cfg2 = RefreshConfig.load(config_path=config_path)
    assert cfg2.get_policy() is ConcurrencyPolicy.SEQUENTIAL
    assert cfg2.get_trace_events() is True
    assert cfg2.get_log_level() == "DEBUG"


def test_set_attribute_validates_options(config_path: Path) -> None:
    cfg = RefreshConfig.load(config_path=config_path)

    cfg.set_attribute("concurrency", "sequential")
    assert cfg.get_policy() is ConcurrencyPolicy.SEQUENTIAL

    with pytest.raises(ValueError, match="not in allowed options"):
        cfg.set_attribute("concurrency", "random")

    with pytest.raises(ValueError):
        cfg.set_attribute("trace_events", "yes")

    with pytest.raises(AttributeError):
        cfg.set_attribute("missing", 1)

    with pytest.raises(AttributeError):
        cfg.set_attribute("schema_version", 99)


def test_set_policy_rejects_unknown(config_path: Path) -> None:
    cfg = RefreshConfig.load(config_path=config_path)
    with pytest.raises(ValueError):
        cfg.set_policy("random")
    assert cfg.get_policy() is ConcurrencyPolicy.PARALLEL


def test_get_attribute_unknown_raises(config_path: Path) -> None:
    cfg = RefreshConfig.load(config_path=config_path)
    with pytest.raises(AttributeError):
        cfg.get_attribute("nope")


def test_field_metadata(config_path: Path) -> None:
    cfg = RefreshConfig.load(config_path=config_path)
    meta = cfg.get_field_metadata("concurrency")
    assert meta["widget_type"] == "select"
    assert meta["options"] == ["parallel", "sequential"]
    with pytest.raises(AttributeError):
        cfg.get_field_metadata("nope")


def test_corrupt_file_uses_defaults(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text("{not json", encoding="utf-8")

    cfg = RefreshConfig.load(config_path=config_path)
    assert cfg.data == RefreshConfigData()


def test_non_dict_file_uses_defaults(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    config_path.write_text("[1, 2, 3]", encoding="utf-8")

    cfg = RefreshConfig.load(config_path=config_path)
    assert cfg.data == RefreshConfigData()


def test_schema_mismatch_resets_by_default(config_path: Path) -> None:
    config_path.parent.mkdir(parents=True)
    payload = {"schema_version": SCHEMA_VERSION + 1, "concurrency": "sequential"}
    config_path.write_text(json.dumps(payload), encoding="utf-8")

    cfg = RefreshConfig.load(config_path=config_path)
    assert cfg.get_policy() is ConcurrencyPolicy.PARALLEL

    kept = RefreshConfig.load(config_path=config_path, reset_on_version_mismatch=False)
    assert kept.get_policy() is ConcurrencyPolicy.SEQUENTIAL
    assert kept.data.schema_version == SCHEMA_VERSION


def test_from_json_dict_is_tolerant() -> None:
    data = RefreshConfigData.from_json_dict(
        {
            "schema_version": SCHEMA_VERSION,
            "concurrency": "SEQUENTIAL",
            "trace_events": "on",
            "log_level": "verbose",
            "unknown": 1,
        }
    )
    assert data.concurrency == "sequential"
    assert data.trace_events is True
    assert data.log_level == DEFAULT_LOG_LEVEL


def test_to_json_dict_roundtrip() -> None:
    data = RefreshConfigData(concurrency="sequential", trace_events=True, log_level="ERROR")
    assert RefreshConfigData.from_json_dict(data.to_json_dict()) == data
