# src/refreshable/core/config.py
"""
Refresh settings persistence (platformdirs + JSON).

Persisted items (schema v1):
- concurrency: str      (default ConcurrencyPolicy for new coordinators)
- trace_events: bool    (log every EventBus emission)
- log_level: str        (console log level passed to setup_logging)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Optional "create_if_missing" flag to write defaults on first run

Design:
- RefreshConfigData dataclass holds JSON-friendly data (dot access)
- RefreshConfig manager provides explicit API for load/save and common operations
- Field metadata describes how a GUI would edit each field
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from platformdirs import user_config_dir

from refreshable.core.coordinator import ConcurrencyPolicy
from refreshable.core.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

DEFAULT_CONCURRENCY: str = ConcurrencyPolicy.PARALLEL.value
DEFAULT_TRACE_EVENTS: bool = False
DEFAULT_LOG_LEVEL: str = "INFO"

CONCURRENCY_OPTIONS: List[str] = [p.value for p in ConcurrencyPolicy]
LOG_LEVEL_OPTIONS: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _coerce_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.lower() in ("true", "1", "yes", "on")
    if isinstance(raw, (int, float)):
        return bool(raw)
    return default


@dataclass
class RefreshConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly; field metadata drives option widgets.
    """
    schema_version: int = SCHEMA_VERSION

    concurrency: str = field(
        default=DEFAULT_CONCURRENCY,
        metadata={
            "widget_type": "select",
            "label": "Concurrency",
            "options": CONCURRENCY_OPTIONS,
            "requires_restart": False,
        },
    )

    trace_events: bool = field(
        default=DEFAULT_TRACE_EVENTS,
        metadata={
            "widget_type": "checkbox",
            "label": "Trace Events",
            "requires_restart": True,
        },
    )

    log_level: str = field(
        default=DEFAULT_LOG_LEVEL,
        metadata={
            "widget_type": "select",
            "label": "Log Level",
            "options": LOG_LEVEL_OPTIONS,
            "requires_restart": True,
        },
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "RefreshConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - replaces invalid or missing values with defaults
        """
        try:
            schema_version = int(d.get("schema_version", -1))
        except (TypeError, ValueError):
            schema_version = -1

        concurrency_raw = d.get("concurrency", DEFAULT_CONCURRENCY)
        concurrency = DEFAULT_CONCURRENCY
        if isinstance(concurrency_raw, str) and concurrency_raw.lower() in CONCURRENCY_OPTIONS:
            concurrency = concurrency_raw.lower()
        else:
            logger.warning(f"Invalid concurrency '{concurrency_raw}', using default '{DEFAULT_CONCURRENCY}'")

        trace_events = _coerce_bool(d.get("trace_events", DEFAULT_TRACE_EVENTS), DEFAULT_TRACE_EVENTS)

        log_level_raw = d.get("log_level", DEFAULT_LOG_LEVEL)
        log_level = DEFAULT_LOG_LEVEL
        if isinstance(log_level_raw, str) and log_level_raw.upper() in LOG_LEVEL_OPTIONS:
            log_level = log_level_raw.upper()
        else:
            logger.warning(f"Invalid log_level '{log_level_raw}', using default '{DEFAULT_LOG_LEVEL}'")

        return cls(
            schema_version=schema_version,
            concurrency=concurrency,
            trace_events=trace_events,
            log_level=log_level,
        )


class RefreshConfig:
    """
    Manager for loading/saving RefreshConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[RefreshConfigData] = None):
        self.path = path
        self.data = data if data is not None else RefreshConfigData()

    # -----------------------------
    # Construction / persistence
    # -----------------------------
    @staticmethod
    def default_config_path(
        app_name: str = "refreshable",
        filename: str = "refresh_config.json",
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/refreshable/refresh_config.json
        Linux:   ~/.config/refreshable/refresh_config.json
        Windows: %APPDATA%\\refreshable\\refresh_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = "refreshable",
        filename: str = "refresh_config.json",
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "RefreshConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = RefreshConfigData(schema_version=schema_version)

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(parsed, dict):
                logger.warning(f"Refresh config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = RefreshConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"Refresh config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    return cls(path=path, data=default_data)
                loaded.schema_version = int(schema_version)

            return cls(path=path, data=loaded)

        except FileNotFoundError:
            logger.info(f"Refresh config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except Exception as e:
            logger.error(f"Failed to load refresh config from {path}: {e}", exc_info=True)
            return cls(path=path, data=default_data)

    def save(self) -> None:
        """Write config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"saving refresh config to {self.path}")
        self.path.write_text(json.dumps(self.data.to_json_dict(), indent=2), encoding="utf-8")

    def ensure_exists(self) -> None:
        """Create the config file on disk if it doesn't exist (writes current data)."""
        if not self.path.exists():
            self.save()

    # -----------------------------
    # Public API: attribute access
    # -----------------------------
    def get_attribute(self, key: str) -> Any:
        """
        Get attribute value by key.

        Raises:
            AttributeError: If key doesn't exist
        """
        if not hasattr(self.data, key):
            raise AttributeError(f"RefreshConfigData has no attribute '{key}'")
        return getattr(self.data, key)

    def set_attribute(self, key: str, value: Any) -> None:
        """
        Set attribute value by key with validation against field metadata.

        Raises:
            AttributeError: If key doesn't exist
            ValueError: If value is invalid for the attribute
        """
        field_info = next((f for f in fields(self.data) if f.name == key), None)
        if field_info is None or key == "schema_version":
            raise AttributeError(f"RefreshConfigData has no settable attribute '{key}'")

        current_value = getattr(self.data, key)
        if isinstance(current_value, bool):
            if not isinstance(value, bool):
                raise ValueError(f"Invalid value type for '{key}': expected bool, got {type(value).__name__}")
        elif not isinstance(value, type(current_value)):
            try:
                value = type(current_value)(value)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value type for '{key}': {e}")

        options = field_info.metadata.get("options")
        if field_info.metadata.get("widget_type") == "select" and options and value not in options:
            raise ValueError(f"Value '{value}' not in allowed options: {options}")

        setattr(self.data, key, value)
        logger.debug(f"Set refresh_config.{key} = {value}")

    def get_field_metadata(self, key: str) -> Dict[str, Any]:
        """Metadata for a field (widget_type, label, options, ...)."""
        for f in fields(self.data):
            if f.name == key:
                return dict(f.metadata)
        raise AttributeError(f"RefreshConfigData has no attribute '{key}'")

    # -----------------------------
    # Public API: concurrency policy
    # -----------------------------
    def get_policy(self) -> ConcurrencyPolicy:
        """Return the configured default ConcurrencyPolicy."""
        try:
            return ConcurrencyPolicy(self.data.concurrency)
        except ValueError:
            return ConcurrencyPolicy(DEFAULT_CONCURRENCY)

    def set_policy(self, policy: Union[ConcurrencyPolicy, str]) -> None:
        """Set the default ConcurrencyPolicy (raises ValueError for unknown values)."""
        self.data.concurrency = ConcurrencyPolicy(policy).value
        logger.debug(f"Set refresh_config.concurrency = {self.data.concurrency}")

    def get_trace_events(self) -> bool:
        return bool(self.data.trace_events)

    def get_log_level(self) -> str:
        return self.data.log_level
