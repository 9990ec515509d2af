"""Configuration models and loaders for jsontruncator.

This module defines the truncation limits, how caller overrides are merged onto
the defaults and validated, how limits decay between shrink passes, and how
settings are loaded from YAML plus environment variable overrides.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

from .encoder import FormatFlags, is_valid_format_flags
from .errors import ConfigurationError

MIN_MAX_LENGTH = 3
MIN_ITEM_LENGTH = 3
MIN_ITEMS = 1

# Accepted override spellings per field. The first spelling is the one used in
# error messages.
_FIELD_SPELLINGS: dict[str, tuple[str, ...]] = {
    "max_length": ("maxLength",),
    "max_items": ("maxItems",),
    "max_item_length": ("maxItemLength",),
    "max_retries": ("maxRetries",),
    "decay_rate": ("decayRate", "decay"),
    "ellipsis": ("ellipsisTemplate",),
    "format_flags": ("formatFlags", "jsonFlags"),
    "depth_limit": ("depthLimit",),
}
_SPELLING_TO_FIELD = {spelling: name for name, spellings in _FIELD_SPELLINGS.items() for spelling in spellings}
FIELD_LABELS = {name: spellings[0] for name, spellings in _FIELD_SPELLINGS.items()}


class TruncationConfig(BaseModel):
    """Immutable limits for one truncation call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Declared before max_item_length so the cross-field check can see it.
    max_length: int = Field(default=40000, ge=MIN_MAX_LENGTH)
    max_items: int = Field(default=100, ge=MIN_ITEMS)
    max_item_length: int = Field(default=8000, ge=MIN_ITEM_LENGTH, validate_default=True)
    max_retries: int = Field(default=5, ge=1)
    decay_rate: float = Field(default=0.5, gt=0.0, lt=1.0)
    ellipsis: str = "..."
    format_flags: int = FormatFlags.NONE
    depth_limit: int = Field(default=256, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _map_field_spellings(cls, data: Any) -> Any:
        """Support camelCase and legacy override names."""
        if not isinstance(data, dict):
            return data
        mapped = dict(data)
        for spelling, canonical in _SPELLING_TO_FIELD.items():
            if spelling not in mapped:
                continue
            value = mapped.pop(spelling)
            if canonical in mapped and mapped[canonical] != value:
                raise ValueError(f"Both '{spelling}' and '{canonical}' are set with different values")
            mapped[canonical] = value
        return mapped

    @field_validator("max_item_length")
    @classmethod
    def _validate_item_length_within_max_length(cls, value: int, info: ValidationInfo) -> int:
        """A single item can never be allowed more room than the whole output."""
        max_length = info.data.get("max_length")
        if max_length is not None and value > max_length:
            raise ValueError(f"must not exceed maxLength ({max_length})")
        return value

    @field_validator("format_flags")
    @classmethod
    def _validate_format_flags(cls, value: int) -> FormatFlags:
        """Reject bits the encoder does not understand."""
        if not is_valid_format_flags(value):
            raise ValueError(f"unknown format flag bits in {value!r}")
        return FormatFlags(value)

    @field_validator("ellipsis", mode="before")
    @classmethod
    def _none_to_empty_ellipsis(cls, value: Any) -> Any:
        """Treat explicit YAML `null` as a disabled marker."""
        if value is None:
            return ""
        return value


DEFAULT_CONFIG = TruncationConfig()


def canonical_field_name(name: str) -> str:
    """Return the model field name for any accepted override spelling."""
    return _SPELLING_TO_FIELD.get(name, name)


def build_config(overrides: TruncationConfig | dict[str, Any] | None = None) -> TruncationConfig:
    """Merge caller overrides onto the defaults and validate the result once.

    Raises ConfigurationError naming the first rejected field.
    """
    if isinstance(overrides, TruncationConfig):
        return overrides
    if overrides is None:
        return DEFAULT_CONFIG
    if not isinstance(overrides, dict):
        raise ConfigurationError("overrides", f"expected a mapping, got {type(overrides).__name__}")
    try:
        return TruncationConfig.model_validate(overrides)
    except ValidationError as exc:
        error = exc.errors()[0]
        loc = error.get("loc") or ()
        name = canonical_field_name(str(loc[0])) if loc else "configuration"
        raise ConfigurationError(FIELD_LABELS.get(name, name), str(error.get("msg", exc))) from exc


def decay(config: TruncationConfig) -> TruncationConfig:
    """Return the tightened configuration for the next shrink pass.

    Both limits are non-increasing and bounded below, so repeated calls reach a
    fixed point. No re-validation happens here.
    """
    return config.model_copy(
        update={
            "max_items": max(math.floor(config.max_items * config.decay_rate), MIN_ITEMS),
            "max_item_length": max(math.floor(config.max_item_length * config.decay_rate), MIN_ITEM_LENGTH),
        }
    )


DEFAULT_SETTINGS_PATH = "jsontruncator.yaml"


class LoggingConfig(BaseModel):
    """Logging-related configuration."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = "WARNING"
    json_logs: bool = Field(default=False, alias="json")


class Settings(BaseModel):
    """Top-level file configuration: truncation overrides plus logging."""

    model_config = ConfigDict(extra="forbid")

    truncation: dict[str, Any] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("truncation", "logging", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        """Treat explicit YAML `null` sections as empty."""
        if value is None:
            return {}
        return value

    def config(self) -> TruncationConfig:
        """Validate the truncation section into a configuration."""
        return build_config(self.truncation)


def _load_yaml(path: str | None) -> dict[str, Any]:
    """Load a YAML file into a dictionary.

    Missing files are treated as empty config for environment-only deployments.
    """
    if not path:
        return {}
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings root must be a mapping: {path}")
    return data


_ENV_MAP = {
    "max_length": "JSONTRUNCATOR_MAX_LENGTH",
    "max_items": "JSONTRUNCATOR_MAX_ITEMS",
    "max_item_length": "JSONTRUNCATOR_MAX_ITEM_LENGTH",
    "max_retries": "JSONTRUNCATOR_MAX_RETRIES",
    "decay_rate": "JSONTRUNCATOR_DECAY_RATE",
    "ellipsis": "JSONTRUNCATOR_ELLIPSIS",
    "logging.level": "JSONTRUNCATOR_LOG_LEVEL",
    "logging.json_logs": "JSONTRUNCATOR_LOG_JSON",
}


def _override_from_env(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides on top of file configuration."""
    out = dict(data)
    truncation = dict(out.get("truncation") or {})
    logging_section = dict(out.get("logging") or {})

    for key, env_name in _ENV_MAP.items():
        value = os.getenv(env_name)
        if value is None:
            continue

        if key == "logging.level":
            logging_section["level"] = value
        elif key == "logging.json_logs":
            logging_section["json"] = value.lower() in {"1", "true", "yes", "on"}
        else:
            for spelling in _FIELD_SPELLINGS[key]:
                truncation.pop(spelling, None)
            if key == "decay_rate":
                truncation[key] = float(value)
            elif key == "ellipsis":
                truncation[key] = value
            else:
                truncation[key] = int(value)

    out["truncation"] = truncation
    out["logging"] = logging_section
    return out


def load_settings(path: str | None = None) -> Settings:
    """Load, merge, and validate file settings.

    The truncation section is validated eagerly so a bad file fails at load time.
    """
    final_path = path or os.getenv("JSONTRUNCATOR_CONFIG") or DEFAULT_SETTINGS_PATH
    raw = _load_yaml(final_path)
    raw = _override_from_env(raw)
    settings = Settings.model_validate(raw)
    settings.config()
    return settings
