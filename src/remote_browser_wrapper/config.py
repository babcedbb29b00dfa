"""Configuration models for the wrapper library."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .lifecycle.manager import LifecycleMode
from .models import CapabilityDescriptor


class WaitConfig(BaseModel):
    """Retry settings for waits and the client-side implicit wait."""

    timeout: float = Field(default=10.0, description="Seconds before a retried action times out.")
    interval: float = Field(default=0.5, description="Seconds between two attempts.")

    @field_validator("timeout")
    @classmethod
    def _timeout_not_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("timeout must not be negative")
        return value

    @field_validator("interval")
    @classmethod
    def _interval_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("interval must be positive")
        return value


class LifecycleConfig(BaseModel):
    """Settings for the session manager."""

    mode: LifecycleMode = LifecycleMode.THREADLOCAL_SINGLETON
    default_endpoint: Optional[str] = None


class LoggingConfig(BaseModel):
    """Settings for the tracing wrapper."""

    enabled: bool = False
    dump_browser_logs: bool = False


class HighlightConfig(BaseModel):
    """Settings for the highlighting wrapper."""

    enabled: bool = False
    pause: float = Field(default=2.0, description="Seconds each highlight stays visible.")
    action_style: str = "border: 2px solid red"
    found_style: str = "border: 2px solid blue"


class WrapperSettings(BaseSettings):
    """Top-level configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_BROWSER_WRAPPER_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    capabilities: CapabilityDescriptor = Field(default_factory=CapabilityDescriptor)
    wait: WaitConfig = Field(default_factory=WaitConfig)
    implicit_wait: bool = Field(default=False, description="Decorate sessions with the client-side implicit wait.")
    stale_tolerant: bool = False
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    highlight: HighlightConfig = Field(default_factory=HighlightConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> WrapperSettings:
    """Load configuration from an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = WrapperSettings(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return WrapperSettings.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
