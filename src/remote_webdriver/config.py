"""Configuration models for the remote WebDriver client."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .session import DEFAULT_URL_PREFIX
from .wait import DEFAULT_WAIT_INTERVAL, DEFAULT_WAIT_TIMEOUT


class WaitConfig(BaseModel):
    """Defaults for the polling primitive."""

    timeout: float = Field(default=DEFAULT_WAIT_TIMEOUT, description="Seconds before giving up.")
    interval: float = Field(default=DEFAULT_WAIT_INTERVAL, description="Seconds between checks.")


class ClientConfig(BaseSettings):
    """Top-level configuration for talking to a remote end."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_WEBDRIVER_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    url_prefix: str = Field(default=DEFAULT_URL_PREFIX)
    http_timeout: float = Field(
        default=60.0,
        description="Deadline (in seconds) for a single HTTP exchange.",
    )
    debug: bool = Field(default=False, description="Log wire traffic at DEBUG level.")
    max_redirects: int = Field(default=10)
    wait: WaitConfig = Field(default_factory=WaitConfig)
    capabilities: dict[str, Any] = Field(default_factory=dict)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ClientConfig:
    """Load configuration from an optional YAML file, the environment and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    return ClientConfig(**data, **settings_kwargs)


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
