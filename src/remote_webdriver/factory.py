"""Factories for constructing client components from configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .config import ClientConfig
from .session import Session
from .transport import Transport


def build_transport(config: ClientConfig) -> Transport:
    return Transport(
        timeout=config.http_timeout,
        debug=config.debug,
        max_redirects=config.max_redirects,
    )


def open_session(
    config: ClientConfig,
    capabilities: Optional[Mapping[str, Any]] = None,
    *,
    transport: Optional[Transport] = None,
) -> Session:
    """Open a session using *config*; explicit *capabilities* override configured ones."""

    requested = {**config.capabilities, **(capabilities or {})}
    return Session.open(
        requested,
        config.url_prefix,
        transport=transport or build_transport(config),
        wait_timeout=config.wait.timeout,
        wait_interval=config.wait.interval,
    )
