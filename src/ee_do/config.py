"""
Configuration management for ee-do

This module provides the process-wide endpoint configuration used when
initialize() is called without explicit URLs.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import EndpointConfig

DEFAULT_API_URL = "https://earthengine.googleapis.com/api"
DEFAULT_TILE_URL = "https://earthengine.googleapis.com/map"
DEFAULT_TIMEOUT = 30.0


def _get_env(key: str) -> str | None:
    """Get environment variable value."""
    return os.environ.get(key)


def _get_env_float(key: str) -> float | None:
    value = _get_env(key)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


# Global configuration
_global_config: dict[str, str | float | None] = {
    "api_url": _get_env("EE_API_URL") or DEFAULT_API_URL,
    "tile_url": _get_env("EE_TILE_URL") or DEFAULT_TILE_URL,
    "timeout": _get_env_float("EE_TIMEOUT") or DEFAULT_TIMEOUT,
}


def configure(
    *,
    api_url: str | None = None,
    tile_url: str | None = None,
    timeout: float | None = None,
) -> None:
    """
    Configure default endpoints.

    Args:
        api_url: Base URL of the REST API (default: https://earthengine.googleapis.com/api)
        tile_url: Base URL of the tile server (default: https://earthengine.googleapis.com/map)
        timeout: HTTP timeout in seconds

    Example::

        from ee_do import configure

        configure(api_url="http://localhost:8080/api")
    """
    global _global_config

    if api_url is not None:
        _global_config["api_url"] = api_url
    if tile_url is not None:
        _global_config["tile_url"] = tile_url
    if timeout is not None:
        _global_config["timeout"] = timeout


def get_config() -> "EndpointConfig":
    """
    Get current endpoint configuration.

    Example::

        from ee_do import get_config

        print(get_config().api_url)
    """
    from .types import EndpointConfig

    return EndpointConfig(
        api_url=str(_global_config["api_url"] or DEFAULT_API_URL),
        tile_url=str(_global_config["tile_url"] or DEFAULT_TILE_URL),
        timeout=float(_global_config["timeout"] or DEFAULT_TIMEOUT),
    )


def configure_from_env() -> None:
    """
    Configure from environment variables.

    Reads from:
        - EE_API_URL
        - EE_TILE_URL
        - EE_TIMEOUT
    """
    configure(
        api_url=_get_env("EE_API_URL"),
        tile_url=_get_env("EE_TILE_URL"),
        timeout=_get_env_float("EE_TIMEOUT"),
    )
