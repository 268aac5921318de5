"""Utility helpers for loading the planner configuration file.

``config.toml`` next to the project root is used unless ``PLANNER_CONFIG``
points at another file.  Installed copies ship without the file and fall
back to :data:`DEFAULT_CONFIG`.
"""

from __future__ import annotations

import copy
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

from contracts.errors import ConfigurationError


_CONFIG_FILENAME = "config.toml"
_CONFIG_ENV = "PLANNER_CONFIG"
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / _CONFIG_FILENAME
_MISSING = object()

# Mirrors config.toml at the repository root.
DEFAULT_CONFIG: Dict[str, Any] = {
    "planner": {"seed_alphabet": True},
    "modes": {
        "order": {"worker_count": 1, "base_offset": 0},
        "duration": {"worker_count": 5, "base_offset": 60},
    },
    "logging": {
        "level": "WARNING",
        "event_log_enabled": False,
        "event_log_dir": "logs/schedule",
        "event_log_max_bytes": 104857600,
    },
}


def config_path() -> Path:
    override = os.environ.get(_CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return _DEFAULT_CONFIG_PATH


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """Load and cache the planner configuration as a dictionary.

    An explicit ``PLANNER_CONFIG`` that does not exist is an error; a missing
    default file yields the built-in defaults.
    """
    path = config_path()
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        if os.environ.get(_CONFIG_ENV):
            raise ConfigurationError(f"Configuration file '{path}' was not found") from exc
        return copy.deepcopy(DEFAULT_CONFIG)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Configuration file '{path}' is not valid TOML: {exc}") from exc


def get_section(path: str, default: Any = _MISSING) -> Any:
    """Retrieve a nested configuration value using dotted notation.

    ``default`` is returned when any component of ``path`` is missing; without
    it a :class:`KeyError` is raised.
    """

    data: Any = get_config()
    for part in path.split("."):
        if isinstance(data, dict) and part in data:
            data = data[part]
        else:
            if default is not _MISSING:
                return default
            raise KeyError(f"Configuration path '{path}' not found")
    return data


def reload() -> None:
    """Drop the cached configuration so the next lookup re-reads the file."""

    get_config.cache_clear()


__all__ = ["DEFAULT_CONFIG", "config_path", "get_config", "get_section", "reload"]
