"""JSONL event log for schedule runs, rotated by size.

Events go to ``<base_dir>/<YYYYMMDD>/schedule_NN.jsonl``.  Logging is off
until :func:`configure` enables it, either directly or from the ``[logging]``
block of ``config.toml`` via :func:`configure_from_config`.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping

from project_config import get_section

__all__ = [
    "append_event",
    "configure",
    "configure_from_config",
    "current_log_path",
    "emit",
    "is_enabled",
]

_DEFAULT_MAX_BYTES = 100 * 1024 * 1024
_LOCK = threading.Lock()
_LOG_DIR = Path("logs/schedule")
_MAX_BYTES = _DEFAULT_MAX_BYTES
_ENABLED = False
_CURRENT_PATH: Path | None = None


def configure(base_dir: str | Path, *, max_bytes: int | None = None, enabled: bool = True) -> None:
    """Route subsequent events to ``base_dir``."""

    global _LOG_DIR, _MAX_BYTES, _ENABLED, _CURRENT_PATH
    _LOG_DIR = Path(base_dir)
    _MAX_BYTES = max_bytes or _DEFAULT_MAX_BYTES
    _ENABLED = enabled
    _CURRENT_PATH = None


def configure_from_config(env: Mapping[str, str] | None = None) -> bool:
    """Apply ``[logging]`` settings; ``PLANNER_EVENT_LOG`` overrides the toggle."""

    enabled = bool(get_section("logging.event_log_enabled", False))
    override = (env or {}).get("PLANNER_EVENT_LOG")
    if override is not None:
        enabled = override.strip().lower() in {"1", "true", "yes", "on"}
    configure(
        get_section("logging.event_log_dir", "logs/schedule"),
        max_bytes=int(get_section("logging.event_log_max_bytes", _DEFAULT_MAX_BYTES)),
        enabled=enabled,
    )
    return enabled


def is_enabled() -> bool:
    return _ENABLED


def _resolve_log_path() -> Path:
    global _CURRENT_PATH
    date_dir = _LOG_DIR / datetime.now(timezone.utc).strftime("%Y%m%d")
    date_dir.mkdir(parents=True, exist_ok=True)

    current = _CURRENT_PATH
    if current is not None and current.parent == date_dir and current.exists():
        if current.stat().st_size < _MAX_BYTES:
            return current

    counter = 0
    while True:
        candidate = date_dir / f"schedule_{counter:02d}.jsonl"
        if not candidate.exists() or candidate.stat().st_size < _MAX_BYTES:
            _CURRENT_PATH = candidate
            return candidate
        counter += 1


def append_event(event: Dict[str, Any]) -> Path:
    """Append ``event`` to the active JSONL file and return the file path."""

    payload = dict(event)
    payload.setdefault("ts", datetime.now(timezone.utc).isoformat(timespec="milliseconds"))

    line = json.dumps(payload, sort_keys=True, ensure_ascii=False)
    with _LOCK:
        path = _resolve_log_path()
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
    return path


def emit(event_name: str, **fields: Any) -> Path | None:
    """Record ``event_name`` when the log is enabled; returns the file written."""

    if not _ENABLED:
        return None
    return append_event({"event": event_name, **fields})


def current_log_path() -> Path | None:
    return _CURRENT_PATH
