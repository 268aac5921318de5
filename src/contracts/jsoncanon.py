"""Canonical JSON helpers for schedule reports.

Reports and event summaries are hashed so that two runs over the same rules
can be compared byte for byte.  The canonical form sorts mapping keys, turns
tuples into lists and emits UTF-8 without insignificant whitespace.  Schedule
payloads only ever carry integers and strings, so floats are rejected rather
than normalised.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping

__all__ = ["canonical_dump", "canonical_digest", "digest_without"]


def _canonicalize(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        raise TypeError("floats are not permitted in canonical schedule payloads")
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(key): _canonicalize(obj[key]) for key in sorted(obj, key=str)}
    raise TypeError(f"Unsupported type for canonical JSON: {type(obj)!r}")


def canonical_dump(obj: Any) -> bytes:
    """Return the canonical UTF-8 JSON bytes for ``obj``."""

    return json.dumps(
        _canonicalize(obj),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def canonical_digest(obj: Any) -> str:
    """Return ``sha256-<hex>`` over :func:`canonical_dump` of ``obj``."""

    digest = hashlib.sha256(canonical_dump(obj)).hexdigest()
    return f"sha256-{digest}"


def digest_without(payload: Mapping[str, Any], key: str) -> str:
    """Digest ``payload`` with ``key`` removed (used for self-identifying ids)."""

    stripped = {k: v for k, v in payload.items() if k != key}
    return canonical_digest(stripped)
