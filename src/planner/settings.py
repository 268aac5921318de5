"""Resolve scheduler settings from config.toml, environment and CLI overrides."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from contracts.errors import ConfigurationError
from project_config import get_section

SUPPORTED_MODES = ("order", "duration")


@dataclass(frozen=True)
class PlannerSettings:
    """Effective parameters for one scheduler run."""

    mode: str
    worker_count: int
    base_offset: int
    seed_alphabet: bool
    decision_source: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "worker_count": self.worker_count,
            "base_offset": self.base_offset,
            "seed_alphabet": self.seed_alphabet,
        }


def _normalise_env(env: Mapping[str, str]) -> Dict[str, str]:
    return {str(k).upper(): str(v) for k, v in env.items()}


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    return None


def _coerce_int(name: str, value: Any, *, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None
    if number < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {number}")
    return number


def _mode_policy(mode: str) -> Dict[str, Any]:
    policy: Dict[str, Any] = {"seed_alphabet": get_section("planner.seed_alphabet", True)}
    block = get_section(f"modes.{mode}", {})
    if isinstance(block, dict):
        policy.update(block)
    return policy


def _override(env: Mapping[str, str], key: str) -> tuple[str | None, str]:
    cli_value = env.get(f"CLI_PLANNER_{key}")
    if cli_value:
        return cli_value, "cli"
    env_value = env.get(f"PLANNER_{key}")
    if env_value:
        return env_value, "env"
    return None, "config"


def _order_worker_count(env: Mapping[str, str], policy: Mapping[str, Any]) -> int:
    """Order mode always runs a single worker.

    The shared ``PLANNER_WORKERS`` variable tunes duration runs and is
    ignored here; an explicit CLI or config value other than 1 is rejected.
    """

    cli_value = env.get("CLI_PLANNER_WORKERS")
    if cli_value and _coerce_int("worker_count", cli_value, minimum=1) != 1:
        raise ConfigurationError(f"order mode runs a single worker, got worker_count={cli_value!r}")
    configured = _coerce_int("worker_count", policy.get("worker_count", 1), minimum=1)
    if configured != 1:
        raise ConfigurationError(f"modes.order.worker_count must be 1, got {configured}")
    return 1


def resolve_settings(mode: str, env: Mapping[str, str] | None = None) -> PlannerSettings:
    """Return the settings for ``mode``.

    Precedence is ``CLI_PLANNER_*`` over ``PLANNER_*`` over the
    ``[modes.<mode>]`` block of ``config.toml``.  ``decision_source`` reports
    the strongest layer that contributed a value.  Order mode pins
    ``worker_count`` to 1.
    """

    if mode not in SUPPORTED_MODES:
        raise ConfigurationError(f"Unsupported mode '{mode}'")

    env_map = _normalise_env(env or {})
    policy = _mode_policy(mode)
    rank = {"config": 0, "env": 1, "cli": 2}
    decision_source = "config"

    resolved: Dict[str, Any] = {}
    for key, field_name in (
        ("WORKERS", "worker_count"),
        ("BASE_OFFSET", "base_offset"),
        ("SEED_ALPHABET", "seed_alphabet"),
    ):
        if mode == "order" and key == "WORKERS":
            resolved[field_name] = _order_worker_count(env_map, policy)
            continue
        raw, source = _override(env_map, key)
        if raw is None:
            raw = policy.get(field_name)
        elif rank[source] > rank[decision_source]:
            decision_source = source
        resolved[field_name] = raw

    seed_alphabet = _coerce_bool(resolved["seed_alphabet"])
    if seed_alphabet is None:
        raise ConfigurationError(f"seed_alphabet must be a boolean, got {resolved['seed_alphabet']!r}")

    return PlannerSettings(
        mode=mode,
        worker_count=_coerce_int("worker_count", resolved["worker_count"], minimum=1),
        base_offset=_coerce_int("base_offset", resolved["base_offset"], minimum=0),
        seed_alphabet=seed_alphabet,
        decision_source=decision_source,
    )


__all__ = ["PlannerSettings", "SUPPORTED_MODES", "resolve_settings"]
