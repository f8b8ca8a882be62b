"""
Engine configuration.

Every tunable lives on ``EngineConfig`` and can be overridden from the
environment:

    ACTION_TIMEOUT_MS             default wait for player input (ms)
    SLAYROOM_ACTION_POINTS        action points granted at the start of a turn
    SLAYROOM_HAND_SIZE            cards dealt to each player at game start
    SLAYROOM_TARGET_OWNER_INPUT   let the owner of targeted cards answer prompts
    SLAYROOM_ENV                  deployment name
    ALLOWED_ORIGINS               comma separated CORS origins
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _get_env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    return default


def _get_env_list(key: str, default: str) -> tuple[str, ...]:
    value = os.environ.get(key, default)
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class EngineConfig:
    """Immutable engine settings, read once per process."""

    # Turn economy
    full_action_points: int = field(
        default_factory=lambda: _get_env_int("SLAYROOM_ACTION_POINTS", 3)
    )
    initial_hand_size: int = field(
        default_factory=lambda: _get_env_int("SLAYROOM_HAND_SIZE", 5)
    )
    monster_count: int = 3
    min_hero_slots: int = 3

    # Input prompts
    action_timeout_ms: int = field(
        default_factory=lambda: _get_env_int("ACTION_TIMEOUT_MS", 30_000)
    )
    allow_target_owner_input: bool = field(
        default_factory=lambda: _get_env_bool("SLAYROOM_TARGET_OWNER_INPUT", False)
    )

    # Deployment
    env: str = field(
        default_factory=lambda: os.environ.get("SLAYROOM_ENV", "development")
    )
    allowed_origins: tuple[str, ...] = field(
        default_factory=lambda: _get_env_list("ALLOWED_ORIGINS", "*")
    )


_config: EngineConfig | None = None


def get_config() -> EngineConfig:
    """Return the process-wide configuration, creating it on first use."""
    global _config
    if _config is None:
        _config = EngineConfig()
    return _config


def set_config(config: EngineConfig) -> None:
    """Install an explicit configuration (tests and embedding callers)."""
    global _config
    _config = config


def reset_config() -> None:
    """Drop the cached configuration so the environment is read again."""
    global _config
    _config = None
