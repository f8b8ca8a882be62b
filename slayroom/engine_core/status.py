"""
Status Broadcaster - What the room is doing right now, for display.

A single status record lives in the game state map. Presentation layers
read it; only actions that wait for input get a timeout.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import time

from ..config import get_config
from .action import ActionContext
from .store import GameKeys

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class GameStatus:
    key: str  # action name or status key, e.g. "drawCard", "waiting-to-start"
    message: str
    timeout: int | None = None  # ms
    timeout_at: int | None = None  # ms since epoch


def set_status(
    context: ActionContext,
    action_name: str,
    message: str,
    has_callback: bool = False,
    timeout_ms: int | None = None,
    now: int | None = None,
) -> GameStatus:
    """Write the current status. A timeout is attached only when ``has_callback``."""
    timeout = None
    timeout_at = None
    if has_callback:
        timeout = timeout_ms or get_config().action_timeout_ms
        timeout_at = (now if now is not None else now_ms()) + timeout

    status = GameStatus(key=action_name, message=message, timeout=timeout, timeout_at=timeout_at)
    logger.debug(
        "Status for room %s -> %s: %s (timeout=%s)",
        context.room_id, action_name, message, timeout,
    )
    context.game_state_map.set(GameKeys.GAME_STATUS, status)
    return status


def clear_status(context: ActionContext) -> None:
    logger.debug("Clearing status for room %s", context.room_id)
    context.game_state_map.delete(GameKeys.GAME_STATUS)


def get_status(context: ActionContext) -> GameStatus | None:
    return context.game_state_map.get(GameKeys.GAME_STATUS)


def has_status_timed_out(context: ActionContext, now: int | None = None) -> bool:
    status = get_status(context)
    if status is None or status.timeout_at is None:
        return False
    return (now if now is not None else now_ms()) > status.timeout_at


def get_time_remaining(context: ActionContext, now: int | None = None) -> int:
    """Milliseconds left on the current status; 0 if none or expired."""
    status = get_status(context)
    if status is None or status.timeout_at is None:
        return 0
    return max(0, status.timeout_at - (now if now is not None else now_ms()))
