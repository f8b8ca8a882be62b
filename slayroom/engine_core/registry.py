"""
Action Registry - Named effect handlers.

Effect authors register a handler under an action name. ``run`` executes a
fresh action; ``callback`` is used instead when the action is resumed with
player input after ``run`` asked for it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
import logging

from .action import ActionContext, ActionParams, ActionResult

logger = logging.getLogger(__name__)

RunFn = Callable[[ActionContext, ActionParams], ActionResult]
CallbackFn = Callable[[ActionContext, Any], ActionResult]


@dataclass(frozen=True)
class ActionHandler:
    run: RunFn
    callback: CallbackFn | None = None
    description: str = ""

    @property
    def has_callback(self) -> bool:
        return self.callback is not None


class ActionRegistry:
    """Maps action names to handlers."""

    def __init__(self):
        self._handlers: dict[str, ActionHandler] = {}

    def register(self, name: str, handler: ActionHandler) -> None:
        if name in self._handlers:
            logger.warning("Action %s re-registered; replacing previous handler", name)
        self._handlers[name] = handler

    def get(self, name: str) -> ActionHandler | None:
        return self._handlers.get(name)

    def list_actions(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers


default_registry = ActionRegistry()


def register_action(
    name: str,
    run: RunFn,
    callback: CallbackFn | None = None,
    description: str = "",
    registry: ActionRegistry | None = None,
) -> ActionHandler:
    """Register a handler on ``registry`` (the default one if omitted)."""
    handler = ActionHandler(run=run, callback=callback, description=description)
    (registry or default_registry).register(name, handler)
    return handler
