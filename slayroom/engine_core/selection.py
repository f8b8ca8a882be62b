"""
Selection Engine - Decide which cards satisfy a requested amount.

Either picks card ids deterministically (FIRST) or produces a request for a
player to choose, which suspends the calling action until input arrives.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..config import get_config
from .action import ActionContext, ActionResult, NeedsInput
from .location import resolve
from .state import Amount, Location, SelectionMode

logger = logging.getLogger(__name__)


@dataclass
class SelectionResult:
    """Outcome of a selection: chosen ids, a failure, or a pending prompt."""
    success: bool
    selected_ids: list[str] = field(default_factory=list)
    message: str = ""
    requested: int = 0
    available: int = 0
    needs_input: ActionResult | None = None

    @property
    def is_short(self) -> bool:
        """More cards were requested than the source held."""
        return self.requested > self.available

    @property
    def waiting(self) -> bool:
        return self.needs_input is not None


def _as_amount(amount: Amount | int) -> Amount:
    return amount if isinstance(amount, Amount) else Amount(amount)


def select_cards(
    context: ActionContext,
    location: Location,
    amount: Amount | int,
    mode: SelectionMode = SelectionMode.FIRST,
    timeout_ms: int | None = None,
) -> SelectionResult:
    """
    Choose cards at ``location``.

    - ALL means every card currently at the source.
    - Zero (or ALL on an empty source) selects nothing and succeeds.
    - FIRST takes from the end of the source, most recent card first, and
      silently takes fewer when fewer are available.
    - Other modes return a needs-input result listing the candidate ids.
    """
    view = resolve(context, location)
    if view is None:
        return SelectionResult(success=False, message=f"Could not resolve location: {location.value}")

    items = view.read()
    available = len(items)
    requested = _as_amount(amount).count(available)

    if requested == 0:
        return SelectionResult(success=True, message="Nothing to select", available=available)

    if available == 0:
        return SelectionResult(
            success=False,
            message=f"No cards available in {view.label}",
            requested=requested,
        )

    take = min(requested, available)
    message = f"Selected {take} card(s) from {view.label}"
    if requested > available:
        message = f"requested {requested}, but only {available} available"

    if mode is SelectionMode.FIRST:
        picked = [item.id for item in reversed(items)][:take]
        logger.debug("Auto-selected %s from %s", picked, view.label)
        return SelectionResult(
            success=True,
            selected_ids=picked,
            message=message,
            requested=requested,
            available=available,
        )

    if mode is SelectionMode.TARGET_OWNER:
        owners = view.owners()
        required_player = owners[0] if len(owners) == 1 else None
        input_type = "target"
    else:
        required_player = context.player_id
        input_type = "destination"

    needs_input = NeedsInput(
        type=input_type,
        prompt=f"Select {take} card(s) from {view.label}",
        timeout_ms=timeout_ms if timeout_ms is not None else get_config().action_timeout_ms,
        options=tuple(item.id for item in items),
        required_player_id=required_player,
    )
    return SelectionResult(
        success=True,
        message=message,
        requested=requested,
        available=available,
        needs_input=ActionResult.waiting_for_input(
            needs_input,
            data={"target": location.value, "amount": take},
        ),
    )


def determine_selection_mode(
    context: ActionContext,
    location: Location,
    amount: Amount | int,
) -> SelectionMode:
    """
    Pick a mode when the effect did not name one.

    Support deck draws are always FIRST. Otherwise FIRST when the request
    covers everything available, and the destination owner chooses when
    there is a real choice to make.
    """
    view = resolve(context, location)
    if view is None or view.location is Location.SUPPORT_DECK:
        return SelectionMode.FIRST

    available = len(view.read())
    if _as_amount(amount).count(available) >= available:
        return SelectionMode.FIRST
    return SelectionMode.DESTINATION_OWNER
