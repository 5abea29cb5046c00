"""Selection handling and per-tick dispatch for Skyjo gameplay."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Final

from . import rules
from .rules import InvalidSelectionError
from .state import SkyjoState, TurnPhase, new_game

logger = logging.getLogger(__name__)


class Zone(str, Enum):
    """Table areas a selection can address."""

    HAND = "hand"
    DECK = "deck"
    DISCARD = "discard"


class Population(str, Enum):
    """Card populations a phase may declare selectable."""

    NONE = "none"
    FACE_UP_IN_HAND = "face_up_in_hand"
    FACE_DOWN_IN_HAND = "face_down_in_hand"
    ENTIRE_HAND = "entire_hand"
    DISCARD_TOP = "discard_top"
    DECK_TOP = "deck_top"


PHASE_POPULATIONS: Final[dict[TurnPhase, frozenset[Population]]] = {
    TurnPhase.DEAL: frozenset({Population.NONE}),
    TurnPhase.FLIP_INITIAL_TWO_CARDS: frozenset({Population.FACE_DOWN_IN_HAND}),
    TurnPhase.SELECT_FROM_PILE: frozenset({Population.DISCARD_TOP, Population.DECK_TOP}),
    TurnPhase.DECK_FLIPPED: frozenset({Population.ENTIRE_HAND, Population.DISCARD_TOP}),
    TurnPhase.REPLACE_FROM_HAND: frozenset({Population.ENTIRE_HAND}),
    TurnPhase.FLIP_FROM_HAND: frozenset({Population.FACE_DOWN_IN_HAND}),
    TurnPhase.END_ROUND: frozenset({Population.NONE}),
    TurnPhase.END_GAME: frozenset({Population.NONE}),
}


@dataclass(frozen=True, slots=True)
class Selection:
    """A card or pile the active player clicked."""

    zone: Zone
    index: int = 0
    player: int | None = None  # hand owner; defaults to the active player

    @classmethod
    def hand(cls, index: int, player: int | None = None) -> "Selection":
        return cls(zone=Zone.HAND, index=index, player=player)

    @classmethod
    def deck(cls) -> "Selection":
        return cls(zone=Zone.DECK)

    @classmethod
    def discard(cls) -> "Selection":
        return cls(zone=Zone.DISCARD)


@dataclass(frozen=True, slots=True)
class TickInput:
    """Edge-triggered input gathered during one tick."""

    selection: Selection | None = None
    advance_round: bool = False
    reset: bool = False


def selectable_populations(state: SkyjoState) -> frozenset[Population]:
    """Return the populations the current phase lets the active player pick from."""

    return PHASE_POPULATIONS[state.phase.kind]


def validate_selection(state: SkyjoState, selection: Selection) -> None:
    """Reject selections that address a slot outside their collection."""

    if selection.zone == Zone.HAND:
        owner = state.current_player_index if selection.player is None else selection.player
        if owner < 0 or owner >= len(state.players):
            raise InvalidSelectionError(f"player index {owner} out of range")
        hand = state.players[owner].hand
        if selection.index < 0 or selection.index >= len(hand):
            raise InvalidSelectionError(f"hand index {selection.index} out of range")
        return
    if selection.index != 0:
        raise InvalidSelectionError(f"only the top of the {selection.zone.value} can be selected")


def _deck_available(state: SkyjoState) -> bool:
    return bool(state.deck) or len(state.discard) > 1


def is_selectable(state: SkyjoState, selection: Selection) -> bool:
    """Return ``True`` when ``selection`` is a legal pick in the current phase."""

    validate_selection(state, selection)
    populations = selectable_populations(state)
    if selection.zone == Zone.DECK:
        return Population.DECK_TOP in populations and _deck_available(state)
    if selection.zone == Zone.DISCARD:
        return Population.DISCARD_TOP in populations and bool(state.discard)

    if selection.player is not None and selection.player != state.current_player_index:
        return False
    card = state.current_player.hand[selection.index]
    if not card.alive:
        return False
    if Population.ENTIRE_HAND in populations:
        return True
    if Population.FACE_DOWN_IN_HAND in populations and not card.face_up:
        return True
    if Population.FACE_UP_IN_HAND in populations and card.face_up:
        return True
    return False


def legal_selections(state: SkyjoState) -> list[Selection]:
    """Enumerate every selection the active player may make right now."""

    candidates = [Selection.deck(), Selection.discard()]
    if state.players:
        candidates.extend(
            Selection.hand(idx, state.current_player_index)
            for idx in range(len(state.current_player.hand))
        )
    return [selection for selection in candidates if is_selectable(state, selection)]


def apply_selection(state: SkyjoState, selection: Selection) -> bool:
    """Route ``selection`` to the handler of the active phase.

    Returns ``False`` when the selection is refused.
    """

    if not is_selectable(state, selection):
        logger.debug("refused %s during %s", selection, state.phase.kind.value)
        return False

    kind = state.phase.kind
    if kind == TurnPhase.FLIP_INITIAL_TWO_CARDS:
        rules.flip_initial(state, selection.index)
    elif kind == TurnPhase.SELECT_FROM_PILE:
        if selection.zone == Zone.DECK:
            rules.draw_from_deck(state)
        else:
            rules.take_discard(state)
    elif kind == TurnPhase.DECK_FLIPPED:
        if selection.zone == Zone.DISCARD:
            rules.discard_held(state)
        else:
            rules.replace_card(state, selection.index)
    elif kind == TurnPhase.REPLACE_FROM_HAND:
        rules.replace_card(state, selection.index)
    elif kind == TurnPhase.FLIP_FROM_HAND:
        rules.flip_card(state, selection.index)
    else:  # pragma: no cover - populations exclude every other phase
        raise rules.InvariantViolation(f"selection accepted during {kind.value}")
    return True


def reset_game(state: SkyjoState) -> SkyjoState:
    """Return a brand-new match with the same configuration."""

    logger.info("game reset")
    return new_game(state.config, rng=random.Random(state.rng.getrandbits(64)))


def tick(state: SkyjoState, tick_input: TickInput | None = None) -> SkyjoState:
    """Advance the state machine by one tick and return the state to keep."""

    tick_input = tick_input or TickInput()
    if tick_input.reset:
        return reset_game(state)

    kind = state.phase.kind
    if kind == TurnPhase.DEAL:
        rules.deal(state)
    elif kind == TurnPhase.END_ROUND:
        if tick_input.advance_round:
            rules.continue_round(state)
    elif kind == TurnPhase.END_GAME:
        pass
    elif tick_input.selection is not None:
        apply_selection(state, tick_input.selection)
    return state
