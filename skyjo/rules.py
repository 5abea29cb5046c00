"""Rule utilities and the turn state machine for Skyjo."""

from __future__ import annotations

import logging
from typing import Final, MutableSequence

from .cards import DECK_CARD_COUNT, Card, draw_top, reset_card, shuffle
from .scoring import RoundResult, score_round
from .state import (
    COLUMNS,
    HOLDING_PHASES,
    INITIAL_FLIPS,
    PhaseState,
    PlayerState,
    ROWS,
    SkyjoState,
    TurnPhase,
)

__all__ = [
    "IllegalMove",
    "InvalidSelectionError",
    "InvariantViolation",
    "MIN_CLEAR_VALUE",
    "deal",
    "ensure_stock",
    "clear_columns",
    "flip_initial",
    "draw_from_deck",
    "take_discard",
    "discard_held",
    "replace_card",
    "flip_card",
    "advance_turn",
    "continue_round",
    "check_conservation",
]

logger = logging.getLogger(__name__)

MIN_CLEAR_VALUE: Final[int] = 0


class IllegalMove(RuntimeError):
    """Raised when a rule is applied outside of the phase that allows it."""


class InvalidSelectionError(ValueError):
    """Raised when a selection addresses a slot outside its collection."""


class InvariantViolation(AssertionError):
    """Raised when the engine reaches a state valid transitions cannot produce."""


def _require_phase(state: SkyjoState, *kinds: TurnPhase) -> None:
    if state.phase.kind not in kinds:
        expected = ", ".join(kind.value for kind in kinds)
        raise IllegalMove(f"phase is {state.phase.kind.value}, expected {expected}")


def _hand_card(player: PlayerState, hand_index: int) -> Card:
    if hand_index < 0 or hand_index >= len(player.hand):
        raise InvalidSelectionError(f"hand index {hand_index} out of range for {player.name}")
    return player.hand[hand_index]


def check_conservation(state: SkyjoState) -> None:
    """Ensure every card of the deck is still somewhere on the table."""

    count = state.card_count()
    if count != DECK_CARD_COUNT:
        raise InvariantViolation(f"{count} cards on the table, expected {DECK_CARD_COUNT}")


def deal(state: SkyjoState) -> None:
    """Start a new round, or end the game once a score limit has been reached."""

    _require_phase(state, TurnPhase.DEAL)
    limit = state.config.score_limit
    if any(player.game_score >= limit for player in state.players):
        last = state.history.rounds[-1] if state.history.rounds else None
        state.phase = PhaseState(kind=TurnPhase.END_GAME, result=last)
        logger.info("score limit %d reached before dealing", limit)
        return

    pool: list[Card] = list(state.deck)
    pool.extend(state.discard)
    for player in state.players:
        pool.extend(player.hand)
        player.hand = []
    for card in pool:
        reset_card(card)
    state.deck = pool
    state.discard = []
    shuffle(state.deck, state.rng, state.config.shuffle_mode)

    for _ in range(state.config.hand_size):
        for player in state.players:
            player.hand.append(draw_top(state.deck))
    opening = draw_top(state.deck)
    opening.face_up = True
    state.discard.append(opening)

    state.round_number += 1
    state.first_player_index = (state.round_number - 1) % len(state.players)
    state.current_player_index = state.first_player_index
    state.phase = PhaseState.of(TurnPhase.FLIP_INITIAL_TWO_CARDS)
    check_conservation(state)
    logger.info(
        "round %d dealt, %s starts, discard shows %d",
        state.round_number,
        state.current_player.name,
        opening.value,
    )


def ensure_stock(state: SkyjoState) -> None:
    """Refill an empty deck from every discard but the visible top card."""

    if state.deck or len(state.discard) <= 1:
        return
    top_card = state.discard.pop()
    pool = state.discard
    for card in pool:
        reset_card(card)
    shuffle(pool, state.rng, state.config.shuffle_mode)
    state.deck = pool
    state.discard = [top_card]
    logger.info("deck exhausted, reshuffled %d discards", len(pool))


def clear_columns(
    hand: MutableSequence[Card], columns: int = COLUMNS, rows: int = ROWS
) -> list[int]:
    """Kill every full column of matching, face-up, non-negative cards.

    Returns the indices of the columns that were cleared.
    """

    cleared: list[int] = []
    for column in range(columns):
        cards = list(hand[column::columns])
        if len(cards) != rows:
            continue
        if not all(card.alive and card.face_up for card in cards):
            continue
        value = cards[0].value
        if value < MIN_CLEAR_VALUE or any(card.value != value for card in cards):
            continue
        for card in cards:
            card.alive = False
            card.face_up = False
        cleared.append(column)
    return cleared


def flip_initial(state: SkyjoState, hand_index: int) -> None:
    """Reveal one of the active player's two opening cards."""

    _require_phase(state, TurnPhase.FLIP_INITIAL_TWO_CARDS)
    player = state.current_player
    card = _hand_card(player, hand_index)
    if card.face_up or not card.alive:
        raise IllegalMove("card is already face up")
    if player.face_up_count() >= INITIAL_FLIPS:
        raise InvariantViolation(f"{player.name} already revealed {INITIAL_FLIPS} cards")
    card.face_up = True
    logger.debug("%s flips slot %d (%d)", player.name, hand_index, card.value)
    if player.face_up_count() < INITIAL_FLIPS:
        return

    pending = [
        idx for idx, other in enumerate(state.players) if other.face_up_count() < INITIAL_FLIPS
    ]
    if pending:
        state.current_player_index = pending[0]
        return
    state.current_player_index = state.first_player_index
    state.phase = PhaseState.of(TurnPhase.SELECT_FROM_PILE)


def draw_from_deck(state: SkyjoState) -> Card:
    """Reveal the top deck card and hold it for the active player."""

    _require_phase(state, TurnPhase.SELECT_FROM_PILE)
    ensure_stock(state)
    card = draw_top(state.deck)
    card.face_up = True
    state.phase = PhaseState(kind=TurnPhase.DECK_FLIPPED, held=card)
    logger.debug("%s draws %d from the deck", state.current_player.name, card.value)
    return card


def take_discard(state: SkyjoState) -> Card:
    """Take the discard top; it must replace a hand card."""

    _require_phase(state, TurnPhase.SELECT_FROM_PILE)
    if not state.discard:
        raise IllegalMove("discard pile is empty")
    card = state.discard.pop()
    card.face_up = True
    state.phase = PhaseState(kind=TurnPhase.REPLACE_FROM_HAND, held=card)
    logger.debug("%s takes %d from the discard", state.current_player.name, card.value)
    return card


def discard_held(state: SkyjoState) -> None:
    """Throw away the card drawn from the deck; a hand card must be flipped next."""

    _require_phase(state, TurnPhase.DECK_FLIPPED)
    held = state.phase.held
    if held is None:  # pragma: no cover - guarded by PhaseState
        raise InvariantViolation("deck_flipped phase without a held card")
    state.discard.append(held)
    state.phase = PhaseState.of(TurnPhase.FLIP_FROM_HAND)
    logger.debug("%s discards %d", state.current_player.name, held.value)


def replace_card(state: SkyjoState, hand_index: int) -> None:
    """Swap the held card into ``hand_index``; the replaced card is discarded."""

    _require_phase(state, *HOLDING_PHASES)
    held = state.phase.held
    if held is None:  # pragma: no cover - guarded by PhaseState
        raise InvariantViolation("holding phase without a held card")
    player = state.current_player
    outgoing = _hand_card(player, hand_index)
    if not outgoing.alive:
        raise IllegalMove("cannot replace a cleared card")
    outgoing.face_up = True
    held.face_up = True
    player.hand[hand_index] = held
    state.discard.append(outgoing)
    logger.debug(
        "%s replaces slot %d (%d) with %d",
        player.name,
        hand_index,
        outgoing.value,
        held.value,
    )
    advance_turn(state)


def flip_card(state: SkyjoState, hand_index: int) -> None:
    """Reveal a face-down card after discarding the deck draw."""

    _require_phase(state, TurnPhase.FLIP_FROM_HAND)
    player = state.current_player
    card = _hand_card(player, hand_index)
    if card.face_up or not card.alive:
        raise IllegalMove("card is already face up")
    card.face_up = True
    logger.debug("%s flips slot %d (%d)", player.name, hand_index, card.value)
    advance_turn(state)


def _reveal_all(state: SkyjoState) -> None:
    for player in state.players:
        for card in player.hand:
            if card.alive:
                card.face_up = True


def advance_turn(state: SkyjoState) -> RoundResult | None:
    """Finish the active player's turn.

    Clears matching columns, then either passes the turn or, when the acting
    player has nothing left face down, scores the round. Returns the round
    result when the round ended.
    """

    actor_index = state.current_player_index
    actor = state.players[actor_index]
    cleared = clear_columns(actor.hand, state.config.columns, state.config.rows)
    if cleared:
        logger.info("%s clears column(s) %s", actor.name, ", ".join(map(str, cleared)))

    if actor.has_face_down():
        state.current_player_index = state.other_player_index
        state.phase = PhaseState.of(TurnPhase.SELECT_FROM_PILE)
        return None

    _reveal_all(state)
    raw_scores = [player.live_score for player in state.players]
    result = score_round(state.round_number, actor_index, raw_scores)
    for player, score in zip(state.players, result.scores):
        player.game_score += score
    state.history.record(result)
    logger.info(
        "round %d ended by %s: raw %s, applied %s%s",
        result.round_number,
        actor.name,
        list(result.raw_scores),
        list(result.scores),
        " (doubled)" if result.doubled else "",
    )

    limit = state.config.score_limit
    if any(player.game_score >= limit for player in state.players):
        state.phase = PhaseState(kind=TurnPhase.END_GAME, result=result)
        logger.info(
            "game over: %s",
            ", ".join(f"{player.name}={player.game_score}" for player in state.players),
        )
    else:
        state.phase = PhaseState(kind=TurnPhase.END_ROUND, result=result)
    return result


def continue_round(state: SkyjoState) -> None:
    """Leave the round summary; the next tick deals a new round."""

    _require_phase(state, TurnPhase.END_ROUND)
    state.phase = PhaseState.of(TurnPhase.DEAL)
