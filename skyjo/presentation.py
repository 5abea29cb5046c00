"""Render snapshots the presentation layer draws after every tick."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from .actions import Selection, Zone, is_selectable
from .cards import Card, CardCategory
from .scoring import RoundResult
from .state import SkyjoState, TurnPhase


class Highlight(str, Enum):
    NONE = "none"
    SELECTABLE = "selectable"


class Outline(str, Enum):
    """Round-end marker drawn around a whole hand."""

    NONE = "none"
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"


INSTRUCTIONS: Final[dict[TurnPhase, str]] = {
    TurnPhase.DEAL: "Dealing a new round…",
    TurnPhase.FLIP_INITIAL_TWO_CARDS: "{name}: choose 2 cards to flip",
    TurnPhase.SELECT_FROM_PILE: "{name}: select from a pile",
    TurnPhase.DECK_FLIPPED: "{name}: choose a card to replace with {held}, or discard it",
    TurnPhase.REPLACE_FROM_HAND: "{name}: choose a card to replace with {held}",
    TurnPhase.FLIP_FROM_HAND: "{name}: choose a card to flip",
    TurnPhase.END_ROUND: "Round ended, press continue",
    TurnPhase.END_GAME: "Game over, {winner}. Press reset to play again",
}


@dataclass(frozen=True, slots=True)
class CardView:
    """Visible state of one card slot."""

    zone: Zone
    index: int
    player: int | None
    value: int | None
    face_up: bool
    alive: bool
    highlight: Highlight = Highlight.NONE
    outline: Outline = Outline.NONE
    held: bool = False

    @property
    def category(self) -> CardCategory | None:
        if self.value is None:
            return None
        return CardCategory.for_value(self.value)

    @property
    def selectable(self) -> bool:
        return self.highlight == Highlight.SELECTABLE

    @property
    def selection(self) -> Selection | None:
        """The selection reported when this slot is clicked; ``None`` for the held card."""

        if self.held:
            return None
        return Selection(zone=self.zone, index=self.index, player=self.player)


@dataclass(frozen=True, slots=True)
class PlayerView:
    index: int
    name: str
    live_score: int
    game_score: int
    active: bool
    outline: Outline
    cards: tuple[CardView, ...]


@dataclass(frozen=True, slots=True)
class BoardView:
    """Everything a renderer needs to draw the table for one tick."""

    phase: TurnPhase
    instruction: str
    round_number: int
    players: tuple[PlayerView, ...]
    deck_top: CardView | None
    discard_top: CardView | None
    held: CardView | None
    deck_size: int
    discard_size: int
    result: RoundResult | None


def _card_view(
    state: SkyjoState,
    card: Card,
    zone: Zone,
    index: int,
    player: int | None,
    outline: Outline = Outline.NONE,
) -> CardView:
    selection = Selection(zone=zone, index=index, player=player)
    selectable = is_selectable(state, selection)
    visible = card.face_up and card.alive
    return CardView(
        zone=zone,
        index=index,
        player=player,
        value=card.value if visible else None,
        face_up=card.face_up,
        alive=card.alive,
        highlight=Highlight.SELECTABLE if selectable else Highlight.NONE,
        outline=outline,
    )


def hand_outlines(state: SkyjoState) -> list[Outline]:
    """Mark the round winner's hand favorable and the others unfavorable."""

    result = state.phase.result
    if result is None or state.phase.kind not in (TurnPhase.END_ROUND, TurnPhase.END_GAME):
        return [Outline.NONE for _ in state.players]
    winners = result.winner_indices
    if len(winners) != 1:
        return [Outline.NONE for _ in state.players]
    return [
        Outline.FAVORABLE if idx in winners else Outline.UNFAVORABLE
        for idx in range(len(state.players))
    ]


def game_leaders(state: SkyjoState) -> list[int]:
    """Indices of the players with the lowest cumulative score."""

    best = min(player.game_score for player in state.players)
    return [idx for idx, player in enumerate(state.players) if player.game_score == best]


def instruction(state: SkyjoState) -> str:
    """Return the instructional text for the current phase."""

    kind = state.phase.kind
    held = state.phase.held
    winner = ""
    if kind == TurnPhase.END_GAME:
        leaders = game_leaders(state)
        if len(leaders) == 1:
            winner = f"{state.players[leaders[0]].name} wins"
        else:
            winner = "it is a draw"
    return INSTRUCTIONS[kind].format(
        name=state.current_player.name,
        held=held.value if held is not None else "",
        winner=winner,
    )


def build_board_view(state: SkyjoState) -> BoardView:
    """Snapshot ``state`` for the presentation layer."""

    outlines = hand_outlines(state)
    players = []
    for idx, player in enumerate(state.players):
        cards = tuple(
            _card_view(state, card, Zone.HAND, slot, idx, outlines[idx])
            for slot, card in enumerate(player.hand)
        )
        players.append(
            PlayerView(
                index=idx,
                name=player.name,
                live_score=player.live_score,
                game_score=player.game_score,
                active=state.is_active(idx),
                outline=outlines[idx],
                cards=cards,
            )
        )

    deck_top = None
    if state.deck_top is not None:
        deck_top = _card_view(state, state.deck_top, Zone.DECK, 0, None)
    elif is_selectable(state, Selection.deck()):
        # Empty deck about to be refilled from the discards.
        deck_top = CardView(
            zone=Zone.DECK,
            index=0,
            player=None,
            value=None,
            face_up=False,
            alive=True,
            highlight=Highlight.SELECTABLE,
        )
    discard_top = None
    if state.discard_top is not None:
        discard_top = _card_view(state, state.discard_top, Zone.DISCARD, 0, None)
    held = None
    if state.phase.held is not None:
        card = state.phase.held
        held = CardView(
            zone=Zone.DECK,
            index=0,
            player=None,
            value=card.value,
            face_up=True,
            alive=True,
            held=True,
        )

    return BoardView(
        phase=state.phase.kind,
        instruction=instruction(state),
        round_number=state.round_number,
        players=tuple(players),
        deck_top=deck_top,
        discard_top=discard_top,
        held=held,
        deck_size=len(state.deck),
        discard_size=len(state.discard),
        result=state.phase.result,
    )
