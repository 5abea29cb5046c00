"""Core game state data structures for Skyjo."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Iterator, List

from .cards import Card, ShuffleMode, build_deck
from .scoring import MatchHistory, RoundResult, live_score

MAX_PLAYERS: Final[int] = 2
HAND_SIZE: Final[int] = 12
COLUMNS: Final[int] = 4
ROWS: Final[int] = 3
SCORE_LIMIT: Final[int] = 100
INITIAL_FLIPS: Final[int] = 2


class TurnPhase(str, Enum):
    """Phases of the Skyjo turn state machine."""

    DEAL = "deal"
    FLIP_INITIAL_TWO_CARDS = "flip_initial_two_cards"
    SELECT_FROM_PILE = "select_from_pile"
    DECK_FLIPPED = "deck_flipped"
    REPLACE_FROM_HAND = "replace_from_hand"
    FLIP_FROM_HAND = "flip_from_hand"
    END_ROUND = "end_round"
    END_GAME = "end_game"


HOLDING_PHASES: Final[frozenset[TurnPhase]] = frozenset(
    {TurnPhase.DECK_FLIPPED, TurnPhase.REPLACE_FROM_HAND}
)


@dataclass(slots=True)
class SkyjoConfig:
    """Runtime configuration for a Skyjo match."""

    num_players: int = MAX_PLAYERS
    hand_size: int = HAND_SIZE
    columns: int = COLUMNS
    rows: int = ROWS
    score_limit: int = SCORE_LIMIT
    shuffle_mode: ShuffleMode = ShuffleMode.UNIFORM
    player_names: tuple[str, ...] = ("Player 1", "Player 2")
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.num_players != MAX_PLAYERS:
            raise ValueError(f"only {MAX_PLAYERS} players are supported")
        if (self.columns, self.rows) != (COLUMNS, ROWS):
            raise ValueError(f"only a {COLUMNS} x {ROWS} layout is supported")
        if self.columns * self.rows != self.hand_size:
            raise ValueError("hand_size must equal columns * rows")
        if self.score_limit <= 0:
            raise ValueError("score_limit must be positive")
        self.shuffle_mode = ShuffleMode(self.shuffle_mode)
        if len(self.player_names) != self.num_players:
            raise ValueError("one name is required per player")


@dataclass(frozen=True, slots=True)
class PhaseState:
    """Tagged phase variant carrying the data owned by the phase.

    ``held`` is the card waiting to be placed while in ``DECK_FLIPPED`` or
    ``REPLACE_FROM_HAND``. ``result`` is the scored round shown during
    ``END_ROUND`` and ``END_GAME``.
    """

    kind: TurnPhase
    held: Card | None = None
    result: RoundResult | None = None

    def __post_init__(self) -> None:
        if (self.kind in HOLDING_PHASES) != (self.held is not None):
            raise ValueError(f"phase {self.kind.value} has an invalid held card")
        if self.result is not None and self.kind not in (TurnPhase.END_ROUND, TurnPhase.END_GAME):
            raise ValueError(f"phase {self.kind.value} cannot carry a round result")

    @classmethod
    def of(cls, kind: TurnPhase) -> "PhaseState":
        return cls(kind=kind)


@dataclass(slots=True)
class PlayerState:
    """State tracked for each seated player."""

    name: str
    hand: List[Card] = field(default_factory=list)
    game_score: int = 0

    @property
    def live_score(self) -> int:
        return live_score(self.hand)

    def face_up_count(self) -> int:
        return sum(1 for card in self.hand if card.alive and card.face_up)

    def has_face_down(self) -> bool:
        return any(card.alive and not card.face_up for card in self.hand)


def _default_history() -> MatchHistory:
    return MatchHistory(num_players=MAX_PLAYERS)


@dataclass(slots=True)
class SkyjoState:
    """Mutable game state owned by a single table."""

    config: SkyjoConfig = field(default_factory=SkyjoConfig)
    phase: PhaseState = field(default_factory=lambda: PhaseState.of(TurnPhase.DEAL))
    deck: List[Card] = field(default_factory=list)
    discard: List[Card] = field(default_factory=list)
    players: List[PlayerState] = field(default_factory=list)
    current_player_index: int = 0
    first_player_index: int = 0
    round_number: int = 0
    history: MatchHistory = field(default_factory=_default_history)
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    @property
    def other_player_index(self) -> int:
        return (self.current_player_index + 1) % len(self.players)

    @property
    def discard_top(self) -> Card | None:
        return self.discard[-1] if self.discard else None

    @property
    def deck_top(self) -> Card | None:
        return self.deck[0] if self.deck else None

    def is_active(self, player_index: int) -> bool:
        return player_index == self.current_player_index

    def iter_cards(self) -> Iterator[Card]:
        """Yield every card on the table, wherever it currently sits."""

        yield from self.deck
        yield from self.discard
        for player in self.players:
            yield from player.hand
        if self.phase.held is not None:
            yield self.phase.held

    def card_count(self) -> int:
        return sum(1 for _ in self.iter_cards())


def new_game(config: SkyjoConfig | None = None, rng: random.Random | None = None) -> SkyjoState:
    """Return a fresh match awaiting its first deal."""

    config = config or SkyjoConfig()
    if rng is None:
        rng = random.Random(config.seed)
    players = [PlayerState(name=name) for name in config.player_names]
    return SkyjoState(
        config=config,
        phase=PhaseState.of(TurnPhase.DEAL),
        deck=build_deck(),
        discard=[],
        players=players,
        current_player_index=0,
        first_player_index=0,
        round_number=0,
        rng=rng,
    )
