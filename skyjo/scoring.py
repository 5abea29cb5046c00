"""Scoring helpers and multi-round match tracking for Skyjo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .cards import Card

__all__ = [
    "live_score",
    "RoundResult",
    "score_round",
    "PlayerMatchTotal",
    "MatchHistory",
]


def live_score(hand: Iterable[Card]) -> int:
    """Sum the values of face-up cards that have not been cleared."""

    return sum(card.value for card in hand if card.alive and card.face_up)


@dataclass(frozen=True, slots=True)
class RoundResult:
    """Outcome of a single round after the ending player's penalty."""

    round_number: int
    ending_index: int
    raw_scores: tuple[int, ...]
    scores: tuple[int, ...]
    doubled: bool

    @property
    def winner_indices(self) -> tuple[int, ...]:
        """Players holding the lowest applied score for the round."""

        best = min(self.scores)
        return tuple(idx for idx, score in enumerate(self.scores) if score == best)


def score_round(round_number: int, ending_index: int, raw_scores: Sequence[int]) -> RoundResult:
    """Apply the ending player's penalty to ``raw_scores``.

    The ending player keeps their score only if it is strictly lower than every
    other player's score; otherwise it is doubled. Ties double.
    """

    if ending_index < 0 or ending_index >= len(raw_scores):
        raise ValueError("ending player index out of range")
    ending_score = raw_scores[ending_index]
    others = [score for idx, score in enumerate(raw_scores) if idx != ending_index]
    doubled = any(ending_score >= score for score in others)
    scores = list(raw_scores)
    if doubled:
        scores[ending_index] = ending_score * 2
    return RoundResult(
        round_number=round_number,
        ending_index=ending_index,
        raw_scores=tuple(raw_scores),
        scores=tuple(scores),
        doubled=doubled,
    )


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate totals accumulated across all recorded rounds."""

    player_index: int
    rounds_won: int
    times_doubled: int
    points: int


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round results for a match."""

    num_players: int
    rounds: list[RoundResult] = field(default_factory=list)
    _wins: list[int] = field(init=False, repr=False)
    _doubled: list[int] = field(init=False, repr=False)
    _points: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._wins = [0 for _ in range(self.num_players)]
        self._doubled = [0 for _ in range(self.num_players)]
        self._points = [0 for _ in range(self.num_players)]
        recorded = list(self.rounds)
        self.rounds = []
        for result in recorded:
            self.record(result)

    def record(self, result: RoundResult) -> None:
        """Record ``result`` and update cumulative totals."""

        if len(result.scores) != self.num_players:
            raise ValueError("score count does not match number of players")
        self.rounds.append(result)
        for idx, score in enumerate(result.scores):
            self._points[idx] += score
        for idx in result.winner_indices:
            self._wins[idx] += 1
        if result.doubled:
            self._doubled[result.ending_index] += 1

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(
                player_index=idx,
                rounds_won=self._wins[idx],
                times_doubled=self._doubled[idx],
                points=self._points[idx],
            )
            for idx in range(self.num_players)
        ]
