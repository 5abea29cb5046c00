"""Card abstractions and deck helpers for Skyjo."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Iterator, MutableSequence

MIN_VALUE: Final[int] = -2
MAX_VALUE: Final[int] = 12

# Per-value count -> the values sharing that count.
CARD_MAP: Final[dict[int, tuple[int, ...]]] = {
    5: (-2,),
    15: (0,),
    10: (-1, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12),
}
DECK_CARD_COUNT: Final[int] = sum(count * len(values) for count, values in CARD_MAP.items())


class EmptyDeckError(RuntimeError):
    """Raised when drawing or moving a card from an empty collection."""


class CardCategory(str, Enum):
    """Visual class of a card value."""

    NEGATIVE = "negative"
    ZERO = "zero"
    LOW = "low"
    MID = "mid"
    HIGH = "high"

    @classmethod
    def for_value(cls, value: int) -> "CardCategory":
        """Return the category a card ``value`` belongs to."""

        if value < 0:
            return cls.NEGATIVE
        if value == 0:
            return cls.ZERO
        if value <= 4:
            return cls.LOW
        if value <= 8:
            return cls.MID
        return cls.HIGH


class ShuffleMode(str, Enum):
    """Available shuffling strategies."""

    UNIFORM = "uniform"
    DERANGEMENT = "derangement"


@dataclass(slots=True)
class Card:
    """A single Skyjo card together with its table flags."""

    value: int
    face_up: bool = False
    alive: bool = True

    def __post_init__(self) -> None:
        if not MIN_VALUE <= self.value <= MAX_VALUE:
            raise ValueError(f"card value {self.value} outside [{MIN_VALUE}, {MAX_VALUE}]")

    @property
    def category(self) -> CardCategory:
        return CardCategory.for_value(self.value)

    @property
    def scores(self) -> bool:
        """Return ``True`` when the card counts towards the live score."""

        return self.alive and self.face_up

    def label(self) -> str:
        """Create a short display label."""

        if not self.alive:
            return "·"
        if not self.face_up:
            return "?"
        return str(self.value)


def iter_values() -> Iterator[int]:
    """Yield every card value of a full deck in a deterministic order."""

    for value in range(MIN_VALUE, MAX_VALUE + 1):
        for count, values in CARD_MAP.items():
            if value in values:
                for _ in range(count):
                    yield value


def build_deck() -> list[Card]:
    """Return a fresh, unshuffled deck of face-down cards."""

    return [Card(value) for value in iter_values()]


def reset_card(card: Card) -> None:
    card.face_up = False
    card.alive = True


def composition(cards: Iterable[Card]) -> dict[int, int]:
    """Return a value -> count mapping for ``cards``."""

    counts: dict[int, int] = {}
    for card in cards:
        counts[card.value] = counts.get(card.value, 0) + 1
    return counts


def shuffle(
    deck: MutableSequence[Card],
    rng: random.Random,
    mode: ShuffleMode = ShuffleMode.UNIFORM,
) -> None:
    """Shuffle ``deck`` in place.

    ``ShuffleMode.UNIFORM`` is a plain Fisher-Yates shuffle. ``ShuffleMode.DERANGEMENT``
    walks every position and swaps it with a random partner, redrawing whenever
    the partner is the position itself. It is not uniform and is only kept for
    parity with tables that deal that way.
    """

    if mode == ShuffleMode.UNIFORM:
        rng.shuffle(deck)
        return
    size = len(deck)
    if size < 2:
        return
    for index in range(size):
        partner = rng.randrange(size)
        while partner == index:
            partner = rng.randrange(size)
        deck[index], deck[partner] = deck[partner], deck[index]


def draw_top(deck: MutableSequence[Card]) -> Card:
    """Remove and return the top (first) card of ``deck``."""

    if not deck:
        raise EmptyDeckError("cannot draw from an empty deck")
    return deck.pop(0)


def move_one(src: MutableSequence[Card], dst: MutableSequence[Card]) -> Card:
    """Move the last card of ``src`` onto the end of ``dst`` and return it."""

    if not src:
        raise EmptyDeckError("cannot move a card out of an empty collection")
    card = src.pop()
    dst.append(card)
    return card
