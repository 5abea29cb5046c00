"""Top-level package for the Skyjo rules engine."""

from . import actions, cards, presentation, rules, scoring, serialization, state

__all__ = [
    "actions",
    "cards",
    "presentation",
    "rules",
    "scoring",
    "serialization",
    "state",
]
