"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import CardCategory
from ..presentation import BoardView, CardView, Highlight, Outline
from .views import BoardSummaryView

CATEGORY_STYLES = {
    CardCategory.NEGATIVE: "bold blue",
    CardCategory.ZERO: "bold cyan",
    CardCategory.LOW: "green",
    CardCategory.MID: "yellow",
    CardCategory.HIGH: "red",
}

OUTLINE_STYLES = {
    Outline.NONE: "cyan",
    Outline.FAVORABLE: "bright_green",
    Outline.UNFAVORABLE: "red",
}


def format_value(value: int) -> str:
    """Return a Rich-rendered label for a revealed card ``value``."""

    style = CATEGORY_STYLES[CardCategory.for_value(value)]
    return f"[{style}]{value:>3}[/{style}]"


def format_card(view: CardView) -> str:
    """Return a Rich-rendered label for a card slot."""

    if not view.alive:
        label = "[dim]  ·[/dim]"
    elif view.value is None:
        label = "[grey50]  ?[/grey50]"
    else:
        label = format_value(view.value)
    if view.highlight == Highlight.SELECTABLE:
        label = f"[reverse]{label}[/reverse]"
    return label


def render_board(view: BoardView, *, title: str = "Skyjo") -> RenderableType:
    """Return a Rich panel describing the board snapshot."""

    summary = BoardSummaryView(view=view, card_formatter=format_card, outline_styles=OUTLINE_STYLES)
    return Panel(summary.render(), title=title, padding=(0, 1), border_style="cyan")
