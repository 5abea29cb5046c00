"""Composable view primitives for the Skyjo CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from rich import box
from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import CARD_MAP, DECK_CARD_COUNT, CardCategory
from ..presentation import BoardView, CardView, Outline, PlayerView
from ..scoring import MatchHistory, RoundResult
from ..state import COLUMNS


@dataclass(slots=True)
class BoardSummaryView:
    """Renderable summarising a board snapshot."""

    view: BoardView
    card_formatter: Callable[[CardView], str]
    outline_styles: Mapping[Outline, str]

    def _hand_grid(self, player: PlayerView) -> Table:
        grid = Table.grid(padding=(0, 1))
        for _ in range(COLUMNS):
            grid.add_column(justify="right")
        cards = list(player.cards)
        for start in range(0, len(cards), COLUMNS):
            grid.add_row(*(self.card_formatter(card) for card in cards[start : start + COLUMNS]))
        return grid

    def _player_panel(self, player: PlayerView) -> Panel:
        title = player.name
        if player.active:
            title = f"[bold yellow]{title}[/bold yellow]"
        info = Table.grid(expand=True)
        info.add_column(justify="left")
        info.add_row(f"[dim]Round:[/dim] {player.live_score}  [dim]Game:[/dim] {player.game_score}")
        border = self.outline_styles.get(player.outline, "cyan")
        if player.outline == Outline.NONE and player.active:
            border = "bright_yellow"
        return Panel(Group(info, self._hand_grid(player)), title=title, border_style=border, box=box.ROUNDED)

    def _piles_panel(self) -> Panel:
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        view = self.view
        deck = self.card_formatter(view.deck_top) if view.deck_top is not None else "—"
        discard = self.card_formatter(view.discard_top) if view.discard_top is not None else "—"
        grid.add_row(f"[cyan]Deck[/cyan]: {deck} ({view.deck_size} card(s))")
        grid.add_row(f"[magenta]Discard[/magenta]: {discard} ({view.discard_size} card(s))")
        if view.held is not None:
            grid.add_row(f"[yellow]Holding[/yellow]: {self.card_formatter(view.held)}")
        grid.add_row(f"[cyan]Round[/cyan]: {view.round_number}")
        return Panel(grid, title="Piles", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        panels = [self._player_panel(player) for player in self.view.players]
        return Group(
            Columns(panels, expand=True, equal=True),
            self._piles_panel(),
            f"[bold]{self.view.instruction}[/bold]",
        )


def render_round_summary(result: RoundResult, names: Sequence[str]) -> Table:
    """Return a Rich table describing the outcome of a round."""

    table = Table(title=f"Round {result.round_number} Summary", box=box.SIMPLE_HEAVY)
    table.add_column("Player", justify="center")
    table.add_column("Cards", justify="right")
    table.add_column("Scored", justify="right")
    table.add_column("Note", justify="left")

    winners = result.winner_indices
    for idx, name in enumerate(names):
        label = name
        if idx in winners:
            label = f"[bold green]{label}[/bold green]"
        notes: list[str] = []
        if idx == result.ending_index:
            notes.append("ended round")
            if result.doubled:
                notes.append("[red]doubled[/red]")
        table.add_row(label, str(result.raw_scores[idx]), str(result.scores[idx]), ", ".join(notes))
    return table


def render_match_summary(history: MatchHistory, names: Sequence[str]) -> Table:
    """Return the aggregated match summary table."""

    totals = history.totals()
    table = Table(title="Match Totals", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Player", justify="left")
    table.add_column("Rounds won", justify="right")
    table.add_column("Doubled", justify="right")
    table.add_column("Points", justify="right")

    best = min((total.points for total in totals), default=0)
    for total in totals:
        label = names[total.player_index] if total.player_index < len(names) else f"P{total.player_index}"
        points = str(total.points)
        if history.rounds and total.points == best:
            label = f"[bold blue]{label}[/bold blue]"
            points = f"[bold blue]{points}[/bold blue]"
        table.add_row(label, str(total.rounds_won), str(total.times_doubled), points)
    return table


def render_composition(card_formatter: Callable[[int], str]) -> Table:
    """Return a table listing the deck composition."""

    table = Table(title=f"Skyjo deck ({DECK_CARD_COUNT} cards)", box=box.SIMPLE_HEAVY)
    table.add_column("Value", justify="right")
    table.add_column("Copies", justify="right")
    table.add_column("Class", justify="left")
    rows = sorted((value, count) for count, values in CARD_MAP.items() for value in values)
    for value, count in rows:
        table.add_row(card_formatter(value), str(count), CardCategory.for_value(value).value)
    return table
