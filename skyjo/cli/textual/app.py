"""Textual-powered interactive Skyjo table."""

from __future__ import annotations

import logging
from collections import deque
from typing import Sequence

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from textual import events, on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Grid, Horizontal, Vertical
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from ... import actions, state
from ...actions import Selection, TickInput
from ...cards import EmptyDeckError
from ...presentation import BoardView, CardView, Outline, PlayerView, build_board_view
from ...rules import IllegalMove, InvalidSelectionError
from ...scoring import MatchHistory, RoundResult
from ..render import format_value
from ..views import render_match_summary, render_round_summary

logger = logging.getLogger(__name__)

MAX_EVENT_LINES = 18
DEFAULT_FPS = 30

_CARD_CLASSES = ("-selectable", "-hidden", "-dead", "-empty", "-favorable", "-unfavorable")


class CardWidget(Static):
    """One clickable card slot."""

    class Picked(Message):
        def __init__(self, selection: Selection) -> None:
            super().__init__()
            self.selection = selection

    def __init__(self, *, id: str | None = None) -> None:
        super().__init__("", id=id)
        self.card_view: CardView | None = None

    def show(self, view: CardView | None) -> None:
        self.card_view = view
        for name in _CARD_CLASSES:
            self.remove_class(name)
        if view is None:
            self.add_class("-empty")
            self.update("")
            return
        if not view.alive:
            self.add_class("-dead")
            self.update(Text("·"))
        elif view.value is None:
            self.add_class("-hidden")
            self.update(Text("?"))
        else:
            self.update(Text.from_markup(format_value(view.value)))
        self.set_class(view.selectable, "-selectable")
        self.set_class(view.outline == Outline.FAVORABLE, "-favorable")
        self.set_class(view.outline == Outline.UNFAVORABLE, "-unfavorable")

    def on_click(self, event: events.Click) -> None:  # pragma: no cover - driven by UI interaction
        if self.card_view is None:
            return
        selection = self.card_view.selection
        if selection is None:
            return
        event.stop()
        self.post_message(self.Picked(selection))


class HandPanel(Vertical):
    """A player's name line above their 4 x 3 card grid."""

    def __init__(self, player_index: int, hand_size: int) -> None:
        super().__init__(id=f"hand-{player_index}", classes="hand")
        self.player_index = player_index
        self.caption = Static("", classes="caption")
        self.cards = [CardWidget(id=f"card-{player_index}-{slot}") for slot in range(hand_size)]

    def compose(self) -> ComposeResult:
        yield self.caption
        yield Grid(*self.cards, classes="hand-grid")

    def show(self, player: PlayerView) -> None:
        marker = "▶ " if player.active else ""
        self.caption.update(
            Text.from_markup(
                f"{marker}[bold]{player.name}[/bold]  "
                f"[dim]round[/dim] {player.live_score}  [dim]game[/dim] {player.game_score}"
            )
        )
        self.set_class(player.active, "-active")
        self.set_class(player.outline == Outline.FAVORABLE, "-favorable")
        self.set_class(player.outline == Outline.UNFAVORABLE, "-unfavorable")
        for widget, card in zip(self.cards, player.cards):
            widget.show(card)


class EventLog(Static):
    """Simple rolling log rendered inside a panel."""

    lines: reactive[tuple[str, ...]] = reactive((), init=False)

    def on_mount(self) -> None:  # pragma: no cover - widget lifecycle glue
        self._refresh()

    def add(self, message: str) -> None:
        log = list(self.lines)
        log.append(message)
        self.lines = tuple(log[-MAX_EVENT_LINES:])

    def clear(self) -> None:
        self.lines = ()

    def watch_lines(self, value: tuple[str, ...]) -> None:
        self._refresh(value)

    def _refresh(self, lines: tuple[str, ...] | None = None) -> None:
        content = Table.grid(padding=(0, 1))
        content.expand = True
        content.add_column(justify="left")
        rows = lines if lines is not None else self.lines
        if rows:
            for line in rows:
                content.add_row(Text.from_markup(line))
        else:
            content.add_row(Text.from_markup("[dim]Event log will appear here[/dim]"))
        self.update(Panel(content, title="Events", border_style="magenta"))


class ScorePanel(Static):
    """Displays the last round summary above the rolling match totals."""

    def update_scores(
        self,
        history: MatchHistory,
        names: Sequence[str],
        result: RoundResult | None = None,
    ) -> None:
        totals = render_match_summary(history, names)
        if result is None:
            self.update(Panel(totals, border_style="bright_blue"))
            return
        summary = render_round_summary(result, names)
        self.update(Panel(Group(summary, totals), border_style="bright_blue"))


class StatusStrip(Static):
    """Single line status helper."""

    message: reactive[str] = reactive("", init=False)

    def watch_message(self, value: str) -> None:
        self.update(Panel(Text.from_markup(value or "[dim]Ready[/dim]"), border_style="green"))


class SkyjoTextualApp(App):
    """Textual Skyjo table for two players sharing one terminal."""

    CSS = """
    Screen {
        layout: vertical;
        height: 100%;
    }

    #main {
        layout: horizontal;
        height: 1fr;
    }

    #table {
        width: 2fr;
        padding: 0 1;
    }

    #side {
        width: 1fr;
        padding: 0 1;
    }

    .hand {
        height: auto;
        border: round $panel;
        padding: 0 1;
        margin-bottom: 1;
    }

    .hand.-active {
        border: heavy $warning;
    }

    .hand.-favorable {
        border: heavy $success;
    }

    .hand.-unfavorable {
        border: heavy $error;
    }

    .hand-grid {
        grid-size: 4 3;
        grid-gutter: 0 1;
        height: auto;
        width: auto;
    }

    #piles {
        height: auto;
    }

    .pile-label {
        width: auto;
        padding: 1 1;
    }

    CardWidget {
        width: 7;
        height: 3;
        content-align: center middle;
        border: round $panel-lighten-2;
    }

    CardWidget.-hidden {
        background: $boost;
    }

    CardWidget.-dead {
        color: $text-muted;
        border: none;
    }

    CardWidget.-empty {
        border: none;
    }

    CardWidget.-selectable {
        border: round $accent;
    }

    CardWidget.-selectable:hover {
        background: $accent 40%;
    }

    EventLog, ScorePanel {
        width: 100%;
        min-height: 6;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit"),
        Binding("n", "continue_round", "Continue"),
        Binding("r", "reset_game", "Reset"),
        Binding("p", "take_screenshot", "Screenshot"),
    ]

    def __init__(self, *, config: state.SkyjoConfig, fps: int = DEFAULT_FPS) -> None:
        super().__init__()
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.config = config
        self.fps = fps
        self.game_state = state.new_game(config)
        self._inputs: deque[TickInput] = deque()
        self._last_phase: state.TurnPhase | None = None

        self.status_strip: StatusStrip | None = None
        self.hands: list[HandPanel] = []
        self.deck_widget = CardWidget(id="deck")
        self.discard_widget = CardWidget(id="discard")
        self.held_widget = CardWidget(id="held")
        self.event_log: EventLog | None = None
        self.score_panel: ScorePanel | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        self.status_strip = StatusStrip(id="status")
        yield self.status_strip

        self.hands = [HandPanel(idx, self.config.hand_size) for idx in range(self.config.num_players)]
        piles = Horizontal(
            Static("Deck", classes="pile-label"),
            self.deck_widget,
            Static("Discard", classes="pile-label"),
            self.discard_widget,
            Static("Holding", classes="pile-label"),
            self.held_widget,
            id="piles",
        )
        table = Vertical(*self.hands, piles, id="table")

        self.event_log = EventLog(id="events")
        self.score_panel = ScorePanel(id="scores")
        side = Vertical(self.score_panel, self.event_log, id="side")

        yield Horizontal(table, side, id="main")
        yield Footer()

    def on_mount(self) -> None:
        self.set_interval(1 / self.fps, self._on_tick)

    def action_continue_round(self) -> None:
        self._inputs.append(TickInput(advance_round=True))

    def action_reset_game(self) -> None:
        self._inputs.append(TickInput(reset=True))

    def action_take_screenshot(self) -> None:
        path = self.save_screenshot()
        self.notify(f"Screenshot saved to {path}")

    @on(CardWidget.Picked)
    def _on_card_picked(self, message: CardWidget.Picked) -> None:
        message.stop()
        self._inputs.append(TickInput(selection=message.selection))

    def _on_tick(self) -> None:
        tick_input = self._inputs.popleft() if self._inputs else TickInput()
        before = self.game_state
        if self._last_phase is not None and not _has_effect(before, tick_input):
            return
        try:
            if tick_input.selection is not None and not actions.is_selectable(before, tick_input.selection):
                self._set_status("[dim]That card cannot be selected right now.[/dim]")
                return
            self.game_state = actions.tick(before, tick_input)
        except (InvalidSelectionError, IllegalMove, EmptyDeckError) as exc:
            logger.warning("input %s rejected: %s", tick_input, exc)
            self._set_status(f"[red]{exc}[/red]")
            return
        if self.game_state is not before and self.event_log:
            self.event_log.clear()
            self.event_log.add("[bold cyan]New game[/bold cyan]")
        self._refresh_ui()

    def _refresh_ui(self) -> None:
        view = build_board_view(self.game_state)
        self._record_events(view)
        for panel, player in zip(self.hands, view.players):
            panel.show(player)
        self.deck_widget.show(view.deck_top)
        self.discard_widget.show(view.discard_top)
        self.held_widget.show(view.held)
        self._set_status(view.instruction)
        if self.score_panel:
            self.score_panel.update_scores(self.game_state.history, self.config.player_names, view.result)
        self.title = f"Skyjo • Round {view.round_number}"

    def _record_events(self, view: BoardView) -> None:
        phase = view.phase
        if phase == self._last_phase:
            return
        self._last_phase = phase
        if not self.event_log:
            return
        if phase == state.TurnPhase.FLIP_INITIAL_TWO_CARDS:
            self.event_log.add(f"[bold cyan]Round {view.round_number}[/bold cyan] dealt")
        elif phase in (state.TurnPhase.END_ROUND, state.TurnPhase.END_GAME) and view.result is not None:
            for line in _result_lines(view.result, self.config.player_names):
                self.event_log.add(line)
        if phase == state.TurnPhase.END_GAME:
            self.event_log.add(f"[bold green]{view.instruction}[/bold green]")

    def _set_status(self, message: str) -> None:
        if self.status_strip:
            self.status_strip.message = message


def _has_effect(game_state: state.SkyjoState, tick_input: TickInput) -> bool:
    """Return whether ticking with ``tick_input`` can change anything."""

    if tick_input.reset or tick_input.advance_round or tick_input.selection is not None:
        return True
    return game_state.phase.kind == state.TurnPhase.DEAL


def _result_lines(result: RoundResult, names: Sequence[str]) -> list[str]:
    lines = [f"[bold]Round {result.round_number}[/bold] ended by {names[result.ending_index]}"]
    for idx, name in enumerate(names):
        note = " [red](doubled)[/red]" if result.doubled and idx == result.ending_index else ""
        lines.append(f"  {name}: {result.raw_scores[idx]} → {result.scores[idx]}{note}")
    return lines


def run_textual_app(*, config: state.SkyjoConfig, fps: int = DEFAULT_FPS) -> None:
    """Launch the Textual UI."""

    app = SkyjoTextualApp(config=config, fps=fps)
    app.run()
