"""Typer entry-point wiring for the Skyjo CLI."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from .. import actions, serialization
from ..cards import ShuffleMode
from ..logs import setup_logging
from ..presentation import build_board_view
from ..state import SCORE_LIMIT, SkyjoConfig, SkyjoState, new_game
from .render import format_value, render_board
from .textual import run_textual_app
from .textual.app import DEFAULT_FPS
from .views import render_composition, render_match_summary, render_round_summary

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _parse_names(names: str) -> tuple[str, ...]:
    parsed = tuple(part.strip() for part in names.split(",") if part.strip())
    if len(parsed) != 2:
        raise typer.BadParameter("Provide exactly two comma-separated player names.")
    return parsed


@app.command()
def play(
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    names: str = typer.Option("Player 1,Player 2", help="Comma-separated names of the two players."),
    score_limit: int = typer.Option(SCORE_LIMIT, min=1, help="Cumulative score that ends the game."),
    shuffle: ShuffleMode = typer.Option(ShuffleMode.UNIFORM, help="Deck shuffling strategy."),
    fps: int = typer.Option(DEFAULT_FPS, min=1, max=120, help="Input polling rate in ticks per second."),
    log_level: str = typer.Option("WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)."),
    log_file: Path | None = typer.Option(None, help="Write logs to this file."),
) -> None:
    """Play a two-player game of Skyjo in the terminal."""

    try:
        setup_logging(log_level, log_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    config = SkyjoConfig(
        score_limit=score_limit,
        shuffle_mode=shuffle,
        player_names=_parse_names(names),
        seed=seed,
    )
    run_textual_app(config=config, fps=fps)


def _load_or_deal(snapshot: Path | None, seed: int | None, names: str) -> SkyjoState:
    if snapshot is not None:
        try:
            return serialization.state_from_json(snapshot.read_text(encoding="utf-8"))
        except (OSError, ValueError, KeyError) as exc:
            raise typer.BadParameter(f"Cannot load snapshot {snapshot}: {exc}") from exc
    game_state = new_game(SkyjoConfig(player_names=_parse_names(names), seed=seed))
    return actions.tick(game_state)


@app.command()
def show(
    snapshot: Path | None = typer.Option(None, exists=True, dir_okay=False, help="JSON snapshot to render."),
    seed: int | None = typer.Option(None, help="Seed for a freshly dealt table when no snapshot is given."),
    names: str = typer.Option("Player 1,Player 2", help="Comma-separated names of the two players."),
    save: Path | None = typer.Option(None, dir_okay=False, help="Write the rendered table as a JSON snapshot."),
) -> None:
    """Render a table snapshot (or a fresh deal) without starting the UI."""

    game_state = _load_or_deal(snapshot, seed, names)
    view = build_board_view(game_state)
    names_list = list(game_state.config.player_names)
    console.print(render_board(view))
    if view.result is not None:
        console.print(render_round_summary(view.result, names_list))
    if game_state.history.rounds:
        console.print(render_match_summary(game_state.history, names_list))
    if save is not None:
        save.write_text(serialization.state_to_json(game_state, indent=2), encoding="utf-8")
        console.print(f"[green]Snapshot written to {save}[/green]")


@app.command()
def rules() -> None:
    """Print the deck composition and scoring reminders."""

    console.print(render_composition(format_value))
    console.print(
        "Flip 2 cards to start. Each turn take the discard or draw from the deck; "
        "a drawn card may be discarded in exchange for flipping a hidden card.\n"
        "Three matching non-negative cards in a column are cleared. "
        "Whoever reveals their last card ends the round and has their score doubled "
        f"unless it is strictly the lowest. The game ends at {SCORE_LIMIT} points."
    )


def main() -> None:
    """Entry-point for ``python -m skyjo.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
