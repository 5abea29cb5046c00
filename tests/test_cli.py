from __future__ import annotations

from pathlib import Path

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from skyjo import actions, presentation, serialization, state
from skyjo.actions import TickInput
from skyjo.cli.main import _parse_names, app
from skyjo.cli.render import format_card, format_value, render_board
from skyjo.cli.textual.app import _has_effect, _result_lines
from skyjo.cli.views import render_composition, render_match_summary, render_round_summary
from skyjo.scoring import MatchHistory, score_round
from skyjo.state import SkyjoConfig

runner = CliRunner()


def _export(renderable: object) -> str:
    console = Console(record=True, width=140, color_system=None)
    console.print(renderable)
    return console.export_text()


def test_format_value_styles_by_category() -> None:
    assert format_value(-2) == "[bold blue] -2[/bold blue]"
    assert format_value(0) == "[bold cyan]  0[/bold cyan]"
    assert format_value(12) == "[red] 12[/red]"


def test_format_card_marks_selectable_and_hidden_slots() -> None:
    game_state = actions.tick(state.new_game(SkyjoConfig(seed=2)))
    view = presentation.build_board_view(game_state)

    own = format_card(view.players[0].cards[0])
    other = format_card(view.players[1].cards[0])

    assert own.startswith("[reverse]")
    assert "?" in own
    assert not other.startswith("[reverse]")


def test_render_board_lists_players_and_instruction() -> None:
    config = SkyjoConfig(seed=4, player_names=("Ana", "Bo"))
    game_state = actions.tick(state.new_game(config))
    actions.tick(game_state, TickInput(selection=actions.legal_selections(game_state)[0]))

    text = _export(render_board(presentation.build_board_view(game_state)))

    assert "Ana" in text
    assert "Bo" in text
    assert "Deck" in text
    assert "Ana: choose 2 cards to flip" in text


def test_round_and_match_summaries() -> None:
    history = MatchHistory(num_players=2)
    result = score_round(1, 0, (14, 9))
    history.record(result)

    round_text = _export(render_round_summary(result, ["Ana", "Bo"]))
    match_text = _export(render_match_summary(history, ["Ana", "Bo"]))

    assert "Round 1 Summary" in round_text
    assert "doubled" in round_text
    assert "28" in round_text
    assert "Match Totals" in match_text
    assert "Bo" in match_text


def test_composition_table_covers_every_value() -> None:
    text = _export(render_composition(lambda value: str(value)))

    assert "150 cards" in text
    for value in range(-2, 13):
        assert str(value) in text


def test_rules_command_prints_composition() -> None:
    result = runner.invoke(app, ["rules"])

    assert result.exit_code == 0
    assert "150" in result.stdout
    assert "doubled" in result.stdout


@pytest.mark.parametrize("raw", ["solo", "a,b,c", " , "])
def test_parse_names_requires_two_players(raw: str) -> None:
    with pytest.raises(typer.BadParameter):
        _parse_names(raw)


def test_parse_names_strips_whitespace() -> None:
    assert _parse_names(" Ana , Bo ") == ("Ana", "Bo")


def test_play_rejects_bad_names_before_starting() -> None:
    result = runner.invoke(app, ["play", "--names", "solo"])

    assert result.exit_code != 0


def test_textual_helpers_skip_idle_ticks() -> None:
    game_state = state.new_game(SkyjoConfig(seed=6))
    assert _has_effect(game_state, TickInput())
    actions.tick(game_state)
    assert not _has_effect(game_state, TickInput())
    assert _has_effect(game_state, TickInput(reset=True))

    lines = _result_lines(score_round(2, 1, (3, 3)), ["Ana", "Bo"])
    assert lines[0] == "[bold]Round 2[/bold] ended by Bo"
    assert lines[2].endswith("(doubled)[/red]")


def test_show_deals_and_saves_snapshot(tmp_path: Path) -> None:
    target = tmp_path / "table.json"

    result = runner.invoke(app, ["show", "--seed", "3", "--names", "Ana,Bo", "--save", str(target)])

    assert result.exit_code == 0
    assert "Ana" in result.stdout
    assert "choose 2 cards to flip" in result.stdout
    restored = serialization.state_from_json(target.read_text(encoding="utf-8"))
    assert restored.phase.kind == state.TurnPhase.FLIP_INITIAL_TWO_CARDS
    assert restored.config.player_names == ("Ana", "Bo")


def test_show_renders_round_summary_from_snapshot(tmp_path: Path) -> None:
    game_state = actions.tick(state.new_game(SkyjoConfig(seed=9)))
    result = score_round(1, 0, (4, 10))
    game_state.history.record(result)
    game_state.phase = state.PhaseState(kind=state.TurnPhase.END_ROUND, result=result)
    snapshot = tmp_path / "ended.json"
    snapshot.write_text(serialization.state_to_json(game_state), encoding="utf-8")

    output = runner.invoke(app, ["show", "--snapshot", str(snapshot)])

    assert output.exit_code == 0
    assert "Round 1 Summary" in output.stdout
    assert "Match Totals" in output.stdout


def test_show_rejects_unreadable_snapshot(tmp_path: Path) -> None:
    snapshot = tmp_path / "broken.json"
    snapshot.write_text("{}", encoding="utf-8")

    result = runner.invoke(app, ["show", "--snapshot", str(snapshot)])

    assert result.exit_code != 0
