from __future__ import annotations

from skyjo import actions, presentation, rules, scoring, state
from skyjo.actions import Selection, TickInput, Zone
from skyjo.cards import Card
from skyjo.presentation import Highlight, Outline
from skyjo.state import PhaseState, SkyjoConfig, SkyjoState, TurnPhase


def _dealt(seed: int = 5) -> SkyjoState:
    return actions.tick(state.new_game(SkyjoConfig(seed=seed, player_names=("Ana", "Bo"))))


def _after_initial_flips(game_state: SkyjoState) -> SkyjoState:
    while game_state.phase.kind == TurnPhase.FLIP_INITIAL_TWO_CARDS:
        actions.tick(game_state, TickInput(selection=actions.legal_selections(game_state)[0]))
    return game_state


def _selectable(view: presentation.BoardView) -> list[presentation.CardView]:
    slots = [card for player in view.players for card in player.cards]
    slots.extend(card for card in (view.deck_top, view.discard_top) if card is not None)
    return [card for card in slots if card.selectable]


def test_initial_flip_view_highlights_own_face_down_cards() -> None:
    game_state = _dealt()

    view = presentation.build_board_view(game_state)

    assert view.phase == TurnPhase.FLIP_INITIAL_TWO_CARDS
    assert view.instruction == "Ana: choose 2 cards to flip"
    highlighted = _selectable(view)
    assert len(highlighted) == 12
    assert all(card.zone == Zone.HAND and card.player == 0 for card in highlighted)
    assert all(card.highlight == Highlight.NONE for card in view.players[1].cards)


def test_hidden_cards_expose_no_value() -> None:
    game_state = _dealt()
    actions.tick(game_state, TickInput(selection=Selection.hand(3)))

    view = presentation.build_board_view(game_state)
    cards = view.players[0].cards

    assert cards[3].value == game_state.players[0].hand[3].value
    assert cards[3].face_up
    assert all(card.value is None for idx, card in enumerate(cards) if idx != 3)
    assert view.deck_top is not None and view.deck_top.value is None
    assert view.discard_top is not None
    assert view.discard_top.value == game_state.discard[-1].value


def test_select_from_pile_highlights_only_piles() -> None:
    game_state = _after_initial_flips(_dealt())

    view = presentation.build_board_view(game_state)

    assert view.instruction.endswith("select from a pile")
    zones = {card.zone for card in _selectable(view)}
    assert zones == {Zone.DECK, Zone.DISCARD}


def test_deck_flipped_view_shows_held_card() -> None:
    game_state = _after_initial_flips(_dealt())
    held = rules.draw_from_deck(game_state)

    view = presentation.build_board_view(game_state)

    assert view.held is not None
    assert view.held.value == held.value
    assert not view.held.selectable
    assert view.held.selection is None
    assert str(held.value) in view.instruction
    assert view.discard_top is not None and view.discard_top.selectable
    assert view.deck_top is None or not view.deck_top.selectable


def test_card_view_selection_round_trips_to_actions() -> None:
    game_state = _dealt()
    view = presentation.build_board_view(game_state)
    slot = view.players[0].cards[7]

    actions.tick(game_state, TickInput(selection=slot.selection))

    assert game_state.players[0].hand[7].face_up


def test_round_end_outlines_mark_winner() -> None:
    game_state = _dealt()
    result = scoring.score_round(1, 0, (4, 10))
    game_state.phase = PhaseState(kind=TurnPhase.END_ROUND, result=result)

    view = presentation.build_board_view(game_state)

    assert view.instruction == "Round ended, press continue"
    assert [player.outline for player in view.players] == [Outline.FAVORABLE, Outline.UNFAVORABLE]
    assert all(card.outline == Outline.FAVORABLE for card in view.players[0].cards)
    assert _selectable(view) == []


def test_round_end_tie_has_no_outline() -> None:
    game_state = _dealt()
    game_state.phase = PhaseState(kind=TurnPhase.END_ROUND, result=scoring.score_round(1, 1, (0, 0)))

    outlines = presentation.hand_outlines(game_state)

    assert outlines == [Outline.NONE, Outline.NONE]


def test_doubled_raw_tie_outlines_the_other_player() -> None:
    game_state = _dealt()
    result = scoring.score_round(1, 1, (7, 7))
    game_state.phase = PhaseState(kind=TurnPhase.END_ROUND, result=result)

    assert result.scores == (7, 14)
    assert presentation.hand_outlines(game_state) == [Outline.FAVORABLE, Outline.UNFAVORABLE]


def test_outlines_absent_during_play() -> None:
    game_state = _after_initial_flips(_dealt())

    assert presentation.hand_outlines(game_state) == [Outline.NONE, Outline.NONE]


def test_end_game_instruction_names_winner() -> None:
    game_state = _dealt()
    game_state.players[0].game_score = 101
    game_state.players[1].game_score = 40
    game_state.phase = PhaseState.of(TurnPhase.END_GAME)

    assert presentation.instruction(game_state) == "Game over, Bo wins. Press reset to play again"

    game_state.players[0].game_score = 40
    assert presentation.instruction(game_state).startswith("Game over, it is a draw")


def test_empty_deck_with_refillable_discard_stays_selectable() -> None:
    game_state = _after_initial_flips(_dealt())
    game_state.discard.extend(game_state.deck)
    game_state.deck = []
    for card in game_state.discard:
        card.face_up = True

    view = presentation.build_board_view(game_state)

    assert view.deck_size == 0
    assert view.deck_top is not None
    assert view.deck_top.selectable
    assert view.deck_top.value is None


def test_dead_cards_render_without_value() -> None:
    game_state = _dealt()
    game_state.players[0].hand[0] = Card(6, face_up=False, alive=False)

    view = presentation.build_board_view(game_state)

    assert view.players[0].cards[0].value is None
    assert not view.players[0].cards[0].alive
    assert not view.players[0].cards[0].selectable
