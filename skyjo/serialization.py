"""JSON snapshots of a running Skyjo table."""

from __future__ import annotations

import json
import random
from typing import Any, Dict, List

from .cards import Card, ShuffleMode
from .scoring import MatchHistory, RoundResult
from .state import PhaseState, PlayerState, SkyjoConfig, SkyjoState, TurnPhase

SCHEMA_VERSION = 1


def _card_to_dict(card: Card) -> Dict[str, Any]:
    return {"value": card.value, "face_up": card.face_up, "alive": card.alive}


def _card_from_dict(data: Dict[str, Any]) -> Card:
    return Card(value=data["value"], face_up=data["face_up"], alive=data["alive"])


def _cards_from_list(items: List[Dict[str, Any]]) -> List[Card]:
    return [_card_from_dict(item) for item in items]


def _result_to_dict(result: RoundResult) -> Dict[str, Any]:
    return {
        "round_number": result.round_number,
        "ending_index": result.ending_index,
        "raw_scores": list(result.raw_scores),
        "scores": list(result.scores),
        "doubled": result.doubled,
    }


def _result_from_dict(data: Dict[str, Any]) -> RoundResult:
    return RoundResult(
        round_number=data["round_number"],
        ending_index=data["ending_index"],
        raw_scores=tuple(data["raw_scores"]),
        scores=tuple(data["scores"]),
        doubled=data["doubled"],
    )


def _rng_state_to_list(rng: random.Random) -> List[Any]:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def _rng_from_list(data: List[Any]) -> random.Random:
    rng = random.Random()
    version, internal, gauss_next = data
    rng.setstate((version, tuple(internal), gauss_next))
    return rng


def state_to_dict(state: SkyjoState) -> Dict[str, Any]:
    """Convert ``state`` to a JSON-serializable dict."""

    config = state.config
    phase = state.phase
    return {
        "schema_version": SCHEMA_VERSION,
        "config": {
            "num_players": config.num_players,
            "hand_size": config.hand_size,
            "columns": config.columns,
            "rows": config.rows,
            "score_limit": config.score_limit,
            "shuffle_mode": config.shuffle_mode.value,
            "player_names": list(config.player_names),
            "seed": config.seed,
        },
        "phase": {
            "kind": phase.kind.value,
            "held": _card_to_dict(phase.held) if phase.held is not None else None,
            "result": _result_to_dict(phase.result) if phase.result is not None else None,
        },
        "deck": [_card_to_dict(card) for card in state.deck],
        "discard": [_card_to_dict(card) for card in state.discard],
        "players": [
            {
                "name": player.name,
                "hand": [_card_to_dict(card) for card in player.hand],
                "game_score": player.game_score,
            }
            for player in state.players
        ],
        "current_player_index": state.current_player_index,
        "first_player_index": state.first_player_index,
        "round_number": state.round_number,
        "history": [_result_to_dict(result) for result in state.history.rounds],
        "rng": _rng_state_to_list(state.rng),
    }


def state_to_json(state: SkyjoState, indent: int | None = None) -> str:
    """Serialize ``state`` to a JSON string."""

    return json.dumps(state_to_dict(state), indent=indent)


def state_from_dict(data: Dict[str, Any]) -> SkyjoState:
    """Rebuild a ``SkyjoState`` from :func:`state_to_dict` output."""

    version = data.get("schema_version")
    if version != SCHEMA_VERSION:
        raise ValueError(f"unsupported snapshot schema version: {version}")

    raw_config = data["config"]
    config = SkyjoConfig(
        num_players=raw_config["num_players"],
        hand_size=raw_config["hand_size"],
        columns=raw_config["columns"],
        rows=raw_config["rows"],
        score_limit=raw_config["score_limit"],
        shuffle_mode=ShuffleMode(raw_config["shuffle_mode"]),
        player_names=tuple(raw_config["player_names"]),
        seed=raw_config.get("seed"),
    )
    raw_phase = data["phase"]
    phase = PhaseState(
        kind=TurnPhase(raw_phase["kind"]),
        held=_card_from_dict(raw_phase["held"]) if raw_phase.get("held") else None,
        result=_result_from_dict(raw_phase["result"]) if raw_phase.get("result") else None,
    )
    players = [
        PlayerState(
            name=raw["name"],
            hand=_cards_from_list(raw["hand"]),
            game_score=raw["game_score"],
        )
        for raw in data["players"]
    ]
    history = MatchHistory(
        num_players=config.num_players,
        rounds=[_result_from_dict(item) for item in data.get("history", [])],
    )
    return SkyjoState(
        config=config,
        phase=phase,
        deck=_cards_from_list(data["deck"]),
        discard=_cards_from_list(data["discard"]),
        players=players,
        current_player_index=data["current_player_index"],
        first_player_index=data["first_player_index"],
        round_number=data["round_number"],
        history=history,
        rng=_rng_from_list(data["rng"]),
    )


def state_from_json(json_str: str) -> SkyjoState:
    """Deserialize a ``SkyjoState`` from a JSON string."""

    return state_from_dict(json.loads(json_str))
