"""JSON serialization for game states."""

import json
from typing import Any, Dict, List, Optional

from solitaire.cards.schema import Card
from solitaire.simulation.state import (
    DrawMode,
    FreeCellState,
    GameState,
    KlondikeState,
    TableauColumn,
)

FREECELL = "freecell"
KLONDIKE = "klondike"


def _cards_to_list(cards) -> List[str]:
    return [card.id for card in cards]


def _cards_from_list(ids: List[str]) -> tuple[Card, ...]:
    if not isinstance(ids, list):
        raise ValueError(f"Expected a list of card ids, got {type(ids).__name__}")
    return tuple(Card.from_id(card_id) for card_id in ids)


def _int_field(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Convert a game state to a JSON-serializable dict."""
    if isinstance(state, FreeCellState):
        return {
            "game": FREECELL,
            "seed": state.seed,
            "moves": state.moves,
            "tableau": [_cards_to_list(column) for column in state.tableau],
            "free_cells": [card.id if card is not None else None for card in state.free_cells],
            "foundations": [_cards_to_list(pile) for pile in state.foundations],
        }
    if isinstance(state, KlondikeState):
        return {
            "game": KLONDIKE,
            "seed": state.seed,
            "moves": state.moves,
            "draw_mode": state.draw_mode.value,
            "tableau": [
                {"cards": _cards_to_list(column.cards), "face_up_count": column.face_up_count}
                for column in state.tableau
            ],
            "stock": _cards_to_list(state.stock),
            "waste": _cards_to_list(state.waste),
            "foundations": [_cards_to_list(pile) for pile in state.foundations],
        }
    raise TypeError(f"Unsupported game state: {type(state).__name__}")


def state_to_json(state: GameState, indent: Optional[int] = None) -> str:
    """Serialize a game state to a JSON string."""
    return json.dumps(state_to_dict(state), indent=indent)


def state_from_dict(data: Dict[str, Any]) -> GameState:
    """Create a game state from its dict form.

    Raises:
        ValueError: Unknown game kind, malformed card ids or non-integer counters
        KeyError: Missing fields
    """
    game = data["game"]
    if game == FREECELL:
        return FreeCellState(
            tableau=tuple(_cards_from_list(column) for column in data["tableau"]),
            free_cells=tuple(
                Card.from_id(card_id) if card_id is not None else None for card_id in data["free_cells"]
            ),
            foundations=tuple(_cards_from_list(pile) for pile in data["foundations"]),
            seed=_int_field(data["seed"], "seed"),
            moves=_int_field(data.get("moves", 0), "moves"),
        )
    if game == KLONDIKE:
        return KlondikeState(
            tableau=tuple(
                TableauColumn(
                    cards=_cards_from_list(column["cards"]),
                    face_up_count=_int_field(column["face_up_count"], "face_up_count"),
                )
                for column in data["tableau"]
            ),
            stock=_cards_from_list(data["stock"]),
            waste=_cards_from_list(data["waste"]),
            foundations=tuple(_cards_from_list(pile) for pile in data["foundations"]),
            seed=_int_field(data["seed"], "seed"),
            moves=_int_field(data.get("moves", 0), "moves"),
            draw_mode=DrawMode(data.get("draw_mode", DrawMode.DRAW_ONE.value)),
        )
    raise ValueError(f"Unknown game kind: {game!r}")


def state_from_json(json_str: str) -> GameState:
    """Deserialize a game state from a JSON string."""
    return state_from_dict(json.loads(json_str))
