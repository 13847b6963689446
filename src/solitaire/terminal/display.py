"""Terminal display for game states and moves."""

from __future__ import annotations

from typing import Optional, Sequence

from solitaire.cards.schema import Card
from solitaire.simulation.movegen import LegalMove
from solitaire.simulation.state import (
    FoundationLocation,
    FreeCellLocation,
    FreeCellState,
    GameState,
    KlondikeState,
    Location,
    StockLocation,
    TableauLocation,
    WasteLocation,
)

CELL_WIDTH = 4
FACE_DOWN = "##"
EMPTY = "--"


def format_card(card: Optional[Card]) -> str:
    """Card with unicode suit symbol, e.g. "10♥"."""
    return EMPTY if card is None else str(card)


def format_location(location: Location) -> str:
    """Location in the notation accepted by the command parser."""
    if isinstance(location, TableauLocation):
        suffix = f"x{location.card_count}" if location.card_count > 1 else ""
        return f"t{location.index + 1}{suffix}"
    if isinstance(location, FoundationLocation):
        return f"f{location.index + 1}"
    if isinstance(location, FreeCellLocation):
        return f"c{location.index + 1}"
    if isinstance(location, WasteLocation):
        return "w"
    if isinstance(location, StockLocation):
        return "stock"
    return repr(location)


def format_move(move: LegalMove) -> str:
    return f"{format_location(move.source)} {format_location(move.destination)}"


def _row(items: Sequence[str]) -> str:
    return " ".join(item.rjust(CELL_WIDTH) for item in items)


class StateRenderer:
    """Renders a game state as plain text."""

    def render(self, state: GameState, highlights: Sequence[str] = ()) -> str:
        lines: list[str] = []
        if isinstance(state, FreeCellState):
            lines.append(f"=== FreeCell #{state.seed}  moves: {state.moves} ===")
            lines.append("Cells:       " + _row([format_card(card) for card in state.free_cells]))
            lines.append("Foundations: " + _row([format_card(pile[-1] if pile else None) for pile in state.foundations]))
            columns = [[format_card(card) for card in column] for column in state.tableau]
        elif isinstance(state, KlondikeState):
            lines.append(
                f"=== Klondike #{state.seed}  moves: {state.moves}  ({state.draw_mode.value}) ==="
            )
            waste_top = format_card(state.waste[-1]) if state.waste else EMPTY
            lines.append(f"Stock: {len(state.stock):>2}   Waste: {waste_top}")
            lines.append("Foundations: " + _row([format_card(pile[-1] if pile else None) for pile in state.foundations]))
            columns = [
                [FACE_DOWN] * column.face_down_count + [format_card(card) for card in column.face_up_cards]
                for column in state.tableau
            ]
        else:
            raise TypeError(f"Unsupported game state: {type(state).__name__}")

        lines.append("")
        lines.append(_row([f"t{i + 1}" for i in range(len(columns))]))
        depth = max((len(column) for column in columns), default=0)
        for row in range(depth):
            cells = []
            for column in columns:
                if row < len(column):
                    label = column[row]
                    if label in highlights:
                        label = f"*{label}"
                    cells.append(label)
                else:
                    cells.append("")
            lines.append(_row(cells))
        return "\n".join(lines)


class MovePresenter:
    """Lists legal moves in command notation."""

    def present(self, moves: Sequence[LegalMove]) -> str:
        if not moves:
            return "No legal moves."
        return "Moves: " + "  ".join(format_move(move) for move in moves)
