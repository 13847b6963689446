"""Immutable game state representation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Union

from solitaire.cards.deck import is_full_deck
from solitaire.cards.schema import Card

FOUNDATION_COUNT = 4
FOUNDATION_SIZE = 13


# Locations -----------------------------------------------------------------


@dataclass(frozen=True)
class TableauLocation:
    """A tableau column; ``card_count`` cards from the exposed end are addressed."""

    index: int
    card_count: int = 1


@dataclass(frozen=True)
class FoundationLocation:
    index: int


@dataclass(frozen=True)
class FreeCellLocation:
    """A free cell (FreeCell only)."""

    index: int


@dataclass(frozen=True)
class StockLocation:
    """Face-down draw pile (Klondike only)."""


@dataclass(frozen=True)
class WasteLocation:
    """Face-up discard pile (Klondike only)."""


Location = Union[
    TableauLocation,
    FoundationLocation,
    FreeCellLocation,
    StockLocation,
    WasteLocation,
]


def card_count_of(location: Location) -> int:
    """Number of cards addressed by a location (only tableau runs exceed 1)."""
    if isinstance(location, TableauLocation):
        return location.card_count
    return 1


def same_slot(a: Location, b: Location) -> bool:
    """True if both locations name the same pile, ignoring card counts."""
    if isinstance(a, TableauLocation) and isinstance(b, TableauLocation):
        return a.index == b.index
    return a == b


# States --------------------------------------------------------------------


class DrawMode(Enum):
    """Klondike stock draw modes."""

    DRAW_ONE = "draw1"
    DRAW_THREE = "draw3"

    @property
    def draw_count(self) -> int:
        return 3 if self is DrawMode.DRAW_THREE else 1


@dataclass(frozen=True)
class TableauColumn:
    """Klondike tableau column: cards plus how many of them (from the end) are face-up."""

    cards: tuple[Card, ...] = ()
    face_up_count: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.face_up_count <= len(self.cards):
            raise ValueError(
                f"face_up_count {self.face_up_count} out of range for column of {len(self.cards)} cards"
            )

    @property
    def face_down_count(self) -> int:
        return len(self.cards) - self.face_up_count

    @property
    def face_up_cards(self) -> tuple[Card, ...]:
        return self.cards[self.face_down_count:]

    @property
    def top(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    def __len__(self) -> int:
        return len(self.cards)


@dataclass(frozen=True)
class FreeCellState:
    """Immutable FreeCell game state.

    All nested structures are tuples; transitions build a new state with
    ``copy_with`` and never touch the previous one.
    """

    tableau: tuple[tuple[Card, ...], ...]
    free_cells: tuple[Optional[Card], ...]
    foundations: tuple[tuple[Card, ...], ...]
    seed: int
    moves: int = 0

    def copy_with(self, **changes) -> "FreeCellState":  # type: ignore
        """Create a new state with specified changes."""
        return replace(self, **changes)

    @property
    def empty_free_cells(self) -> int:
        return sum(1 for cell in self.free_cells if cell is None)


@dataclass(frozen=True)
class KlondikeState:
    """Immutable Klondike game state. Top of stock and waste is the last card."""

    tableau: tuple[TableauColumn, ...]
    stock: tuple[Card, ...]
    waste: tuple[Card, ...]
    foundations: tuple[tuple[Card, ...], ...]
    seed: int
    moves: int = 0
    draw_mode: DrawMode = DrawMode.DRAW_ONE

    def copy_with(self, **changes) -> "KlondikeState":  # type: ignore
        """Create a new state with specified changes."""
        return replace(self, **changes)


GameState = Union[FreeCellState, KlondikeState]


def all_cards(state: GameState) -> Iterator[Card]:
    """Iterate over every card in every zone of the state."""
    if isinstance(state, FreeCellState):
        for column in state.tableau:
            yield from column
        yield from (card for card in state.free_cells if card is not None)
    else:
        for tableau_column in state.tableau:
            yield from tableau_column.cards
        yield from state.stock
        yield from state.waste
    for foundation in state.foundations:
        yield from foundation


def has_full_deck(state: GameState) -> bool:
    """Card conservation: the state holds exactly one standard deck."""
    return is_full_deck(list(all_cards(state)))


def is_won(state: GameState) -> bool:
    """All four foundations are complete (Ace to King)."""
    return len(state.foundations) == FOUNDATION_COUNT and all(
        len(foundation) == FOUNDATION_SIZE for foundation in state.foundations
    )


def replace_at(items: tuple, index: int, value) -> tuple:  # type: ignore
    """Copy of ``items`` with position ``index`` replaced."""
    return items[:index] + (value,) + items[index + 1:]
