"""FreeCell rules: 8 columns, free cells, supermoves."""

from __future__ import annotations

from typing import List, Optional, Sequence

from solitaire.cards.deck import DealSource, ShuffleFn, shuffle_with_seed
from solitaire.cards.schema import Card
from solitaire.config import EngineConfig
from solitaire.simulation.engine import VariantRules
from solitaire.simulation.rules import EmptyColumnPolicy, can_stack_descending
from solitaire.simulation.state import (
    FOUNDATION_COUNT,
    FoundationLocation,
    FreeCellLocation,
    FreeCellState,
    Location,
    TableauLocation,
    replace_at,
    same_slot,
)
from solitaire.simulation.supermove import max_movable

TABLEAU_COLUMNS = 8


class FreeCellRules(VariantRules[FreeCellState]):
    """FreeCell: any card may start an empty column, runs move within supermove limits."""

    name = "freecell"
    limits_supermoves = True
    empty_column_policy = EmptyColumnPolicy.ANY_CARD

    @property
    def auto_move_margin(self) -> Optional[int]:
        return self.config.freecell_auto_move_margin

    def new_game(self, source: Optional[DealSource] = None, shuffle: ShuffleFn = shuffle_with_seed) -> FreeCellState:
        """Deal column by column: the first four columns get 7 cards, the rest 6."""
        source = source or DealSource.from_seed()
        deck = source.deck(shuffle)

        tableau: list[tuple[Card, ...]] = []
        position = 0
        for column in range(TABLEAU_COLUMNS):
            size = 7 if column < 4 else 6
            tableau.append(tuple(deck[position:position + size]))
            position += size

        return FreeCellState(
            tableau=tuple(tableau),
            free_cells=(None,) * self.config.free_cells,
            foundations=((),) * FOUNDATION_COUNT,
            seed=source.recorded_seed,
            moves=0,
        )

    def is_source_allowed(self, source: Location) -> bool:
        return isinstance(source, (TableauLocation, FreeCellLocation, FoundationLocation))

    def is_destination_allowed(self, destination: Location) -> bool:
        return isinstance(destination, (TableauLocation, FreeCellLocation, FoundationLocation))

    def extract_run(self, state: FreeCellState, source: Location) -> Optional[tuple[Card, ...]]:
        if isinstance(source, TableauLocation):
            if not 0 <= source.index < len(state.tableau):
                return None
            column = state.tableau[source.index]
            if source.card_count < 1 or source.card_count > len(column):
                return None
            return column[-source.card_count:]
        if isinstance(source, FreeCellLocation):
            if not 0 <= source.index < len(state.free_cells):
                return None
            card = state.free_cells[source.index]
            return (card,) if card is not None else None
        if isinstance(source, FoundationLocation):
            if not 0 <= source.index < len(state.foundations):
                return None
            pile = state.foundations[source.index]
            return (pile[-1],) if pile else None
        return None

    def tableau_accepts(self, state: FreeCellState, index: int, card: Card) -> bool:
        column = state.tableau[index]
        if not column:
            return self.empty_column_policy.allows(card)
        return can_stack_descending(
            card, column[-1], require_alternating_colors=self.require_alternating_colors
        )

    def free_cell_accepts(self, state: FreeCellState, index: int) -> bool:
        return 0 <= index < len(state.free_cells) and state.free_cells[index] is None

    def supermove_capacity(
        self, state: FreeCellState, source: TableauLocation, destination: TableauLocation
    ) -> int:
        empty_columns = sum(
            1
            for i, column in enumerate(state.tableau)
            if not column and i not in (source.index, destination.index)
        )
        return max_movable(state.empty_free_cells, empty_columns)

    def apply_move(
        self,
        state: FreeCellState,
        source: Location,
        destination: Location,
        run: tuple[Card, ...],
    ) -> FreeCellState:
        state = _remove_run(state, source, len(run))
        return _add_run(state, destination, run)

    def candidate_destinations(self, state: FreeCellState, source: Location) -> List[Location]:
        candidates: List[Location] = [
            TableauLocation(i) for i in range(len(state.tableau)) if not same_slot(source, TableauLocation(i))
        ]
        candidates.extend(
            FoundationLocation(i) for i in range(len(state.foundations)) if source != FoundationLocation(i)
        )
        candidates.extend(
            FreeCellLocation(i) for i in range(len(state.free_cells)) if source != FreeCellLocation(i)
        )
        return candidates

    def auto_move_sources(self, state: FreeCellState) -> List[Location]:
        sources: List[Location] = [
            FreeCellLocation(i) for i, card in enumerate(state.free_cells) if card is not None
        ]
        sources.extend(TableauLocation(i) for i, column in enumerate(state.tableau) if column)
        return sources


def _remove_run(state: FreeCellState, source: Location, count: int) -> FreeCellState:
    if isinstance(source, TableauLocation):
        column = state.tableau[source.index]
        return state.copy_with(tableau=replace_at(state.tableau, source.index, column[:-count]))
    if isinstance(source, FreeCellLocation):
        return state.copy_with(free_cells=replace_at(state.free_cells, source.index, None))
    if isinstance(source, FoundationLocation):
        pile = state.foundations[source.index]
        return state.copy_with(foundations=replace_at(state.foundations, source.index, pile[:-1]))
    raise TypeError(f"Cannot remove cards from {source!r}")


def _add_run(state: FreeCellState, destination: Location, run: tuple[Card, ...]) -> FreeCellState:
    if isinstance(destination, TableauLocation):
        column = state.tableau[destination.index]
        return state.copy_with(tableau=replace_at(state.tableau, destination.index, column + run))
    if isinstance(destination, FreeCellLocation):
        return state.copy_with(free_cells=replace_at(state.free_cells, destination.index, run[0]))
    if isinstance(destination, FoundationLocation):
        pile = state.foundations[destination.index]
        return state.copy_with(foundations=replace_at(state.foundations, destination.index, pile + run))
    raise TypeError(f"Cannot add cards to {destination!r}")


def new_game(
    seed: Optional[int] = None,
    cards: Optional[Sequence[Card]] = None,
    config: Optional[EngineConfig] = None,
    shuffle: ShuffleFn = shuffle_with_seed,
) -> FreeCellState:
    """Deal a FreeCell game from a seed, or from a fixed 52-card arrangement."""
    source = DealSource.from_cards(cards) if cards is not None else DealSource.from_seed(seed)
    return FreeCellRules(config).new_game(source, shuffle)
