"""Klondike rules: 7 columns with face-down cards, stock and waste."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from solitaire.cards.deck import DealSource, ShuffleFn, shuffle_with_seed
from solitaire.cards.schema import Card
from solitaire.config import EngineConfig
from solitaire.simulation.engine import VariantRules
from solitaire.simulation.rules import EmptyColumnPolicy, can_stack_descending
from solitaire.simulation.state import (
    FOUNDATION_COUNT,
    DrawMode,
    FoundationLocation,
    KlondikeState,
    Location,
    StockLocation,
    TableauColumn,
    TableauLocation,
    WasteLocation,
    replace_at,
    same_slot,
)

logger = logging.getLogger(__name__)

TABLEAU_COLUMNS = 7


class KlondikeRules(VariantRules[KlondikeState]):
    """Klondike: only Kings start empty columns, any valid face-up run may move."""

    name = "klondike"
    limits_supermoves = False
    empty_column_policy = EmptyColumnPolicy.KINGS_ONLY

    @property
    def auto_move_margin(self) -> Optional[int]:
        return self.config.klondike_auto_move_margin

    def new_game(self, source: Optional[DealSource] = None, shuffle: ShuffleFn = shuffle_with_seed) -> KlondikeState:
        """Column i gets i + 1 cards with only the last one face-up; the rest is the stock."""
        source = source or DealSource.from_seed()
        deck = source.deck(shuffle)

        tableau: list[TableauColumn] = []
        position = 0
        for column in range(TABLEAU_COLUMNS):
            size = column + 1
            tableau.append(TableauColumn(cards=tuple(deck[position:position + size]), face_up_count=1))
            position += size

        return KlondikeState(
            tableau=tuple(tableau),
            stock=tuple(deck[position:]),
            waste=(),
            foundations=((),) * FOUNDATION_COUNT,
            seed=source.recorded_seed,
            moves=0,
            draw_mode=self.config.draw_mode,
        )

    def is_source_allowed(self, source: Location) -> bool:
        # Stock cards must be drawn to the waste first
        return isinstance(source, (TableauLocation, WasteLocation, FoundationLocation))

    def is_destination_allowed(self, destination: Location) -> bool:
        return isinstance(destination, (TableauLocation, FoundationLocation))

    def extract_run(self, state: KlondikeState, source: Location) -> Optional[tuple[Card, ...]]:
        if isinstance(source, TableauLocation):
            if not 0 <= source.index < len(state.tableau):
                return None
            column = state.tableau[source.index]
            if source.card_count < 1 or source.card_count > column.face_up_count:
                return None
            return column.cards[-source.card_count:]
        if isinstance(source, WasteLocation):
            return (state.waste[-1],) if state.waste else None
        if isinstance(source, FoundationLocation):
            if not 0 <= source.index < len(state.foundations):
                return None
            pile = state.foundations[source.index]
            return (pile[-1],) if pile else None
        return None

    def tableau_accepts(self, state: KlondikeState, index: int, card: Card) -> bool:
        column = state.tableau[index]
        if not column.cards:
            return self.empty_column_policy.allows(card)
        if column.face_up_count == 0:
            return False
        return can_stack_descending(
            card, column.top, require_alternating_colors=self.require_alternating_colors
        )

    def apply_move(
        self,
        state: KlondikeState,
        source: Location,
        destination: Location,
        run: tuple[Card, ...],
    ) -> KlondikeState:
        state = _remove_run(state, source, len(run))
        return _add_run(state, destination, run)

    def candidate_destinations(self, state: KlondikeState, source: Location) -> List[Location]:
        candidates: List[Location] = [
            TableauLocation(i) for i in range(len(state.tableau)) if not same_slot(source, TableauLocation(i))
        ]
        candidates.extend(
            FoundationLocation(i) for i in range(len(state.foundations)) if source != FoundationLocation(i)
        )
        return candidates

    def auto_move_sources(self, state: KlondikeState) -> List[Location]:
        sources: List[Location] = [WasteLocation()] if state.waste else []
        sources.extend(
            TableauLocation(i) for i, column in enumerate(state.tableau) if column.face_up_count > 0
        )
        return sources


def _remove_run(state: KlondikeState, source: Location, count: int) -> KlondikeState:
    if isinstance(source, TableauLocation):
        column = state.tableau[source.index]
        remaining = column.cards[:-count]
        face_up = max(0, column.face_up_count - count)
        if face_up == 0 and remaining:
            # Reveal the new top card
            face_up = 1
        new_column = TableauColumn(cards=remaining, face_up_count=face_up)
        return state.copy_with(tableau=replace_at(state.tableau, source.index, new_column))
    if isinstance(source, WasteLocation):
        return state.copy_with(waste=state.waste[:-1])
    if isinstance(source, FoundationLocation):
        pile = state.foundations[source.index]
        return state.copy_with(foundations=replace_at(state.foundations, source.index, pile[:-1]))
    raise TypeError(f"Cannot remove cards from {source!r}")


def _add_run(state: KlondikeState, destination: Location, run: tuple[Card, ...]) -> KlondikeState:
    if isinstance(destination, TableauLocation):
        column = state.tableau[destination.index]
        new_column = TableauColumn(cards=column.cards + run, face_up_count=column.face_up_count + len(run))
        return state.copy_with(tableau=replace_at(state.tableau, destination.index, new_column))
    if isinstance(destination, FoundationLocation):
        pile = state.foundations[destination.index]
        return state.copy_with(foundations=replace_at(state.foundations, destination.index, pile + run))
    raise TypeError(f"Cannot add cards to {destination!r}")


def recycle_waste(state: KlondikeState) -> KlondikeState:
    """Turn the waste over to form a new stock. Does not count as a move."""
    if state.stock or not state.waste:
        return state
    logger.debug(f"Recycling {len(state.waste)} waste cards into the stock")
    return state.copy_with(stock=tuple(reversed(state.waste)), waste=())


def draw_from_stock(state: KlondikeState) -> KlondikeState:
    """Draw one or three cards from the stock onto the waste.

    The most recently drawn card ends up on top of the waste. An empty stock
    is first refilled from the waste; with both empty the same state is
    returned unchanged. Recycle and draw together count as one move.
    """
    if not state.stock and not state.waste:
        return state

    state = recycle_waste(state)
    count = min(state.draw_mode.draw_count, len(state.stock))
    drawn = state.stock[-count:]
    return state.copy_with(
        stock=state.stock[:-count],
        waste=state.waste + tuple(reversed(drawn)),
        moves=state.moves + 1,
    )


def is_card_face_up(state: KlondikeState, location: Location, index: Optional[int] = None) -> bool:
    """Whether a card should be shown face-up.

    Args:
        state: Current game state
        location: Where the card lies
        index: Position within a tableau column (0 = deepest card); defaults to the top card

    Returns:
        False for the stock, True for waste and foundations, per face_up_count for the tableau
    """
    if isinstance(location, StockLocation):
        return False
    if isinstance(location, TableauLocation):
        if not 0 <= location.index < len(state.tableau):
            return False
        column = state.tableau[location.index]
        if not column.cards:
            return False
        position = len(column.cards) - 1 if index is None else index
        return column.face_down_count <= position < len(column.cards)
    return True


def new_game(
    seed: Optional[int] = None,
    cards: Optional[Sequence[Card]] = None,
    draw_mode: Optional[DrawMode] = None,
    config: Optional[EngineConfig] = None,
    shuffle: ShuffleFn = shuffle_with_seed,
) -> KlondikeState:
    """Deal a Klondike game from a seed, or from a fixed 52-card arrangement."""
    config = config or EngineConfig()
    if draw_mode is not None:
        config = replace(config, draw_mode=draw_mode)
    source = DealSource.from_cards(cards) if cards is not None else DealSource.from_seed(seed)
    return KlondikeRules(config).new_game(source, shuffle)
