"""Move executor and the variant-dispatching engine API."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from solitaire.cards.deck import DealSource, ShuffleFn, shuffle_with_seed
from solitaire.cards.schema import Card
from solitaire.config import EngineConfig
from solitaire.simulation.rules import (
    PairPredicate,
    can_stack_on_foundation,
    descending_pair,
    is_valid_sequence,
)
from solitaire.simulation.state import (
    FOUNDATION_COUNT,
    FoundationLocation,
    FreeCellLocation,
    FreeCellState,
    GameState,
    KlondikeState,
    Location,
    TableauLocation,
    card_count_of,
    is_won,
    same_slot,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", FreeCellState, KlondikeState)


class VariantRules(ABC, Generic[S]):
    """Rules of one solitaire variant.

    Validation runs as a fixed pipeline (structure, run extraction, sequence,
    destination, supermove); subclasses supply the zone-specific pieces.
    A rejected move returns None and leaves the caller's state untouched.
    """

    name: str = ""
    limits_supermoves: bool = False
    require_alternating_colors: bool = True
    require_same_suit: bool = True

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    # Variant hooks ---------------------------------------------------------

    @abstractmethod
    def new_game(self, source: Optional[DealSource] = None, shuffle: ShuffleFn = shuffle_with_seed) -> S:
        """Deal a new game."""

    @abstractmethod
    def is_source_allowed(self, source: Location) -> bool:
        """Structural check: can cards ever leave this zone by a move?"""

    @abstractmethod
    def is_destination_allowed(self, destination: Location) -> bool:
        """Structural check: can cards ever arrive in this zone by a move?"""

    @abstractmethod
    def extract_run(self, state: S, source: Location) -> Optional[tuple[Card, ...]]:
        """The cards addressed by ``source``, or None if they are not available."""

    @abstractmethod
    def tableau_accepts(self, state: S, index: int, card: Card) -> bool:
        """Can ``card`` (head of the moved run) land on tableau column ``index``?"""

    @abstractmethod
    def apply_move(self, state: S, source: Location, destination: Location, run: tuple[Card, ...]) -> S:
        """Relocate an already validated run and apply derived bookkeeping."""

    @abstractmethod
    def candidate_destinations(self, state: S, source: Location) -> List[Location]:
        """Every destination worth checking for ``source``."""

    @abstractmethod
    def auto_move_sources(self, state: S) -> List[Location]:
        """Single-card sources checked by the auto-move sweep, in priority order."""

    @property
    @abstractmethod
    def auto_move_margin(self) -> Optional[int]:
        """Safe auto-move margin, or None to sweep every legal card."""

    def free_cell_accepts(self, state: S, index: int) -> bool:
        return False

    def supermove_capacity(self, state: S, source: TableauLocation, destination: TableauLocation) -> int:
        raise NotImplementedError(f"{self.name} does not limit supermoves")

    @property
    def tableau_pair(self) -> PairPredicate:
        return descending_pair(self.require_alternating_colors)

    # Validation pipeline ---------------------------------------------------

    def check_move(self, state: S, source: Location, destination: Location) -> Optional[tuple[Card, ...]]:
        """Validation phase only: the run that would move, or None if illegal."""
        count = card_count_of(source)
        if count < 1 or same_slot(source, destination):
            return None
        if not self.is_source_allowed(source) or not self.is_destination_allowed(destination):
            return None

        run = self.extract_run(state, source)
        if run is None or len(run) != count:
            return None

        if count > 1:
            if not isinstance(destination, TableauLocation):
                return None
            if not is_valid_sequence(run, self.tableau_pair):
                return None

        if not self._destination_accepts(state, destination, run):
            return None

        if (
            count > 1
            and self.limits_supermoves
            and isinstance(source, TableauLocation)
            and isinstance(destination, TableauLocation)
            and count > self.supermove_capacity(state, source, destination)
        ):
            return None

        return run

    def _destination_accepts(self, state: S, destination: Location, run: tuple[Card, ...]) -> bool:
        if isinstance(destination, FoundationLocation):
            if len(run) != 1 or not 0 <= destination.index < len(state.foundations):
                return False
            return can_stack_on_foundation(
                run[0], state.foundations[destination.index], require_same_suit=self.require_same_suit
            )
        if isinstance(destination, FreeCellLocation):
            return len(run) == 1 and self.free_cell_accepts(state, destination.index)
        if isinstance(destination, TableauLocation):
            if not 0 <= destination.index < len(state.tableau):
                return False
            return self.tableau_accepts(state, destination.index, run[0])
        return False

    # Public operations -----------------------------------------------------

    def validate_move(self, state: S, source: Location, destination: Location) -> bool:
        return self.check_move(state, source, destination) is not None

    def execute_move(
        self,
        state: S,
        source: Location,
        destination: Location,
        card_count: Optional[int] = None,
    ) -> Optional[S]:
        """Validate and perform a move.

        Returns:
            A new state with ``moves`` incremented, or None if the move is illegal
        """
        if card_count is not None:
            if isinstance(source, TableauLocation):
                source = TableauLocation(index=source.index, card_count=card_count)
            elif card_count != 1:
                return None

        run = self.check_move(state, source, destination)
        if run is None:
            logger.debug(f"Rejected {self.name} move {source} -> {destination}")
            return None

        new_state = self.apply_move(state, source, destination, run)
        return new_state.copy_with(moves=state.moves + 1)

    def get_valid_destinations(self, state: S, source: Location, card_count: Optional[int] = None) -> List[Location]:
        from solitaire.simulation.movegen import get_valid_destinations

        return get_valid_destinations(self, state, source, card_count)

    def is_safe_to_auto_move(self, state: S, card: Card) -> bool:
        margin = self.auto_move_margin
        if margin is None:
            return True
        min_rank = min(len(foundation) for foundation in state.foundations)
        return card.rank <= min_rank + margin

    def find_auto_move(self, state: S) -> Optional[tuple[Location, FoundationLocation]]:
        """First (source, foundation) pair the sweep would play, if any."""
        for source in self.auto_move_sources(state):
            run = self.extract_run(state, source)
            if not run or not self.is_safe_to_auto_move(state, run[-1]):
                continue
            for index in range(FOUNDATION_COUNT):
                destination = FoundationLocation(index)
                if self.validate_move(state, source, destination):
                    return source, destination
        return None

    def auto_move_to_foundations(self, state: S) -> S:
        """Play cards to the foundations one at a time until a full pass finds none."""
        moved = 0
        while True:
            found = self.find_auto_move(state)
            if found is None:
                break
            source, destination = found
            next_state = self.execute_move(state, source, destination)
            assert next_state is not None
            state = next_state
            moved += 1
        if moved:
            logger.debug(f"Auto-moved {moved} card(s) to foundations")
        return state

    def is_won(self, state: S) -> bool:
        return is_won(state)


# Engine API ------------------------------------------------------------------


def rules_for(state: GameState, config: Optional[EngineConfig] = None) -> VariantRules:
    """Rules object matching the state's variant."""
    from solitaire.simulation.freecell import FreeCellRules
    from solitaire.simulation.klondike import KlondikeRules

    if isinstance(state, FreeCellState):
        return FreeCellRules(config)
    if isinstance(state, KlondikeState):
        return KlondikeRules(config)
    raise TypeError(f"Unsupported game state: {type(state).__name__}")


def validate_move(state: GameState, source: Location, destination: Location) -> bool:
    """True if moving ``source`` onto ``destination`` is legal."""
    return rules_for(state).validate_move(state, source, destination)


def execute_move(
    state: GameState,
    source: Location,
    destination: Location,
    card_count: Optional[int] = None,
) -> Optional[GameState]:
    """New state after the move, or None if the move is illegal."""
    return rules_for(state).execute_move(state, source, destination, card_count)


def get_valid_destinations(
    state: GameState, source: Location, card_count: Optional[int] = None
) -> List[Location]:
    """Every destination ``source`` could legally move to."""
    return rules_for(state).get_valid_destinations(state, source, card_count)


def auto_move_to_foundations(state: GameState, config: Optional[EngineConfig] = None) -> GameState:
    return rules_for(state, config).auto_move_to_foundations(state)


def draw_from_stock(state: GameState) -> GameState:
    """Klondike draw; see ``solitaire.simulation.klondike.draw_from_stock``."""
    if not isinstance(state, KlondikeState):
        raise TypeError(f"draw_from_stock needs a Klondike state, got {type(state).__name__}")
    from solitaire.simulation.klondike import draw_from_stock as klondike_draw

    return klondike_draw(state)
