"""Destination enumeration, legal move listing and tap-to-move resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from solitaire.simulation.rules import longest_valid_run
from solitaire.simulation.state import (
    FoundationLocation,
    FreeCellLocation,
    FreeCellState,
    GameState,
    KlondikeState,
    Location,
    TableauLocation,
    WasteLocation,
    card_count_of,
)

if TYPE_CHECKING:
    from solitaire.simulation.engine import VariantRules


@dataclass(frozen=True)
class LegalMove:
    """A move the executor would accept."""
    source: Location
    destination: Location

    @property
    def card_count(self) -> int:
        return card_count_of(self.source)


class TapAction(Enum):
    """What a single tap on a card should do."""
    AUTO_MOVE = "auto_move"
    HIGHLIGHT = "highlight"
    INVALID = "invalid"


@dataclass(frozen=True)
class TapResult:
    action: TapAction
    source: Location
    destinations: tuple[Location, ...] = ()

    @property
    def destination(self) -> Optional[Location]:
        """The single destination of an auto-move."""
        return self.destinations[0] if self.action is TapAction.AUTO_MOVE else None


def get_valid_destinations(
    rules: "VariantRules",
    state: GameState,
    source: Location,
    card_count: Optional[int] = None,
) -> List[Location]:
    """Run the validation phase against every candidate destination.

    Multi-card sources skip foundations and free cells entirely since those
    zones hold a single card per move. The state is never modified.
    """
    if card_count is not None:
        if isinstance(source, TableauLocation):
            source = TableauLocation(index=source.index, card_count=card_count)
        elif card_count != 1:
            return []
    count = card_count_of(source)

    destinations: List[Location] = []
    for candidate in rules.candidate_destinations(state, source):
        if count > 1 and isinstance(candidate, (FoundationLocation, FreeCellLocation)):
            continue
        if rules.check_move(state, source, candidate) is not None:
            destinations.append(candidate)
    return destinations


def movable_sources(rules: "VariantRules", state: GameState) -> List[Location]:
    """Every non-empty source, with tableau runs up to the longest valid run."""
    sources: List[Location] = []

    if isinstance(state, FreeCellState):
        for i, column in enumerate(state.tableau):
            for count in range(1, longest_valid_run(column, rules.tableau_pair) + 1):
                sources.append(TableauLocation(i, count))
        sources.extend(FreeCellLocation(i) for i, card in enumerate(state.free_cells) if card is not None)
    elif isinstance(state, KlondikeState):
        for i, tableau_column in enumerate(state.tableau):
            face_up = tableau_column.face_up_cards
            for count in range(1, longest_valid_run(face_up, rules.tableau_pair) + 1):
                sources.append(TableauLocation(i, count))
        if state.waste:
            sources.append(WasteLocation())

    sources.extend(FoundationLocation(i) for i, pile in enumerate(state.foundations) if pile)
    return sources


def generate_legal_moves(state: GameState) -> List[LegalMove]:
    """Generate every legal move in the current position."""
    from solitaire.simulation.engine import rules_for

    rules = rules_for(state)
    moves: List[LegalMove] = []
    for source in movable_sources(rules, state):
        for destination in get_valid_destinations(rules, state, source):
            moves.append(LegalMove(source=source, destination=destination))
    return moves


def resolve_tap(state: GameState, source: Location) -> TapResult:
    """Decide what tapping ``source`` does.

    One legal destination auto-moves there, several are highlighted for the
    player to choose, none is reported as invalid.
    """
    from solitaire.simulation.engine import rules_for

    destinations = tuple(get_valid_destinations(rules_for(state), state, source))
    if not destinations:
        return TapResult(TapAction.INVALID, source)
    if len(destinations) == 1:
        return TapResult(TapAction.AUTO_MOVE, source, destinations)
    return TapResult(TapAction.HIGHLIGHT, source, destinations)
