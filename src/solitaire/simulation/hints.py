"""Next-playable-card lookup."""

from __future__ import annotations

from typing import Iterator, List

from solitaire.cards.schema import Card, Rank
from solitaire.simulation.state import (
    FOUNDATION_SIZE,
    FreeCellState,
    GameState,
    KlondikeState,
)


def _visible_cards(state: GameState) -> Iterator[Card]:
    if isinstance(state, FreeCellState):
        yield from (card for card in state.free_cells if card is not None)
        for column in state.tableau:
            yield from column
    elif isinstance(state, KlondikeState):
        yield from state.waste
        for column in state.tableau:
            yield from column.face_up_cards


def lowest_playable_cards(state: GameState) -> List[str]:
    """Ids of the cards the foundations need next.

    For every suit, the card one rank above its foundation top (an Ace for
    suits with no foundation yet). Only visible cards are reported; Klondike
    stock and face-down tableau cards are skipped.
    """
    next_rank = {}
    for pile in state.foundations:
        if pile and len(pile) < FOUNDATION_SIZE:
            next_rank[pile[-1].suit] = Rank(len(pile) + 1)
        elif pile:
            next_rank[pile[-1].suit] = None

    ids: List[str] = []
    for card in _visible_cards(state):
        wanted = next_rank.get(card.suit, Rank.ACE)
        if wanted is not None and card.rank == wanted:
            ids.append(card.id)
    return ids
