"""Shared solitaire validation rules.

Pure predicates reused by every variant. Variant differences (color
alternation, empty-column policy, foundation suit matching) are passed in as
parameters rather than hard-coded.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Sequence

from solitaire.cards.schema import Card, Rank

# pair_predicate(base, placed): may ``placed`` sit directly on ``base``?
PairPredicate = Callable[[Card, Card], bool]


class EmptyColumnPolicy(Enum):
    """Which cards may start an empty tableau column."""

    ANY_CARD = "any_card"      # FreeCell
    KINGS_ONLY = "kings_only"  # Klondike

    def allows(self, card: Card) -> bool:
        if self is EmptyColumnPolicy.KINGS_ONLY:
            return card.rank == Rank.KING
        return True


def has_alternating_colors(a: Card, b: Card) -> bool:
    """One card is red and the other black."""
    return a.is_red != b.is_red


def has_same_suit(a: Card, b: Card) -> bool:
    return a.suit == b.suit


def can_stack_descending(
    card: Card,
    target: Optional[Card],
    require_alternating_colors: bool = True,
    allow_empty_target: bool = True,
) -> bool:
    """Check if ``card`` can sit on ``target`` in a descending tableau build.

    Args:
        card: The card being placed
        target: Card to stack on, or None for an empty column
        require_alternating_colors: Colors must differ (FreeCell, Klondike)
        allow_empty_target: Whether an empty column accepts the card

    Returns:
        True if the placement is legal
    """
    if target is None:
        return allow_empty_target
    if card.rank != target.rank - 1:
        return False
    return has_alternating_colors(card, target) if require_alternating_colors else True


def can_stack_on_foundation(
    card: Card,
    foundation: Sequence[Card],
    require_same_suit: bool = True,
) -> bool:
    """Check if ``card`` is the next card for a foundation pile.

    Empty piles only take an Ace; otherwise rank must be one higher than the
    pile's top (and the same suit when required).
    """
    if not foundation:
        return card.rank == Rank.ACE
    top = foundation[-1]
    if card.rank != top.rank + 1:
        return False
    return has_same_suit(card, top) if require_same_suit else True


def is_valid_sequence(cards: Sequence[Card], pair_predicate: PairPredicate) -> bool:
    """Check every adjacent pair of a run, from the deepest card outwards.

    Empty runs and single cards are trivially valid; one failing pair
    invalidates the whole run.
    """
    if len(cards) <= 1:
        return True
    return all(pair_predicate(cards[i], cards[i + 1]) for i in range(len(cards) - 1))


def descending_pair(require_alternating_colors: bool = True) -> PairPredicate:
    """Pair predicate for descending tableau builds."""

    def predicate(base: Card, placed: Card) -> bool:
        return can_stack_descending(
            placed,
            base,
            require_alternating_colors=require_alternating_colors,
            allow_empty_target=False,
        )

    return predicate


def foundation_pair(require_same_suit: bool = True) -> PairPredicate:
    """Pair predicate for ascending foundation-direction builds."""

    def predicate(base: Card, placed: Card) -> bool:
        return can_stack_on_foundation(placed, (base,), require_same_suit=require_same_suit)

    return predicate


def is_valid_tableau_sequence(cards: Sequence[Card], require_alternating_colors: bool = True) -> bool:
    """Descending by one rank per step, alternating colors by default."""
    return is_valid_sequence(cards, descending_pair(require_alternating_colors))


def longest_valid_run(cards: Sequence[Card], pair_predicate: PairPredicate) -> int:
    """Length of the longest run at the exposed end of ``cards`` satisfying the predicate."""
    if not cards:
        return 0
    length = 1
    while length < len(cards) and pair_predicate(cards[-length - 1], cards[-length]):
        length += 1
    return length
