"""Deck construction, seeded shuffling and deal sources."""

from __future__ import annotations

import random
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from solitaire.cards.schema import Card, Rank, SUIT_ORDER

DECK_SIZE = 52

ShuffleFn = Callable[[Sequence[Card], int], list[Card]]
SeedSource = Callable[[], int]


def create_deck() -> list[Card]:
    """Create a standard 52-card deck ordered by suit, then rank A..K."""
    return [Card(rank=rank, suit=suit) for suit in SUIT_ORDER for rank in Rank]


def shuffle_with_seed(cards: Sequence[Card], seed: int) -> list[Card]:
    """Return a shuffled copy of ``cards``; the same seed gives the same order."""
    shuffled = list(cards)
    random.Random(seed).shuffle(shuffled)
    return shuffled


def default_seed() -> int:
    """Seed derived from the current time in milliseconds."""
    return int(time.time() * 1000) % 2**32


def is_full_deck(cards: Sequence[Card]) -> bool:
    """True if ``cards`` is exactly one standard deck (no duplicates, no omissions)."""
    return len(cards) == DECK_SIZE and Counter(cards) == Counter(create_deck())


@dataclass(frozen=True)
class DealSource:
    """Where the cards of a new game come from.

    Either a seed (shuffle a fresh deck) or an explicit 52-card arrangement,
    used for tests and reproducible daily deals.
    """

    seed: Optional[int] = None
    cards: Optional[tuple[Card, ...]] = None

    def __post_init__(self) -> None:
        if (self.seed is None) == (self.cards is None):
            raise ValueError("DealSource needs exactly one of seed or cards")
        if self.cards is not None and not is_full_deck(self.cards):
            raise ValueError(
                f"Invalid card arrangement: expected one full deck of {DECK_SIZE} cards, "
                f"got {len(self.cards)} cards"
            )

    @classmethod
    def from_seed(cls, seed: Optional[int] = None, seed_source: SeedSource = default_seed) -> "DealSource":
        return cls(seed=seed if seed is not None else seed_source())

    @classmethod
    def from_cards(cls, cards: Sequence[Card]) -> "DealSource":
        return cls(cards=tuple(cards))

    @property
    def recorded_seed(self) -> int:
        """Seed stored on the resulting state (0 for explicit arrangements)."""
        return self.seed if self.seed is not None else 0

    def deck(self, shuffle: ShuffleFn = shuffle_with_seed) -> list[Card]:
        """Get the ordered deck to deal from."""
        if self.cards is not None:
            return list(self.cards)
        assert self.seed is not None
        return shuffle(create_deck(), self.seed)
