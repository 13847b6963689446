"""Core card types and enumerations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class Color(Enum):
    """Card colors."""

    RED = "red"
    BLACK = "black"


class Rank(IntEnum):
    """Playing card ranks (Ace low)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def label(self) -> str:
        """Short display label ("A", "2" .. "10", "J", "Q", "K")."""
        return RANK_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "Rank":
        """Parse a display label (case-insensitive)."""
        try:
            return LABEL_TO_RANK[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown rank label: {label!r}") from None


class Suit(Enum):
    """Playing card suits, in canonical deck order."""

    SPADES = "S"
    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"

    @property
    def color(self) -> Color:
        if self in (Suit.HEARTS, Suit.DIAMONDS):
            return Color.RED
        return Color.BLACK

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


RANK_LABELS = {
    Rank.ACE: "A",
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
}

LABEL_TO_RANK = {label: rank for rank, label in RANK_LABELS.items()}

SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}

# Canonical suit order, shared by the deck builder and the share-code format
SUIT_ORDER: tuple[Suit, ...] = tuple(Suit)


@dataclass(frozen=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    @property
    def id(self) -> str:
        """Stable identifier, e.g. "AS" or "10H"."""
        return f"{self.rank.label}{self.suit.value}"

    @property
    def color(self) -> Color:
        return self.suit.color

    @property
    def is_red(self) -> bool:
        return self.suit.color is Color.RED

    @classmethod
    def from_id(cls, card_id: str) -> "Card":
        """Parse an identifier produced by ``Card.id``."""
        if not isinstance(card_id, str) or len(card_id) < 2:
            raise ValueError(f"Invalid card id: {card_id!r}")
        try:
            suit = Suit(card_id[-1].upper())
        except ValueError:
            raise ValueError(f"Invalid card id: {card_id!r}") from None
        return cls(rank=Rank.from_label(card_id[:-1]), suit=suit)

    def __str__(self) -> str:
        return f"{self.rank.label}{self.suit.symbol}"
