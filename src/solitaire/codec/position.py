"""Compact share codes for game positions.

Layout of the decoded buffer:

- Byte 0: format version (currently 1)
- Byte 1: game tag (0 = FreeCell, 1 = Klondike)
- Byte 2: variant config (FreeCell: free-cell count, Klondike: bit 0 = draw-three)
- Body: MSB-first bit stream, zero padded to a byte boundary

The body starts with a 32-bit seed and a 16-bit move counter, then every zone
as a length prefix followed by its cards. A card takes 6 bits: 4-bit rank
(1-13) and 2-bit suit index (S, H, D, C). The buffer is base64url encoded
without padding so it can sit in a URL query parameter.
"""

from __future__ import annotations

import base64
import binascii
import logging
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence

from solitaire.cards.schema import Card, Rank, SUIT_ORDER
from solitaire.codec.versioning import ShareCodeFormat, validate_share_code_version
from solitaire.simulation.rules import foundation_pair, is_valid_sequence
from solitaire.simulation.state import (
    FOUNDATION_COUNT,
    DrawMode,
    FreeCellState,
    GameState,
    KlondikeState,
    TableauColumn,
    has_full_deck,
)

logger = logging.getLogger(__name__)

SEED_BITS = 32
MOVES_BITS = 16
RANK_BITS = 4
SUIT_BITS = 2
TABLEAU_LENGTH_BITS = 6
PILE_LENGTH_BITS = 6  # stock, waste
FOUNDATION_LENGTH_BITS = 4
FREE_CELL_COUNT_BITS = 4

FREECELL_COLUMNS = 8
KLONDIKE_COLUMNS = 7

DRAW_THREE_FLAG = 0x01


class PositionDecodeError(ValueError):
    """Raised when a share code cannot be turned back into a state."""


class GameTag(IntEnum):
    FREECELL = 0
    KLONDIKE = 1


@dataclass(frozen=True)
class PositionHeader:
    """Fixed 3-byte header in front of the bit-packed body."""

    version: int
    game: GameTag
    variant: int

    STRUCT_FORMAT = "!BBB"
    HEADER_SIZE = 3

    def to_bytes(self) -> bytes:
        return struct.pack(self.STRUCT_FORMAT, self.version, int(self.game), self.variant)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PositionHeader":
        if len(data) < cls.HEADER_SIZE:
            raise PositionDecodeError(f"Header too short: {len(data)} bytes")
        version, game, variant = struct.unpack(cls.STRUCT_FORMAT, data[:cls.HEADER_SIZE])
        try:
            validate_share_code_version(version)
        except ValueError as e:
            raise PositionDecodeError(str(e)) from None
        try:
            tag = GameTag(game)
        except ValueError:
            raise PositionDecodeError(f"Unknown game tag: {game}") from None
        return cls(version=version, game=tag, variant=variant)


class BitWriter:
    """Accumulates unsigned fields most significant bit first."""

    def __init__(self) -> None:
        self._value = 0
        self._length = 0

    def write(self, value: int, bits: int) -> None:
        if not 0 <= value < (1 << bits):
            raise ValueError(f"Value {value} does not fit in {bits} bits")
        self._value = (self._value << bits) | value
        self._length += bits

    def write_card(self, card: Card) -> None:
        self.write(int(card.rank), RANK_BITS)
        self.write(SUIT_ORDER.index(card.suit), SUIT_BITS)

    def write_cards(self, cards: Sequence[Card], length_bits: int) -> None:
        self.write(len(cards), length_bits)
        for card in cards:
            self.write_card(card)

    def to_bytes(self) -> bytes:
        padding = -self._length % 8
        total = self._length + padding
        return (self._value << padding).to_bytes(total // 8, "big")


class BitReader:
    """Reads fields written by BitWriter."""

    def __init__(self, data: bytes) -> None:
        self._value = int.from_bytes(data, "big")
        self._length = len(data) * 8
        self._position = 0

    @property
    def remaining(self) -> int:
        return self._length - self._position

    def read(self, bits: int) -> int:
        if bits > self.remaining:
            raise PositionDecodeError("Share code is truncated")
        shift = self._length - self._position - bits
        self._position += bits
        return (self._value >> shift) & ((1 << bits) - 1)

    def read_card(self) -> Card:
        rank = self.read(RANK_BITS)
        suit = self.read(SUIT_BITS)
        if not Rank.ACE <= rank <= Rank.KING:
            raise PositionDecodeError(f"Invalid card code: rank {rank}")
        return Card(rank=Rank(rank), suit=SUIT_ORDER[suit])

    def read_cards(self, length_bits: int, max_length: Optional[int] = None) -> tuple[Card, ...]:
        length = self.read(length_bits)
        if max_length is not None and length > max_length:
            raise PositionDecodeError(f"Impossible zone length: {length}")
        return tuple(self.read_card() for _ in range(length))

    def finish(self) -> None:
        """Only zero padding may follow the last field."""
        if self.remaining >= 8:
            raise PositionDecodeError("Share code has trailing data")
        if self.remaining and self.read(self.remaining) != 0:
            raise PositionDecodeError("Share code padding is not zero")


# Encoding ---------------------------------------------------------------------


def _write_common(writer: BitWriter, state: GameState) -> None:
    if not 0 <= state.seed < 2**SEED_BITS:
        raise ValueError(f"Seed {state.seed} does not fit in {SEED_BITS} bits")
    if not 0 <= state.moves < 2**MOVES_BITS:
        raise ValueError(f"Move counter {state.moves} does not fit in {MOVES_BITS} bits")
    writer.write(state.seed, SEED_BITS)
    writer.write(state.moves, MOVES_BITS)


def _write_foundations(writer: BitWriter, foundations: Sequence[Sequence[Card]]) -> None:
    for pile in foundations:
        writer.write_cards(pile, FOUNDATION_LENGTH_BITS)


def encode_position(state: GameState) -> str:
    """Encode a state as a URL-safe share code.

    Raises:
        ValueError: If the seed or move counter is out of range, or the state
            has an unsupported shape
    """
    writer = BitWriter()
    _write_common(writer, state)

    if isinstance(state, FreeCellState):
        if len(state.tableau) != FREECELL_COLUMNS:
            raise ValueError(f"FreeCell share codes need {FREECELL_COLUMNS} columns")
        header = PositionHeader(ShareCodeFormat.CURRENT, GameTag.FREECELL, len(state.free_cells))
        for column in state.tableau:
            writer.write_cards(column, TABLEAU_LENGTH_BITS)
        writer.write(len(state.free_cells), FREE_CELL_COUNT_BITS)
        for card in state.free_cells:
            writer.write(0 if card is None else 1, 1)
            if card is not None:
                writer.write_card(card)
        _write_foundations(writer, state.foundations)
    elif isinstance(state, KlondikeState):
        if len(state.tableau) != KLONDIKE_COLUMNS:
            raise ValueError(f"Klondike share codes need {KLONDIKE_COLUMNS} columns")
        variant = DRAW_THREE_FLAG if state.draw_mode is DrawMode.DRAW_THREE else 0
        header = PositionHeader(ShareCodeFormat.CURRENT, GameTag.KLONDIKE, variant)
        for column in state.tableau:
            writer.write_cards(column.cards, TABLEAU_LENGTH_BITS)
            writer.write(column.face_up_count, TABLEAU_LENGTH_BITS)
        writer.write_cards(state.stock, PILE_LENGTH_BITS)
        writer.write_cards(state.waste, PILE_LENGTH_BITS)
        _write_foundations(writer, state.foundations)
    else:
        raise ValueError(f"Unsupported game state: {type(state).__name__}")

    if len(state.foundations) != FOUNDATION_COUNT:
        raise ValueError(f"Share codes need {FOUNDATION_COUNT} foundations")

    buffer = header.to_bytes() + writer.to_bytes()
    return base64.urlsafe_b64encode(buffer).rstrip(b"=").decode("ascii")


# Decoding ---------------------------------------------------------------------


def _read_foundations(reader: BitReader) -> tuple[tuple[Card, ...], ...]:
    foundations: List[tuple[Card, ...]] = []
    for _ in range(FOUNDATION_COUNT):
        pile = reader.read_cards(FOUNDATION_LENGTH_BITS, max_length=13)
        if pile and (pile[0].rank != Rank.ACE or not is_valid_sequence(pile, foundation_pair())):
            raise PositionDecodeError("Foundation is not an ascending single-suit run from Ace")
        foundations.append(pile)
    return tuple(foundations)


def _read_freecell(reader: BitReader, header: PositionHeader, seed: int, moves: int) -> FreeCellState:
    tableau = tuple(reader.read_cards(TABLEAU_LENGTH_BITS) for _ in range(FREECELL_COLUMNS))
    cell_count = reader.read(FREE_CELL_COUNT_BITS)
    if cell_count != header.variant:
        raise PositionDecodeError(f"Free cell count {cell_count} does not match header ({header.variant})")
    free_cells = tuple(reader.read_card() if reader.read(1) else None for _ in range(cell_count))
    foundations = _read_foundations(reader)
    return FreeCellState(
        tableau=tableau, free_cells=free_cells, foundations=foundations, seed=seed, moves=moves
    )


def _read_klondike(reader: BitReader, header: PositionHeader, seed: int, moves: int) -> KlondikeState:
    if header.variant & ~DRAW_THREE_FLAG:
        raise PositionDecodeError(f"Unknown Klondike variant flags: {header.variant:#04x}")
    columns: List[TableauColumn] = []
    for _ in range(KLONDIKE_COLUMNS):
        cards = reader.read_cards(TABLEAU_LENGTH_BITS)
        face_up = reader.read(TABLEAU_LENGTH_BITS)
        if face_up > len(cards):
            raise PositionDecodeError(f"Face-up count {face_up} exceeds column length {len(cards)}")
        columns.append(TableauColumn(cards=cards, face_up_count=face_up))
    stock = reader.read_cards(PILE_LENGTH_BITS)
    waste = reader.read_cards(PILE_LENGTH_BITS)
    foundations = _read_foundations(reader)
    draw_mode = DrawMode.DRAW_THREE if header.variant & DRAW_THREE_FLAG else DrawMode.DRAW_ONE
    return KlondikeState(
        tableau=tuple(columns),
        stock=stock,
        waste=waste,
        foundations=foundations,
        seed=seed,
        moves=moves,
        draw_mode=draw_mode,
    )


def _b64decode(code: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(code + "=" * (-len(code) % 4))
    except (binascii.Error, ValueError) as e:
        raise PositionDecodeError(f"Invalid base64url: {e}") from None


def parse_position(code: str) -> GameState:
    """Decode a share code, raising PositionDecodeError on any problem."""
    data = _b64decode(code.strip())
    header = PositionHeader.from_bytes(data)
    reader = BitReader(data[PositionHeader.HEADER_SIZE:])
    seed = reader.read(SEED_BITS)
    moves = reader.read(MOVES_BITS)

    state: GameState
    if header.game is GameTag.FREECELL:
        state = _read_freecell(reader, header, seed, moves)
    else:
        state = _read_klondike(reader, header, seed, moves)
    reader.finish()

    if not has_full_deck(state):
        raise PositionDecodeError("Decoded cards are not exactly one deck")
    return state


def decode_position(code: str) -> Optional[GameState]:
    """Decode a share code, or None if it is not a valid position."""
    try:
        return parse_position(code)
    except PositionDecodeError as e:
        logger.warning(f"Rejected share code: {e}")
        return None
