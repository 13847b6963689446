"""Tests for share-code encoding and decoding."""

import base64

import pytest

from solitaire.codec.position import (
    BitReader,
    BitWriter,
    GameTag,
    PositionDecodeError,
    PositionHeader,
    decode_position,
    encode_position,
    parse_position,
)
from solitaire.config import EngineConfig
from solitaire.simulation.engine import execute_move
from solitaire.simulation.freecell import new_game as new_freecell_game
from solitaire.simulation.klondike import draw_from_stock, new_game as new_klondike_game
from solitaire.simulation.movegen import generate_legal_moves
from solitaire.simulation.state import DrawMode, FreeCellLocation


def raw_bytes(code: str) -> bytes:
    return base64.urlsafe_b64decode(code + "=" * (-len(code) % 4))


def to_code(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class TestBitStream:
    def test_write_then_read(self) -> None:
        writer = BitWriter()
        writer.write(5, 3)
        writer.write(1, 1)
        writer.write(300, 9)

        reader = BitReader(writer.to_bytes())
        assert reader.read(3) == 5
        assert reader.read(1) == 1
        assert reader.read(9) == 300
        reader.finish()

    def test_padding_to_byte_boundary(self) -> None:
        writer = BitWriter()
        writer.write(1, 1)

        assert writer.to_bytes() == b"\x80"

    def test_value_too_large(self) -> None:
        with pytest.raises(ValueError):
            BitWriter().write(8, 3)

    def test_read_past_end(self) -> None:
        with pytest.raises(PositionDecodeError):
            BitReader(b"\x00").read(9)


class TestHeader:
    def test_header_bytes(self) -> None:
        header = PositionHeader(version=1, game=GameTag.KLONDIKE, variant=1)

        assert header.to_bytes() == b"\x01\x01\x01"
        assert PositionHeader.from_bytes(header.to_bytes()) == header

    def test_freecell_header_carries_free_cells(self) -> None:
        code = encode_position(new_freecell_game(seed=1, config=EngineConfig(free_cells=3)))

        assert raw_bytes(code)[:3] == b"\x01\x00\x03"

    def test_klondike_header_carries_draw_mode(self) -> None:
        code = encode_position(new_klondike_game(seed=1, draw_mode=DrawMode.DRAW_THREE))

        assert raw_bytes(code)[:3] == b"\x01\x01\x01"


class TestRoundTrip:
    def test_fresh_freecell_deal(self) -> None:
        state = new_freecell_game(seed=12345)

        assert decode_position(encode_position(state)) == state

    def test_fresh_klondike_deal(self) -> None:
        state = new_klondike_game(seed=12345, draw_mode=DrawMode.DRAW_THREE)

        assert decode_position(encode_position(state)) == state

    def test_code_is_url_safe(self) -> None:
        code = encode_position(new_freecell_game(seed=2**32 - 1))

        assert "=" not in code
        assert "+" not in code and "/" not in code

    def test_mid_game_positions(self) -> None:
        state = new_klondike_game(seed=77)
        for _ in range(5):
            state = draw_from_stock(state)
        for move in generate_legal_moves(state)[:2]:
            moved = execute_move(state, move.source, move.destination)
            if moved is not None:
                state = moved

        assert decode_position(encode_position(state)) == state

    def test_freecell_with_cards_in_cells(self) -> None:
        state = new_freecell_game(seed=9)
        for move in generate_legal_moves(state):
            if isinstance(move.destination, FreeCellLocation):
                state = execute_move(state, move.source, move.destination)
                break

        assert any(card is not None for card in state.free_cells)
        assert decode_position(encode_position(state)) == state

    def test_zero_free_cells(self) -> None:
        state = new_freecell_game(seed=4, config=EngineConfig(free_cells=0))

        assert decode_position(encode_position(state)) == state

    def test_move_counter_limits(self) -> None:
        state = new_freecell_game(seed=4).copy_with(moves=65535)

        assert decode_position(encode_position(state)) == state


class TestEncodeErrors:
    def test_seed_out_of_range(self) -> None:
        state = new_freecell_game(seed=4).copy_with(seed=2**32)

        with pytest.raises(ValueError):
            encode_position(state)

    def test_too_many_moves(self) -> None:
        state = new_freecell_game(seed=4).copy_with(moves=65536)

        with pytest.raises(ValueError):
            encode_position(state)


class TestDecodeFailsClosed:
    @pytest.mark.parametrize("code", ["", "!!!!", "A", "AAAA"])
    def test_garbage(self, code: str) -> None:
        assert decode_position(code) is None

    def test_unknown_version(self) -> None:
        data = bytearray(raw_bytes(encode_position(new_freecell_game(seed=1))))
        data[0] = 9

        assert decode_position(to_code(bytes(data))) is None

    def test_unknown_game_tag(self) -> None:
        data = bytearray(raw_bytes(encode_position(new_freecell_game(seed=1))))
        data[1] = 7

        assert decode_position(to_code(bytes(data))) is None

    def test_free_cell_count_mismatch(self) -> None:
        data = bytearray(raw_bytes(encode_position(new_freecell_game(seed=1))))
        data[2] = 3

        assert decode_position(to_code(bytes(data))) is None

    def test_truncated(self) -> None:
        code = encode_position(new_klondike_game(seed=1))

        assert decode_position(code[:-4]) is None

    def test_trailing_data(self) -> None:
        data = raw_bytes(encode_position(new_klondike_game(seed=1))) + b"\x00\x00"

        assert decode_position(to_code(data)) is None

    def test_duplicate_cards(self) -> None:
        state = new_freecell_game(seed=1)
        tableau = list(state.tableau)
        tableau[1] = (tableau[0][0],) + tableau[1][1:]
        broken = state.copy_with(tableau=tuple(tableau))

        assert decode_position(encode_position(broken)) is None

    def test_parse_raises_decode_error(self) -> None:
        with pytest.raises(PositionDecodeError):
            parse_position("AAAA")

    def test_logs_warning(self, caplog) -> None:
        decode_position("AAAA")

        assert "Rejected share code" in caplog.text
