"""Tests for the undo/redo history manager."""

import json
import logging

import pytest

from solitaire.config import EngineConfig
from solitaire.history.manager import HistoryManager
from solitaire.simulation.engine import execute_move
from solitaire.simulation.freecell import new_game
from solitaire.simulation.movegen import generate_legal_moves


def plain_history(max_size: int = 100, initial_state=None) -> HistoryManager:
    """History of JSON-native values."""
    return HistoryManager(
        max_size=max_size,
        encoder=lambda state: state,
        decoder=lambda raw: raw,
        validator=None,
        initial_state=initial_state,
    )


class TestNavigation:
    def test_empty_history(self) -> None:
        history = plain_history()

        assert history.size() == 0
        assert not history.can_undo()
        assert not history.can_redo()
        assert history.undo() is None
        assert history.redo() is None
        with pytest.raises(IndexError):
            history.current()

    def test_undo_then_redo(self) -> None:
        history = plain_history()
        history.push("a")
        history.push("b")

        assert history.undo() == "a"
        assert history.current() == "a"
        assert history.redo() == "b"
        assert history.current() == "b"

    def test_single_state_cannot_undo(self) -> None:
        history = plain_history()
        history.push("a")

        assert not history.can_undo()
        assert history.undo() is None
        assert history.current() == "a"

    def test_push_after_undo_discards_redo(self) -> None:
        history = plain_history()
        for state in ("a", "b", "c"):
            history.push(state)

        history.undo()
        history.push("d")

        assert history.snapshots() == ("a", "b", "d")
        assert not history.can_redo()
        assert history.redo() is None

    def test_overflow_evicts_oldest(self) -> None:
        history = plain_history(max_size=3)
        for state in range(1, 6):
            history.push(state)

        assert history.snapshots() == (3, 4, 5)
        assert history.current() == 5
        assert history.undo() == 4
        assert history.undo() == 3
        assert history.undo() is None

    def test_push_in_the_middle_of_full_window(self) -> None:
        history = plain_history(max_size=3)
        for state in (1, 2, 3):
            history.push(state)

        history.undo()
        history.push(9)

        assert history.snapshots() == (1, 2, 9)
        assert history.current_index == 2

    def test_jump_to(self) -> None:
        history = plain_history()
        for state in ("a", "b", "c"):
            history.push(state)

        assert history.jump_to(0) == "a"
        assert history.can_redo()
        assert history.redo() == "b"
        with pytest.raises(IndexError):
            history.jump_to(3)
        with pytest.raises(IndexError):
            history.jump_to(-1)

    def test_clear_and_reset(self) -> None:
        history = plain_history()
        history.push("a")
        history.push("b")

        history.reset("z")
        assert history.snapshots() == ("z",)
        assert history.current() == "z"

        history.clear()
        assert len(history) == 0

    def test_max_size_from_config(self) -> None:
        history = HistoryManager(config=EngineConfig(max_history_size=7))

        assert history.max_size == 7
        assert HistoryManager().max_size == 100

    def test_invalid_max_size(self) -> None:
        with pytest.raises(ValueError):
            plain_history(max_size=0)


class TestSerialization:
    def test_round_trip_plain_values(self) -> None:
        history = plain_history()
        for state in ({"n": 1}, {"n": 2}, {"n": 3}):
            history.push(state)
        history.undo()

        restored = plain_history()
        assert restored.deserialize(history.serialize())
        assert restored.snapshots() == history.snapshots()
        assert restored.current() == {"n": 2}
        assert restored.can_redo()

    def test_serialized_form(self) -> None:
        history = plain_history()
        history.push(1)

        data = json.loads(history.serialize())

        assert data == {"format": 1, "current_index": 0, "states": [1]}

    def test_round_trip_game_states(self) -> None:
        state = new_game(seed=5)
        history = HistoryManager()
        history.push(state)
        for move in generate_legal_moves(state)[:3]:
            next_state = execute_move(history.current(), move.source, move.destination)
            if next_state is not None:
                history.push(next_state)

        restored = HistoryManager()
        assert restored.deserialize(history.serialize())
        assert restored.snapshots() == history.snapshots()
        assert restored.current_index == history.current_index

    def test_restore_trims_to_window(self) -> None:
        history = plain_history()
        for state in range(10):
            history.push(state)

        small = plain_history(max_size=4)
        assert small.deserialize(history.serialize())
        assert small.snapshots() == (6, 7, 8, 9)
        assert small.current() == 9

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[]",
            '{"format": 1, "current_index": 0}',
            '{"format": 2, "current_index": 0, "states": [1]}',
            '{"format": 1, "current_index": 3, "states": [1]}',
            '{"format": 1, "current_index": 0, "states": []}',
            '{"format": 1, "current_index": "x", "states": [1]}',
        ],
    )
    def test_malformed_input_fails_closed(self, payload: str) -> None:
        history = plain_history(initial_state=lambda: "fresh")
        history.push("old")

        assert history.deserialize(payload) is False
        assert history.snapshots() == ("fresh",)

    def test_failure_logs_warning(self, caplog) -> None:
        history = plain_history(initial_state=lambda: "fresh")

        with caplog.at_level(logging.WARNING, logger="solitaire.history.manager"):
            history.deserialize("{")

        assert "Discarding corrupted history" in caplog.text

    def test_without_factory_history_is_empty(self) -> None:
        history = plain_history()
        history.push("old")

        assert not history.deserialize("garbage")
        assert history.size() == 0

    def test_card_conservation_checked(self) -> None:
        state = new_game(seed=5)
        history = HistoryManager(initial_state=lambda: new_game(seed=1))
        history.push(state)
        data = json.loads(history.serialize())
        # Duplicate a card: the first column's bottom card replaces the second's
        data["states"][0]["tableau"][1][0] = data["states"][0]["tableau"][0][0]

        assert not history.deserialize(json.dumps(data))
        assert history.current() == new_game(seed=1)

    def test_bad_card_id_fails_closed(self) -> None:
        history = HistoryManager(initial_state=lambda: new_game(seed=1))
        history.push(new_game(seed=5))
        data = json.loads(history.serialize())
        data["states"][0]["tableau"][0][0] = "ZZ"

        assert not history.deserialize(json.dumps(data))
        assert history.size() == 1

    @pytest.mark.parametrize(
        "field, value",
        [
            ("free_cells", [["A", "S"], None, None, None]),
            ("seed", "1e400"),
            ("seed", 3.5),
            ("moves", "12"),
        ],
    )
    def test_malformed_game_state_fails_closed(self, field: str, value) -> None:
        history = HistoryManager(initial_state=lambda: new_game(seed=1))
        history.push(new_game(seed=5))
        data = json.loads(history.serialize())
        data["states"][0][field] = value
        text = json.dumps(data)
        if value == "1e400":
            # Parses back as float infinity
            text = text.replace('"1e400"', "1e400")

        assert not history.deserialize(text)
        assert history.snapshots() == (new_game(seed=1),)
