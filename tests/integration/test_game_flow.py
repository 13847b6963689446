"""End-to-end games through the session, engine, history and save slots."""

from typing import Iterator, List

from solitaire.cards.schema import Card, Rank, Suit
from solitaire.codec.position import encode_position
from solitaire.config import EngineConfig
from solitaire.simulation.state import (
    FreeCellState,
    KlondikeState,
    TableauColumn,
    is_won,
)
from solitaire.storage.db import get_test_db
from solitaire.storage.saves import SaveStore
from solitaire.terminal.input import CommandReader
from solitaire.terminal.session import PlaySession, SessionConfig

SUITS = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)


def _pile(suit: Suit, top: Rank) -> tuple[Card, ...]:
    return tuple(Card(Rank(rank), suit) for rank in range(1, top + 1))


def _scripted(lines: List[str]) -> CommandReader:
    feed: Iterator[str] = iter(lines)
    return CommandReader(lambda prompt: next(feed))


def near_won_freecell() -> FreeCellState:
    """Every suit built to the Queen, the four Kings left in the tableau."""
    tableau = tuple((Card(Rank.KING, suit),) for suit in SUITS) + ((),) * 4
    return FreeCellState(
        tableau=tableau,
        free_cells=(None,) * 4,
        foundations=tuple(_pile(suit, Rank.QUEEN) for suit in SUITS),
        seed=77,
        moves=120,
    )


def near_won_klondike() -> KlondikeState:
    """Kings in the stock, everything else on the foundations."""
    return KlondikeState(
        tableau=(TableauColumn(),) * 7,
        stock=tuple(Card(Rank.KING, suit) for suit in SUITS),
        waste=(),
        foundations=tuple(_pile(suit, Rank.QUEEN) for suit in SUITS),
        seed=78,
        moves=90,
    )


class TestWinningGames:
    def test_freecell_auto_move_wins(self) -> None:
        output: List[str] = []
        session = PlaySession(SessionConfig(share_code=encode_position(near_won_freecell())))

        final = session.run(output_fn=output.append, reader=_scripted(["a", "q"]))

        assert is_won(final)
        assert final.moves == 124
        assert "\n=== You Win! ===" in output

    def test_freecell_manual_moves_win(self) -> None:
        output: List[str] = []
        session = PlaySession(SessionConfig(share_code=encode_position(near_won_freecell()), auto_move=False))

        final = session.run(
            output_fn=output.append,
            reader=_scripted(["t1 f1", "t2 f2", "t3 f3", "t4 f4", "q"]),
        )

        assert is_won(final)
        assert "\n=== You Win! ===" in output

    def test_klondike_draw_and_play(self) -> None:
        session = PlaySession(
            SessionConfig(game="klondike", share_code=encode_position(near_won_klondike()))
        )

        for _ in range(4):
            assert session.handle_text("d") == ""
            session.handle_text("a")

        assert is_won(session.state)

    def test_undo_after_win_restores_play(self) -> None:
        session = PlaySession(SessionConfig(share_code=encode_position(near_won_freecell())))

        session.handle_text("a")
        assert is_won(session.state)
        session.handle_text("u")

        assert session.state == near_won_freecell()


class TestSavedGames:
    def test_resume_mid_game(self) -> None:
        store = SaveStore(get_test_db())
        first = PlaySession(SessionConfig(seed=12, auto_move=False), store)
        first.handle_text("t1 c1")
        first.handle_text("t2 c2")
        first.handle_text("u")
        assert first.handle_text("s") == "Saved to 'default'."

        second = PlaySession(SessionConfig(seed=99), store)
        assert second.handle_text("l") == "Loaded 'default'."

        assert second.state == first.state
        assert second.history.can_redo()
        assert second.handle_text("r") == ""
        assert isinstance(second.state, FreeCellState)
        assert second.state.free_cells[1] is not None

    def test_load_switches_game(self) -> None:
        store = SaveStore(get_test_db())
        klondike_session = PlaySession(SessionConfig(game="klondike", seed=5), store)
        klondike_session.handle_text("d")
        klondike_session.handle_text("s k")

        session = PlaySession(SessionConfig(seed=5), store)
        session.handle_text("l k")
        session.handle_text("n 6")

        assert session.config.game == "klondike"
        assert isinstance(session.state, KlondikeState)
        assert session.state.seed == 6

    def test_corrupted_slot_starts_fresh_game(self) -> None:
        db = get_test_db()
        store = SaveStore(db)
        session = PlaySession(SessionConfig(seed=4, auto_move=False), store)
        session.handle_text("t1 c1")
        row = store.save(session.history, "broken")
        row.history_json = '{"format": 1, "current_index": 0, "states": [{"game": "freecell"}]}'
        db.commit()

        assert session.handle_text("l broken") == "No usable save in 'broken'."
        assert session.history.size() == 1
        assert session.state.moves == 0
        assert store.list_slots() == []

    def test_moves_survive_eviction(self) -> None:
        engine = EngineConfig(max_history_size=3)
        session = PlaySession(SessionConfig(seed=8, auto_move=False, engine=engine))

        for line in ("t1 c1", "t2 c2", "t3 c3", "t4 c4"):
            session.handle_text(line)

        assert session.history.size() == 3
        assert session.handle_text("u") == ""
        assert session.handle_text("u") == ""
        assert session.handle_text("u") == "Nothing to undo."
        assert session.state.moves == 2
