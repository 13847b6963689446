"""Interactive terminal game session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from solitaire.cards.schema import Card
from solitaire.codec.position import decode_position, encode_position
from solitaire.config import EngineConfig
from solitaire.history.manager import HistoryManager
from solitaire.simulation import freecell, klondike
from solitaire.simulation.engine import (
    auto_move_to_foundations,
    draw_from_stock,
    execute_move,
)
from solitaire.simulation.hints import lowest_playable_cards
from solitaire.simulation.movegen import TapAction, generate_legal_moves, resolve_tap
from solitaire.simulation.state import GameState, KlondikeState, is_won
from solitaire.storage.saves import DEFAULT_SLOT, SaveStore, StorageError
from solitaire.terminal.display import MovePresenter, StateRenderer, format_location
from solitaire.terminal.input import (
    HELP_TEXT,
    Command,
    CommandKind,
    CommandReader,
    parse_command,
)

logger = logging.getLogger(__name__)

GAMES = ("freecell", "klondike")


@dataclass
class SessionConfig:
    """Configuration for a play session."""

    game: str = "freecell"
    seed: Optional[int] = None
    share_code: Optional[str] = None
    auto_move: bool = True
    slot: str = DEFAULT_SLOT
    engine: EngineConfig = field(default_factory=EngineConfig)

    def __post_init__(self):
        if self.game not in GAMES:
            raise ValueError(f"Unknown game {self.game!r}; expected one of {GAMES}")


class PlaySession:
    """Runs one player's game: engine calls, history and save slots."""

    def __init__(self, config: SessionConfig, store: Optional[SaveStore] = None):
        self.config = config
        self.store = store
        self.renderer = StateRenderer()
        self.presenter = MovePresenter()
        self.highlights: tuple[str, ...] = ()
        self.history: HistoryManager[GameState] = HistoryManager(
            config=config.engine, initial_state=self._deal
        )
        self.history.push(self._initial_state())

    @property
    def state(self) -> GameState:
        return self.history.current()

    def _deal(self, seed: Optional[int] = None) -> GameState:
        if self.config.game == "klondike":
            return klondike.new_game(seed=seed, config=self.config.engine)
        return freecell.new_game(seed=seed, config=self.config.engine)

    def _initial_state(self) -> GameState:
        if self.config.share_code:
            state = decode_position(self.config.share_code)
            if state is not None:
                return state
            logger.warning("Share code could not be decoded, dealing a new game instead")
        return self._deal(self.config.seed)

    def _commit(self, state: GameState) -> None:
        if self.config.auto_move:
            state = auto_move_to_foundations(state, self.config.engine)
        self.history.push(state)
        self.highlights = ()

    # Commands --------------------------------------------------------------

    def handle_text(self, raw: str) -> str:
        """Parse and apply one line of player input."""
        return self.handle(parse_command(raw))

    def handle(self, command: Command) -> str:
        """Apply one command and return the message to show."""
        if command.error:
            return command.error

        kind = command.kind
        if kind is CommandKind.MOVE:
            assert command.source is not None and command.destination is not None
            new_state = execute_move(self.state, command.source, command.destination)
            if new_state is None:
                return "Illegal move."
            self._commit(new_state)
            return ""
        if kind is CommandKind.TAP:
            assert command.source is not None
            return self._tap(command)
        if kind is CommandKind.DRAW:
            if not isinstance(self.state, KlondikeState):
                return "Only Klondike has a stock."
            new_state = draw_from_stock(self.state)
            if new_state is self.state:
                return "Stock and waste are both empty."
            self.history.push(new_state)
            return ""
        if kind is CommandKind.AUTO:
            new_state = auto_move_to_foundations(self.state, self.config.engine)
            if new_state is self.state:
                return "Nothing to move."
            self.history.push(new_state)
            return ""
        if kind is CommandKind.UNDO:
            return "" if self.history.undo() is not None else "Nothing to undo."
        if kind is CommandKind.REDO:
            return "" if self.history.redo() is not None else "Nothing to redo."
        if kind is CommandKind.HINT:
            ids = lowest_playable_cards(self.state)
            self.highlights = tuple(str(Card.from_id(card_id)) for card_id in ids)
            return "Needed next: " + (" ".join(self.highlights) if ids else "(none visible)")
        if kind is CommandKind.MOVES:
            return self.presenter.present(generate_legal_moves(self.state))
        if kind is CommandKind.NEW:
            return self._new_game(command.argument)
        if kind is CommandKind.SAVE:
            return self._save(command.argument or self.config.slot)
        if kind is CommandKind.LOAD:
            return self._load(command.argument or self.config.slot)
        if kind is CommandKind.SHARE:
            return self._share()
        if kind is CommandKind.HELP:
            return HELP_TEXT
        return ""

    def _tap(self, command: Command) -> str:
        assert command.source is not None
        result = resolve_tap(self.state, command.source)
        if result.action is TapAction.INVALID:
            return f"No legal move from {format_location(command.source)}."
        if result.action is TapAction.HIGHLIGHT:
            options = " ".join(format_location(d) for d in result.destinations)
            return f"Choose a destination: {options}"
        assert result.destination is not None
        new_state = execute_move(self.state, command.source, result.destination)
        assert new_state is not None
        self._commit(new_state)
        return f"Moved to {format_location(result.destination)}."

    def _share(self) -> str:
        try:
            code = encode_position(self.state)
        except ValueError as e:
            logger.warning(f"Position cannot be shared: {e}")
            return "This position cannot be shared."
        return f"Share code: {code}"

    def _new_game(self, argument: Optional[str]) -> str:
        seed: Optional[int] = None
        if argument is not None:
            try:
                seed = int(argument)
            except ValueError:
                return f"Seed must be a number, got {argument!r}."
        self.history.reset(self._deal(seed))
        self.highlights = ()
        return f"New game #{self.state.seed}."

    def _save(self, slot: str) -> str:
        if self.store is None:
            return "Saving is disabled."
        try:
            self.store.save(self.history, slot)
        except StorageError as e:
            logger.error(str(e))
            return "Save failed."
        return f"Saved to {slot!r}."

    def _load(self, slot: str) -> str:
        if self.store is None:
            return "Saving is disabled."
        try:
            loaded = self.store.load(self.history, slot)
        except StorageError as e:
            logger.error(str(e))
            return "Load failed."
        if not loaded:
            return f"No usable save in {slot!r}."
        game = "klondike" if isinstance(self.state, KlondikeState) else "freecell"
        self.config = replace(self.config, game=game)
        self.highlights = ()
        return f"Loaded {slot!r}."

    # Loop ------------------------------------------------------------------

    def run(
        self,
        output_fn: Callable[[str], None] = print,
        reader: Optional[CommandReader] = None,
    ) -> GameState:
        """Play until the game is won or the player quits.

        Returns:
            The final state
        """
        reader = reader or CommandReader()
        output_fn("Enter ? for help.")

        while True:
            output_fn("")
            output_fn(self.renderer.render(self.state, self.highlights))

            if is_won(self.state):
                output_fn("\n=== You Win! ===")
                output_fn(f"Finished in {self.state.moves} moves.")
                break

            command = reader.read()
            if command.kind is CommandKind.QUIT:
                break
            message = self.handle(command)
            if message:
                output_fn(message)

        return self.state
