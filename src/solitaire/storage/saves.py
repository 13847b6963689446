"""Save slots: persist and restore histories on the local device."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as SQLSession

from solitaire.history.manager import HistoryManager
from solitaire.simulation.engine import rules_for
from solitaire.simulation.state import GameState, is_won
from solitaire.storage.models import SavedGame

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "default"


class StorageError(Exception):
    """The save database could not be read or written."""


class SaveStore:
    """Save slots backed by a SQLAlchemy session."""

    def __init__(self, session: SQLSession) -> None:
        self.session = session

    def save(self, history: HistoryManager[GameState], slot: str = DEFAULT_SLOT) -> SavedGame:
        """Write the history to ``slot``, replacing what was there."""
        state = history.current()
        try:
            row = self.session.get(SavedGame, slot)
            if row is None:
                row = SavedGame(slot=slot)
                self.session.add(row)
            row.game = rules_for(state).name
            row.history_json = history.serialize()
            row.moves = state.moves
            row.won = is_won(state)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Could not save slot {slot!r}: {e}") from e
        logger.info(f"Saved {row.game} game to slot {slot!r} ({state.moves} moves)")
        return row

    def load(self, history: HistoryManager[GameState], slot: str = DEFAULT_SLOT) -> bool:
        """Restore ``slot`` into ``history``.

        Returns:
            True if the slot existed and decoded cleanly. A corrupted slot is
            deleted and the history falls back to a fresh game.
        """
        row = self._get(slot)
        if row is None:
            return False
        if history.deserialize(row.history_json):
            return True

        logger.warning(f"Slot {slot!r} was corrupted and has been discarded")
        self.delete(slot)
        return False

    def delete(self, slot: str) -> bool:
        try:
            row = self.session.get(SavedGame, slot)
            if row is None:
                return False
            self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageError(f"Could not delete slot {slot!r}: {e}") from e
        return True

    def list_slots(self) -> List[SavedGame]:
        """Saved games, most recently updated first."""
        try:
            return (
                self.session.query(SavedGame)
                .order_by(SavedGame.updated_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Could not list save slots: {e}") from e

    def _get(self, slot: str) -> Optional[SavedGame]:
        try:
            return self.session.get(SavedGame, slot)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read slot {slot!r}: {e}") from e
