"""Bounded undo/redo history of immutable state snapshots."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from solitaire.codec.serialization import state_from_dict, state_to_dict
from solitaire.codec.versioning import HistoryFormat, validate_history_format
from solitaire.config import EngineConfig
from solitaire.simulation.state import has_full_deck

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HistoryPayload(BaseModel):
    """At-rest form of a history."""

    format: int
    current_index: int
    states: list[Any]


class HistoryManager(Generic[T]):
    """Snapshots plus a pointer to the current one.

    Pushing after an undo discards the redo branch. When the window is full
    the oldest snapshot is evicted. Encoder, decoder and validator default to
    the game-state codec and card conservation check; pass your own to store
    other state shapes.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        encoder: Callable[[T], Any] = state_to_dict,  # type: ignore[assignment]
        decoder: Callable[[Any], T] = state_from_dict,  # type: ignore[assignment]
        validator: Optional[Callable[[T], bool]] = has_full_deck,  # type: ignore[assignment]
        initial_state: Optional[Callable[[], T]] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.max_size = max_size if max_size is not None else (config or EngineConfig()).max_history_size
        if self.max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {self.max_size}")
        self._encoder = encoder
        self._decoder = decoder
        self._validator = validator
        self._initial_state = initial_state
        self._states: Deque[T] = deque(maxlen=self.max_size)
        self._index = -1

    # Navigation ------------------------------------------------------------

    def push(self, state: T) -> None:
        """Record a new current state, dropping any redo branch."""
        while len(self._states) > self._index + 1:
            self._states.pop()
        self._states.append(state)
        self._index = len(self._states) - 1

    def undo(self) -> Optional[T]:
        """Step back; None if there is nothing to undo."""
        if not self.can_undo():
            return None
        self._index -= 1
        return self._states[self._index]

    def redo(self) -> Optional[T]:
        """Step forward; None if there is nothing to redo."""
        if not self.can_redo():
            return None
        self._index += 1
        return self._states[self._index]

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def current(self) -> T:
        """The current snapshot.

        Raises:
            IndexError: If the history is empty
        """
        if self._index < 0:
            raise IndexError("History is empty")
        return self._states[self._index]

    @property
    def current_index(self) -> int:
        return self._index

    def jump_to(self, index: int) -> T:
        """Make snapshot ``index`` current without discarding anything."""
        if not 0 <= index < len(self._states):
            raise IndexError(f"Invalid history index: {index}")
        self._index = index
        return self._states[index]

    def snapshots(self) -> tuple[T, ...]:
        return tuple(self._states)

    def clear(self) -> None:
        self._states.clear()
        self._index = -1

    def reset(self, state: T) -> None:
        """Start over from ``state`` (new game)."""
        self.clear()
        self.push(state)

    def size(self) -> int:
        return len(self._states)

    def __len__(self) -> int:
        return len(self._states)

    # Persistence -----------------------------------------------------------

    def serialize(self) -> str:
        """JSON string holding every snapshot and the current index."""
        payload = HistoryPayload(
            format=HistoryFormat.CURRENT,
            current_index=self._index,
            states=[self._encoder(state) for state in self._states],
        )
        return payload.model_dump_json()

    def deserialize(self, data: str) -> bool:
        """Replace this history with a serialized one.

        Malformed input never raises: the history falls back to a single
        fresh initial state (or stays empty without an ``initial_state``
        factory) and False is returned.
        """
        try:
            states, index = self._decode(data)
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding corrupted history: {e}")
            self._fail_closed()
            return False

        self.clear()
        self._states.extend(states)
        self._index = index
        return True

    def _decode(self, data: str) -> tuple[list[T], int]:
        payload = HistoryPayload.model_validate_json(data)
        validate_history_format(payload.format)
        if not payload.states:
            raise ValueError("History holds no states")
        if not 0 <= payload.current_index < len(payload.states):
            raise ValueError(
                f"current_index {payload.current_index} out of range for {len(payload.states)} states"
            )

        states = [self._decoder(raw) for raw in payload.states]
        if self._validator is not None:
            for position, state in enumerate(states):
                if not self._validator(state):
                    raise ValueError(f"State {position} failed validation")

        index = payload.current_index
        overflow = len(states) - self.max_size
        if overflow > 0:
            # Keep the newest window; a current state older than that is lost
            states = states[overflow:]
            index = max(0, index - overflow)
        return states, index

    def _fail_closed(self) -> None:
        self.clear()
        if self._initial_state is not None:
            self.push(self._initial_state())
