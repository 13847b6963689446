"""Engine configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from solitaire.simulation.state import DrawMode

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "data/solitaire.db"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration shared by the engine, history and storage layers."""

    max_history_size: int = 100
    draw_mode: DrawMode = DrawMode.DRAW_ONE
    free_cells: int = 4
    # None disables the safe auto-move check (every legal card is swept)
    freecell_auto_move_margin: Optional[int] = 2
    klondike_auto_move_margin: Optional[int] = None
    db_path: str = DEFAULT_DB_PATH

    def __post_init__(self) -> None:
        if self.max_history_size < 1:
            raise ValueError(f"max_history_size must be at least 1, got {self.max_history_size}")
        if not 0 <= self.free_cells <= 7:
            raise ValueError(f"free_cells must be between 0 and 7, got {self.free_cells}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from SOLITAIRE_* environment variables.

        Unparseable values are ignored with a warning and the default is kept.
        """
        env = os.environ if environ is None else environ
        changes: dict = {}

        max_history = _int_from_env(env, "SOLITAIRE_MAX_HISTORY")
        if max_history is not None:
            changes["max_history_size"] = max_history

        free_cells = _int_from_env(env, "SOLITAIRE_FREE_CELLS")
        if free_cells is not None:
            changes["free_cells"] = free_cells

        draw_mode = env.get("SOLITAIRE_DRAW_MODE")
        if draw_mode:
            try:
                changes["draw_mode"] = DrawMode(draw_mode.lower())
            except ValueError:
                logger.warning(f"Ignoring SOLITAIRE_DRAW_MODE={draw_mode!r} (expected draw1 or draw3)")

        db_path = env.get("SOLITAIRE_DB_PATH")
        if db_path:
            changes["db_path"] = db_path

        return cls(**changes)


def _int_from_env(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r} (not an integer)")
        return None
