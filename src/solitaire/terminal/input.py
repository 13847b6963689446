"""Command parsing for the terminal game."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from solitaire.simulation.state import (
    FoundationLocation,
    FreeCellLocation,
    Location,
    TableauLocation,
    WasteLocation,
)

_LOCATION_RE = re.compile(r"^(?P<zone>[tfc])(?P<index>\d+)(?:x(?P<count>\d+))?$")

HELP_TEXT = """Commands:
  t3 t5       move the top card of column 3 onto column 5
  t3x2 t5     move the top 2 cards of column 3
  t1 f1       move to foundation 1 (c1 = free cell 1, w = waste)
  t3          tap: play the only legal move, or list the options
  d           draw from the stock (Klondike)
  a           auto-move to the foundations
  u / r       undo / redo
  h           hint (next cards the foundations need)
  m           list legal moves
  n [seed]    new game
  s [slot]    save, l [slot] load
  share       print a share code for this position
  q           quit"""


class CommandKind(Enum):
    MOVE = "move"
    TAP = "tap"
    DRAW = "draw"
    AUTO = "auto"
    UNDO = "undo"
    REDO = "redo"
    HINT = "hint"
    MOVES = "moves"
    NEW = "new"
    SAVE = "save"
    LOAD = "load"
    SHARE = "share"
    HELP = "help"
    QUIT = "quit"


_KEYWORDS = {
    "d": CommandKind.DRAW,
    "draw": CommandKind.DRAW,
    "a": CommandKind.AUTO,
    "auto": CommandKind.AUTO,
    "u": CommandKind.UNDO,
    "undo": CommandKind.UNDO,
    "r": CommandKind.REDO,
    "redo": CommandKind.REDO,
    "h": CommandKind.HINT,
    "hint": CommandKind.HINT,
    "m": CommandKind.MOVES,
    "moves": CommandKind.MOVES,
    "n": CommandKind.NEW,
    "new": CommandKind.NEW,
    "s": CommandKind.SAVE,
    "save": CommandKind.SAVE,
    "l": CommandKind.LOAD,
    "load": CommandKind.LOAD,
    "share": CommandKind.SHARE,
    "?": CommandKind.HELP,
    "help": CommandKind.HELP,
    "q": CommandKind.QUIT,
    "quit": CommandKind.QUIT,
    "exit": CommandKind.QUIT,
}


@dataclass
class Command:
    """A parsed line of input."""

    kind: Optional[CommandKind] = None
    source: Optional[Location] = None
    destination: Optional[Location] = None
    argument: Optional[str] = None
    error: Optional[str] = None


def parse_location(token: str) -> Location:
    """Parse "t3", "t3x2", "f1", "c2" or "w" (indices are 1-based).

    Raises:
        ValueError: If the token is not a location
    """
    token = token.strip().lower()
    if token in ("w", "waste"):
        return WasteLocation()
    match = _LOCATION_RE.match(token)
    if not match:
        raise ValueError(f"Unknown location {token!r}")
    index = int(match.group("index")) - 1
    if index < 0:
        raise ValueError(f"Locations are numbered from 1, got {token!r}")
    zone = match.group("zone")
    count = match.group("count")
    if count is not None and zone != "t":
        raise ValueError(f"Only tableau columns take a card count, got {token!r}")
    if zone == "t":
        return TableauLocation(index=index, card_count=int(count) if count else 1)
    if zone == "f":
        return FoundationLocation(index=index)
    return FreeCellLocation(index=index)


def parse_command(raw: str) -> Command:
    """Parse one line of player input."""
    parts = raw.strip().lower().split()
    if not parts:
        return Command(error="Enter a command, or ? for help.")

    keyword = _KEYWORDS.get(parts[0])
    if keyword is not None:
        if len(parts) > 2:
            return Command(error=f"Too many arguments for {parts[0]!r}.")
        return Command(kind=keyword, argument=parts[1] if len(parts) == 2 else None)

    try:
        locations = [parse_location(part) for part in parts]
    except ValueError as e:
        return Command(error=f"{e}. Enter ? for help.")

    if len(locations) == 1:
        return Command(kind=CommandKind.TAP, source=locations[0])
    if len(locations) == 2:
        return Command(kind=CommandKind.MOVE, source=locations[0], destination=locations[1])
    return Command(error="A move takes a source and a destination.")


class CommandReader:
    """Reads commands from the player."""

    def __init__(self, input_fn: Callable[[str], str] = input) -> None:
        self.input_fn = input_fn

    def read(self, prompt: str = "> ") -> Command:
        try:
            raw = self.input_fn(prompt)
        except (EOFError, KeyboardInterrupt):
            return Command(kind=CommandKind.QUIT)
        return parse_command(raw)
