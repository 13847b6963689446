"""Terminal front end for playing solitaire."""

from solitaire.terminal.display import StateRenderer, MovePresenter, format_card, format_location
from solitaire.terminal.input import Command, CommandKind, CommandReader, parse_command, parse_location
from solitaire.terminal.session import PlaySession, SessionConfig

__all__ = [
    "StateRenderer",
    "MovePresenter",
    "format_card",
    "format_location",
    "Command",
    "CommandKind",
    "CommandReader",
    "parse_command",
    "parse_location",
    "PlaySession",
    "SessionConfig",
]
