"""CLI commands for position share codes."""

from __future__ import annotations

import logging
import sys

import click

from solitaire.codec.position import decode_position, encode_position
from solitaire.simulation import freecell, klondike
from solitaire.simulation.state import DrawMode
from solitaire.terminal.display import StateRenderer

logger = logging.getLogger(__name__)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool):
    """Create and inspect share codes."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


@main.command()
@click.option("-g", "--game", type=click.Choice(["freecell", "klondike"]), default="freecell")
@click.option("--seed", type=click.IntRange(0, 2**32 - 1), default=None, help="Deal seed")
@click.option("--draw", type=click.Choice([mode.value for mode in DrawMode]), default=DrawMode.DRAW_ONE.value)
def encode(game: str, seed: int | None, draw: str):
    """Print the share code of a freshly dealt game."""
    if game == "klondike":
        state = klondike.new_game(seed=seed, draw_mode=DrawMode(draw))
    else:
        state = freecell.new_game(seed=seed)
    click.echo(encode_position(state))


@main.command()
@click.argument("code")
def decode(code: str):
    """Render the position stored in CODE."""
    state = decode_position(code)
    if state is None:
        click.echo("Invalid share code.", err=True)
        sys.exit(1)
    click.echo(StateRenderer().render(state))


if __name__ == "__main__":
    main()
