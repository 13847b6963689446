"""CLI command for playing in the terminal."""

from __future__ import annotations

import logging
from dataclasses import replace

import click

from solitaire.config import EngineConfig
from solitaire.simulation.state import DrawMode
from solitaire.storage.db import get_session
from solitaire.storage.saves import DEFAULT_SLOT, SaveStore, StorageError
from solitaire.terminal.input import Command, CommandKind
from solitaire.terminal.session import GAMES, PlaySession, SessionConfig

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "-g", "--game",
    type=click.Choice(list(GAMES)),
    default="freecell",
    help="Which solitaire to play",
)
@click.option("--seed", type=int, default=None, help="Deal seed for reproducibility")
@click.option("--code", "share_code", default=None, help="Start from a share code")
@click.option(
    "--draw",
    type=click.Choice([mode.value for mode in DrawMode]),
    default=None,
    help="Klondike draw mode (default from SOLITAIRE_DRAW_MODE or draw1)",
)
@click.option("--free-cells", type=click.IntRange(0, 7), default=None, help="FreeCell free-cell count")
@click.option("--auto/--no-auto", default=True, help="Sweep cards to the foundations after each move")
@click.option("--slot", default=DEFAULT_SLOT, help="Save slot name")
@click.option("--resume", is_flag=True, help="Resume the game saved in --slot")
@click.option("--db", "db_path", type=click.Path(), default=None, help="SQLite file for save slots")
@click.option("--no-save", is_flag=True, help="Disable save slots")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(
    game: str,
    seed: int | None,
    share_code: str | None,
    draw: str | None,
    free_cells: int | None,
    auto: bool,
    slot: str,
    resume: bool,
    db_path: str | None,
    no_save: bool,
    verbose: bool,
):
    """Play FreeCell or Klondike in the terminal."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    engine = EngineConfig.from_env()
    if draw is not None:
        engine = replace(engine, draw_mode=DrawMode(draw))
    if free_cells is not None:
        engine = replace(engine, free_cells=free_cells)
    if db_path is not None:
        engine = replace(engine, db_path=db_path)

    config = SessionConfig(
        game=game,
        seed=seed,
        share_code=share_code,
        auto_move=auto,
        slot=slot,
        engine=engine,
    )

    store = None if no_save else SaveStore(get_session(engine.db_path))
    session = PlaySession(config, store)

    if resume:
        click.echo(session.handle(Command(kind=CommandKind.LOAD, argument=slot)))

    try:
        final = session.run(output_fn=click.echo)
    except KeyboardInterrupt:
        click.echo("\n\nGame interrupted.")
        final = session.state

    if store is not None:
        try:
            store.save(session.history, slot)
            click.echo(f"\nGame saved to slot {slot!r} ({final.moves} moves).")
        except StorageError as e:
            logger.error(str(e))
            click.echo("\nCould not save the game.")


if __name__ == "__main__":
    main()
