"""SQLite engine and session helpers for save slots."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as SQLSession
from sqlalchemy.orm import sessionmaker

from solitaire.config import DEFAULT_DB_PATH
from solitaire.storage.models import Base


def _open(url: str) -> Engine:
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    return engine


@lru_cache(maxsize=None)
def _session_factory(db_path: str) -> sessionmaker:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return sessionmaker(bind=_open(f"sqlite:///{db_path}"))


def get_session(db_path: str = DEFAULT_DB_PATH) -> SQLSession:
    """New session on the save file at ``db_path``."""
    return _session_factory(db_path)()


def get_test_db() -> SQLSession:
    """Session on a fresh in-memory database."""
    return sessionmaker(bind=_open("sqlite:///:memory:"))()
