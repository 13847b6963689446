"""Tests for engine configuration."""

import logging

import pytest

from solitaire.config import DEFAULT_DB_PATH, EngineConfig
from solitaire.simulation.state import DrawMode


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()

        assert config.max_history_size == 100
        assert config.draw_mode is DrawMode.DRAW_ONE
        assert config.free_cells == 4
        assert config.freecell_auto_move_margin == 2
        assert config.klondike_auto_move_margin is None
        assert config.db_path == DEFAULT_DB_PATH

    def test_from_env(self) -> None:
        config = EngineConfig.from_env(
            {
                "SOLITAIRE_MAX_HISTORY": "50",
                "SOLITAIRE_DRAW_MODE": "DRAW3",
                "SOLITAIRE_FREE_CELLS": "2",
                "SOLITAIRE_DB_PATH": "/tmp/saves.db",
            }
        )

        assert config.max_history_size == 50
        assert config.draw_mode is DrawMode.DRAW_THREE
        assert config.free_cells == 2
        assert config.db_path == "/tmp/saves.db"

    def test_from_env_reads_os_environ(self, monkeypatch) -> None:
        monkeypatch.setenv("SOLITAIRE_MAX_HISTORY", "12")

        assert EngineConfig.from_env().max_history_size == 12

    def test_unparseable_values_keep_defaults(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            config = EngineConfig.from_env(
                {"SOLITAIRE_MAX_HISTORY": "lots", "SOLITAIRE_DRAW_MODE": "draw2"}
            )

        assert config == EngineConfig()
        assert "SOLITAIRE_MAX_HISTORY" in caplog.text
        assert "SOLITAIRE_DRAW_MODE" in caplog.text

    def test_out_of_range_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(free_cells=8)
        with pytest.raises(ValueError):
            EngineConfig(max_history_size=0)
        with pytest.raises(ValueError):
            EngineConfig.from_env({"SOLITAIRE_FREE_CELLS": "-1"})
