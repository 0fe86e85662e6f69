"""
Tests for cfr_solver/config.py

Covers SolverConfig validation, YAML loading and saving, and logging setup.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cfr_solver.config import (
    SolverConfig,
    config_to_dict,
    configure_logging,
    load_config,
    save_config,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestSolverConfig:
    def test_defaults_are_valid(self) -> None:
        config = SolverConfig().validate()
        assert config.game == "kuhn"
        assert config.chance_sampling == "cycle"
        assert config.game_options == {}

    @pytest.mark.parametrize(
        "overrides",
        [
            {"game": "chess"},
            {"chance_sampling": "shuffle"},
            {"iterations": 0},
            {"convergence_check_every": -1},
            {"log_every": 0},
            {"exploitability_threshold": 0.0},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            SolverConfig(**overrides).validate()

    def test_with_overrides_skips_none(self) -> None:
        config = SolverConfig(iterations=500, seed=3)
        updated = config.with_overrides(iterations=None, seed=7, game="dudo")
        assert updated.iterations == 500
        assert updated.seed == 7
        assert updated.game == "dudo"
        assert config.seed == 3

    def test_config_to_dict(self) -> None:
        data = config_to_dict(SolverConfig(game_options={"deck_size": 4}))
        assert data["game_options"] == {"deck_size": 4}
        assert data["iterations"] == 10_000


class TestLoadConfig:
    def test_partial_file_uses_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "run.yaml", "game: dudo\ngame_options: {num_sides: 3}\niterations: 900\n")
        config = load_config(path)
        assert config.game == "dudo"
        assert config.game_options == {"num_sides": 3}
        assert config.iterations == 900
        assert config.log_level == "INFO"

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_config(_write(tmp_path / "empty.yaml", "")) == SolverConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_bad_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="parsing YAML"):
            load_config(_write(tmp_path / "bad.yaml", "game: [kuhn\n"))

    def test_unknown_keys(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            load_config(_write(tmp_path / "extra.yaml", "game: kuhn\nlearning_rate: 0.1\n"))

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="mapping"):
            load_config(_write(tmp_path / "list.yaml", "- kuhn\n- dudo\n"))

    def test_invalid_value_in_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(_write(tmp_path / "bad_mode.yaml", "chance_sampling: never\n"))


class TestSaveConfig:
    def test_save_then_load(self, tmp_path: Path) -> None:
        config = SolverConfig(game="dudo", game_options={"num_sides": 4}, seed=1, log_every=100)
        path = tmp_path / "nested" / "run.yaml"
        save_config(config, path)
        assert path.exists()
        assert load_config(path) == config


class TestConfigureLogging:
    def test_sets_root_level(self) -> None:
        configure_logging("warning")
        assert logging.getLogger().level == logging.WARNING
