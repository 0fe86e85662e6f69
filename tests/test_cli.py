"""
Tests for cfr_solver/cli.py

Every subcommand is run in-process through main(argv) with small iteration
counts; output is checked through capsys.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # must precede any pyplot import

import pytest

from cfr_solver.cli import _parse_options, build_parser, main


class TestParseOptions:
    def test_values_parsed_as_yaml_scalars(self) -> None:
        assert _parse_options(["num_sides=3", "name=abc", "flag=true"]) == {
            "num_sides": 3,
            "name": "abc",
            "flag": True,
        }

    def test_none(self) -> None:
        assert _parse_options(None) == {}

    def test_malformed(self) -> None:
        with pytest.raises(ValueError):
            _parse_options(["num_sides"])


class TestParser:
    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_game_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["train", "chess"])


class TestTrain:
    def test_kuhn(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["train", "kuhn", "--iterations", "600"]) == 0
        out = capsys.readouterr().out
        assert "Nash Equilibrium Value Summary (kuhn)" in out
        assert "Player 2 Average Strategy" in out

    def test_dudo_with_option(self, capsys: pytest.CaptureFixture) -> None:
        code = main(["train", "dudo", "--option", "num_sides=3", "--iterations", "90", "--max-rows", "5"])
        assert code == 0
        assert "more information sets" in capsys.readouterr().out

    def test_from_config_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        config = tmp_path / "run.yaml"
        config.write_text("game: kuhn\niterations: 120\nconvergence_check_every: 60\n")
        assert main(["train", "--config", str(config)]) == 0
        assert "Iterations:           120" in capsys.readouterr().out

    def test_writes_figures(self, tmp_path: Path) -> None:
        png = tmp_path / "kuhn.png"
        html = tmp_path / "kuhn.html"
        code = main(
            ["train", "kuhn", "--iterations", "120", "--heatmap", str(png), "--lookup-html", str(html)]
        )
        assert code == 0
        assert png.stat().st_size > 0
        assert html.stat().st_size > 0

    def test_error_returns_non_zero(self, tmp_path: Path) -> None:
        assert main(["train", "--config", str(tmp_path / "missing.yaml")]) == 1
        assert main(["train", "kuhn", "--option", "deck_size=1"]) == 1

    def test_option_for_another_game_returns_non_zero(self) -> None:
        assert main(["train", "kuhn", "--iterations", "10", "--option", "num_sides=3"]) == 1
        assert main(["matrix", "rps", "--iterations", "10", "--option", "soldiers=3"]) == 1

    def test_config_game_options_checked(self, tmp_path: Path) -> None:
        config = tmp_path / "run.yaml"
        config.write_text("game: kuhn\niterations: 10\ngame_options:\n  num_sides: 3\n")
        assert main(["train", "--config", str(config)]) == 1


class TestMatrix:
    def test_rps(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["matrix", "rps", "--iterations", "200"]) == 0
        out = capsys.readouterr().out
        assert "Regret Matching Solution (rps)" in out
        assert "scissors" in out

    def test_blotto_sampled(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["matrix", "blotto", "--iterations", "200", "--sampled", "--seed", "1"]) == 0
        assert "Regret Matching Solution (blotto)" in capsys.readouterr().out

    def test_blotto_options(self, capsys: pytest.CaptureFixture) -> None:
        code = main(["matrix", "blotto", "--iterations", "50", "--option", "soldiers=3", "--option", "battlefields=2"])
        assert code == 0
        labels = [line.split()[0] for line in capsys.readouterr().out.splitlines() if line.startswith("  ") and line.split()[0].isdigit()]
        assert labels == ["03", "12", "21", "30"]


class TestSimulate:
    def test_kuhn(self, capsys: pytest.CaptureFixture) -> None:
        code = main(["simulate", "kuhn", "--iterations", "300", "--games", "500", "--seed", "0"])
        assert code == 0
        out = capsys.readouterr().out
        assert "Trained player 1 vs uniform random" in out
        assert "Variance & Bankroll Report" in out
