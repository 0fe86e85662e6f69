"""
Command-line entry point.

    cfr-solver train kuhn --iterations 50000 --check-every 10000
    cfr-solver train dudo --option num_sides=4 --heatmap dudo.png
    cfr-solver matrix blotto --iterations 20000
    cfr-solver simulate kuhn --games 20000

Every subcommand logs progress to stderr and prints its report to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

import yaml

from cfr_solver.analysis.bankroll import (
    compute_horizon_projections,
    compute_variance_stats,
    print_variance_report,
)
from cfr_solver.analysis.simulator import simulate_games
from cfr_solver.analysis.strategy_report import (
    print_game_value,
    print_matrix_solution,
    print_strategy_table,
)
from cfr_solver.config import SolverConfig, configure_logging, load_config
from cfr_solver.errors import CfrError
from cfr_solver.games.factory import (
    available_games,
    available_matrix_games,
    make_game,
    make_matrix_game,
)
from cfr_solver.solvers.cfr import CHANCE_MODES, CfrResult, solve
from cfr_solver.solvers.regret_matching import RegretMatchingSolver

logger = logging.getLogger(__name__)


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _parse_options(pairs: list[str] | None) -> dict[str, Any]:
    """Turn ``["num_sides=4"]`` into ``{"num_sides": 4}`` (values parsed as YAML scalars)."""
    options: dict[str, Any] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Game options must look like KEY=VALUE, got {pair!r}")
        options[name.strip()] = yaml.safe_load(value)
    return options


def _resolve_config(args: argparse.Namespace) -> SolverConfig:
    config = load_config(args.config) if args.config else SolverConfig()
    options = {**config.game_options, **_parse_options(args.option)}
    return config.with_overrides(
        game=args.game,
        game_options=options,
        iterations=args.iterations,
        chance_sampling=args.chance_sampling,
        seed=args.seed,
        convergence_check_every=getattr(args, "check_every", None),
        exploitability_threshold=getattr(args, "threshold", None),
        log_every=args.log_every,
        log_level=args.log_level,
    )


def _train(config: SolverConfig) -> CfrResult:
    game = make_game(config.game, **config.game_options)
    return solve(
        game,
        n_iterations=config.iterations,
        chance_sampling=config.chance_sampling,
        seed=config.seed,
        convergence_check_every=config.convergence_check_every,
        exploitability_threshold=config.exploitability_threshold,
        log_every=config.log_every,
    )


# ─── Subcommands ──────────────────────────────────────────────────────────────


def cmd_train(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    configure_logging(config.log_level)
    game = make_game(config.game, **config.game_options)
    result = _train(config)

    print_game_value(game, result)
    print_strategy_table(game, result, max_rows=args.max_rows)

    if args.heatmap:
        import matplotlib

        matplotlib.use("Agg")
        from cfr_solver.analysis.heat_maps import plot_strategy_heatmaps

        plot_strategy_heatmaps(
            game,
            result,
            max_history_len=args.max_history_len,
            show=False,
            save_path=args.heatmap,
        )
        logger.info("Saved heat map to %s", args.heatmap)
    if args.lookup_html:
        from cfr_solver.analysis.plotly_lookup import build_strategy_lookup_figure, save_lookup_html

        fig = build_strategy_lookup_figure(game, result, max_history_len=args.max_history_len)
        save_lookup_html(fig, args.lookup_html)
        logger.info("Saved lookup figure to %s", args.lookup_html)
    return 0


def cmd_matrix(args: argparse.Namespace) -> int:
    configure_logging(args.log_level or "INFO")
    game = make_matrix_game(args.game, **_parse_options(args.option))
    solver = RegretMatchingSolver(game, sampled=args.sampled, seed=args.seed)
    logger.info("Regret matching on %s for %d iterations", game.name, args.iterations)
    solution = solver.train(args.iterations)
    print_matrix_solution(game, solution, min_prob=args.min_prob)
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    configure_logging(config.log_level)
    game = make_game(config.game, **config.game_options)
    result = _train(config)
    print_game_value(game, result)

    sim = simulate_games(
        game,
        (result.average_strategy, None),
        n_games=args.games,
        seed=config.seed,
        return_payouts=True,
    )
    print(f"Trained player 1 vs uniform random: {sim}")
    print()
    stats = compute_variance_stats(sim.payouts)
    print_variance_report(
        stats,
        compute_horizon_projections(stats.mean, stats.std),
        label=f"{game.name}, trained vs uniform",
    )
    return 0


# ─── Parser ───────────────────────────────────────────────────────────────────


def _add_training_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("game", nargs="?", choices=available_games(), default=None)
    parser.add_argument("--iterations", type=int, default=None)
    parser.add_argument("--chance-sampling", choices=CHANCE_MODES, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--option",
        action="append",
        metavar="KEY=VALUE",
        help="Game constructor option, e.g. deck_size=4 or num_sides=3 (repeatable).",
    )
    parser.add_argument("--config", default=None, help="YAML run configuration.")
    parser.add_argument("--log-every", type=int, default=None)
    parser.add_argument("--log-level", default=None)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cfr-solver",
        description="Counterfactual regret minimization for small imperfect-information games.",
    )
    sp = p.add_subparsers(dest="cmd", required=True)

    # train
    a = sp.add_parser("train", help="Train CFR and print the average strategy.")
    _add_training_arguments(a)
    a.add_argument("--check-every", type=int, default=None)
    a.add_argument("--threshold", type=float, default=None)
    a.add_argument("--max-rows", type=int, default=60)
    a.add_argument("--max-history-len", type=int, default=None)
    a.add_argument("--heatmap", default=None, help="Save a strategy heat map PNG here.")
    a.add_argument("--lookup-html", default=None, help="Save an interactive HTML lookup here.")
    a.set_defaults(func=cmd_train)

    # matrix
    a = sp.add_parser("matrix", help="Regret matching on a normal-form game.")
    a.add_argument("game", choices=available_matrix_games())
    a.add_argument("--iterations", type=int, default=10_000)
    a.add_argument("--sampled", action="store_true")
    a.add_argument("--seed", type=int, default=None)
    a.add_argument("--min-prob", type=float, default=0.0)
    a.add_argument(
        "--option",
        action="append",
        metavar="KEY=VALUE",
        help="Game constructor option, e.g. soldiers=3 (repeatable).",
    )
    a.add_argument("--log-level", default=None)
    a.set_defaults(func=cmd_matrix)

    # simulate
    a = sp.add_parser("simulate", help="Train, then play the result against a random opponent.")
    _add_training_arguments(a)
    a.add_argument("--games", type=int, default=20_000)
    a.set_defaults(func=cmd_simulate)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (CfrError, ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
