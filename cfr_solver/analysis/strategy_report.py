"""Strategy report for CFR and regret-matching solutions.

Public functions format solver results into human-readable tables:

    print_game_value(game, result)            — EV, exploitability, convergence
    print_strategy_table(game, result, ...)   — average strategy per infoset
    print_matrix_solution(game, solution)     — RPS / Blotto mixed strategies
"""

from __future__ import annotations

from cfr_solver.games.base import GameDefinition
from cfr_solver.games.matrix_games import MatrixGame
from cfr_solver.solvers.cfr import CfrResult
from cfr_solver.solvers.regret_matching import MatrixSolution

# ─── Public report functions ──────────────────────────────────────────────────


def print_game_value(game: GameDefinition, result: CfrResult) -> None:
    """Print the equilibrium value summary and compare to the game's known value.

    Args:
        game:   The solved GameDefinition; its known_game_value, if any, is shown.
        result: CfrResult returned by cfr.solve().
    """
    print("=" * 56)
    print(f"Nash Equilibrium Value Summary ({result.game_name})")
    print("=" * 56)
    print(f"  Expected value (P1):  {result.expected_value:+.5f}")
    print(f"  Training average:     {result.average_game_value:+.5f}")
    print(f"  Exploitability:       {result.exploitability:.5f}")
    print(f"  Iterations:           {result.n_iterations:,}")
    print(f"  Information sets:     {len(result.average_strategy):,}")
    print(f"  Converged:            {'yes' if result.converged else 'no'}")

    known = game.known_game_value
    if known is not None:
        print()
        print(f"  Known equilibrium value: {known:+.5f}")
        print(f"  Difference:              {result.expected_value - known:+.5f}")
    print()


def print_strategy_table(
    game: GameDefinition,
    result: CfrResult,
    player: int | None = None,
    max_rows: int | None = None,
) -> None:
    """Print the average strategy at every infoset, one row per infoset.

    Rows are ordered by (player, private info, history). Each row lists every
    legal action with its probability.

    Args:
        game:     The game the result was computed for.
        result:   CfrResult returned by cfr.solve().
        player:   Only print this player's infosets (0 or 1); None for both.
        max_rows: Truncate each player's table after this many rows.
    """
    players = (0, 1) if player is None else (player,)
    for p in players:
        rows = [(key, probs) for key, probs in result.average_strategy.items() if key.player == p]
        print("=" * 56)
        print(f"Player {p + 1} Average Strategy ({result.game_name})")
        print("=" * 56)
        print(f"  {'Private':>7}  {'History':<14}  Strategy")
        print(f"  {'-------':>7}  {'-' * 14}  {'-' * 28}")
        if not rows:
            print("  (no information sets visited)")
        shown = rows if max_rows is None else rows[:max_rows]
        for key, probs in shown:
            cells = " | ".join(
                f"{game.action_label(action)} {prob * 100:6.2f}%" for action, prob in probs.items()
            )
            print(
                f"  {game.private_label(key.private):>7}  "
                f"{game.history_label(key.history):<14}  {cells}"
            )
        if len(shown) < len(rows):
            print(f"  ... {len(rows) - len(shown):,} more information sets")
        print()


def print_matrix_solution(
    game: MatrixGame,
    solution: MatrixSolution,
    min_prob: float = 0.0,
) -> None:
    """Print both players' average mixed strategies for a normal-form game.

    Args:
        game:     The solved MatrixGame.
        solution: MatrixSolution from RegretMatchingSolver.train().
        min_prob: Hide actions whose probability is below this for both players.
    """
    row, col = solution.average_strategies
    print("=" * 56)
    print(f"Regret Matching Solution ({solution.game_name})")
    print("=" * 56)
    print(f"  Iterations:      {solution.n_iterations:,}")
    print(f"  Game value (P1): {solution.game_value:+.5f}")
    print(f"  Exploitability:  {solution.exploitability:.5f}")
    print()
    print(f"  {'Action':<10}  {'P1':>8}  {'P2':>8}")
    print(f"  {'-' * 10}  {'-' * 8}  {'-' * 8}")
    for label, p_row, p_col in zip(game.actions, row, col):
        if p_row < min_prob and p_col < min_prob:
            continue
        print(f"  {label:<10}  {p_row:>8.4f}  {p_col:>8.4f}")
    print()


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from cfr_solver.games.kuhn import KuhnPoker
    from cfr_solver.solvers.cfr import solve

    n_iter = int(sys.argv[1]) if len(sys.argv) > 1 else 50_000
    kuhn = KuhnPoker()
    print(f"Running CFR on Kuhn poker for {n_iter:,} iterations …\n")
    kuhn_result = solve(kuhn, n_iterations=n_iter)
    print_game_value(kuhn, kuhn_result)
    print_strategy_table(kuhn, kuhn_result)
