"""Strategy heat maps for CFR solutions.

One public data-builder function returns a NumPy matrix that can be used
programmatically or passed to the plot helpers:

    build_strategy_heatmap_data(game, result, player, action)
        — P(action) per (private info, history) for one player

Two public plot functions render matplotlib figures:

    plot_strategy_heatmaps(game, result, action, ...)  — 1×2 figure (P1 + P2)
    plot_convergence(result, ...)                      — exploitability curve

Matrix convention:
    Rows   : the player's private information (card, die face), ascending
    Cols   : the player's decision histories, shortest first
    Values : P(action) in [0, 1]; np.nan where the infoset was never visited
             or the action is not legal there
"""

from __future__ import annotations

import matplotlib
import matplotlib.axes
import matplotlib.colors
import matplotlib.figure
import matplotlib.image
import matplotlib.pyplot as plt
import numpy as np

from cfr_solver.games.base import Action, GameDefinition
from cfr_solver.solvers.best_response import StrategyProfile
from cfr_solver.solvers.cfr import CfrResult

# ─── Constants ────────────────────────────────────────────────────────────────

_NAN_COLOR: str = "#cccccc"
# Cell annotations are skipped above this many cells.
_MAX_ANNOTATED_CELLS: int = 120


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_continuous_cmap() -> matplotlib.colors.Colormap:
    """RdYlGn gradient: red=P=0, green=P=1, grey=absent (NaN)."""
    cmap = matplotlib.colormaps["RdYlGn"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_CONTINUOUS_CMAP: matplotlib.colors.Colormap = _make_continuous_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def heatmap_action(game: GameDefinition) -> Action:
    """Default action to plot: the last legal reply to the first opening move.

    That is BET for Kuhn poker and DUDO for Dudo.
    """
    opening = game.legal_actions(())[0]
    return game.legal_actions((opening,))[-1]


def player_strategy_grid(
    result: CfrResult,
    player: int,
    max_history_len: int | None = None,
) -> tuple[StrategyProfile, list, list]:
    """Return (entries, privates, histories) for one player's heat-map grid.

    *entries* is the player's slice of the average strategy; *privates* and
    *histories* are the sorted row and column values.
    """
    entries = {
        key: probs
        for key, probs in result.average_strategy.items()
        if key.player == player
        and (max_history_len is None or len(key.history) <= max_history_len)
    }
    privates = sorted({key.private for key in entries})
    histories = sorted({key.history for key in entries}, key=lambda h: (len(h), h))
    return entries, privates, histories


def build_strategy_heatmap_data(
    game: GameDefinition,
    result: CfrResult,
    player: int,
    action: Action,
    max_history_len: int | None = None,
) -> tuple[np.ndarray, list[str], list[str]]:
    """Return (matrix, row_labels, col_labels) of P(action) for one player.

    Args:
        game:            The game the result was computed for.
        result:          CfrResult returned by cfr.solve().
        player:          0 for player 1, 1 for player 2.
        action:          Action whose probability fills the cells.
        max_history_len: Drop histories longer than this (useful for Dudo).

    Returns:
        (matrix, row_labels, col_labels); matrix has dtype float64 and shape
        (len(row_labels), len(col_labels)).

    Raises:
        ValueError: If player is not 0 or 1.
    """
    if player not in (0, 1):
        raise ValueError(f"player must be 0 or 1, got {player}")

    entries, privates, histories = player_strategy_grid(result, player, max_history_len)

    matrix = np.full((len(privates), len(histories)), np.nan)
    for key, probs in entries.items():
        if action not in probs:
            continue
        r = privates.index(key.private)
        c = histories.index(key.history)
        matrix[r, c] = probs[action]

    row_labels = [game.private_label(p) for p in privates]
    col_labels = [game.history_label(h) for h in histories]
    return matrix, row_labels, col_labels


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    row_labels: list[str],
    col_labels: list[str],
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage.

    Sets axis ticks, tick labels, and cell annotations. The caller is
    responsible for setting title, xlabel, and ylabel.
    """
    masked = np.ma.masked_invalid(data)
    im = ax.imshow(masked, cmap=_CONTINUOUS_CMAP, vmin=0.0, vmax=1.0, aspect="auto")

    ax.set_xticks(range(len(col_labels)))
    ax.set_xticklabels(col_labels, fontsize=8, rotation=45 if len(col_labels) > 6 else 0)
    ax.set_yticks(range(len(row_labels)))
    ax.set_yticklabels(row_labels, fontsize=9)

    if data.size > _MAX_ANNOTATED_CELLS:
        return im
    for r in range(data.shape[0]):
        for c in range(data.shape[1]):
            val = data[r, c]
            if np.isnan(val):
                continue
            ax.text(
                c,
                r,
                f"{val:.2f}",
                ha="center",
                va="center",
                fontsize=9,
                color="black" if 0.25 < val < 0.75 else "white",
                fontweight="bold",
            )

    return im


def _finish(fig: matplotlib.figure.Figure, show: bool, save_path: str | None) -> None:
    plt.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_strategy_heatmaps(
    game: GameDefinition,
    result: CfrResult,
    action: Action | None = None,
    *,
    max_history_len: int | None = None,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot both players' P(action) heat maps as a 1×2 figure.

    Args:
        game:            The game the result was computed for.
        result:          CfrResult from cfr.solve().
        action:          Action to plot; defaults to heatmap_action(game).
        max_history_len: Drop histories longer than this.
        show:            If True, call plt.show() after rendering.
        save_path:       If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    if action is None:
        action = heatmap_action(game)
    label = f"P({game.action_label(action)})"

    fig, axes = plt.subplots(1, 2, figsize=(11, 5))
    fig.suptitle(
        f"CFR Average Strategy  ({result.game_name}, {label})",
        fontsize=13,
        fontweight="bold",
    )

    for player, ax in enumerate(axes):
        data, rows, cols = build_strategy_heatmap_data(
            game, result, player, action, max_history_len=max_history_len
        )
        im = _render_panel(ax, data, rows, cols)
        ax.set_title(f"Player {player + 1}", fontsize=10)
        ax.set_xlabel("History", fontsize=9)
        ax.set_ylabel("Private info", fontsize=9)
        plt.colorbar(im, ax=ax, label=label, fraction=0.046, pad=0.04)

    _finish(fig, show, save_path)
    return fig


def plot_convergence(
    result: CfrResult,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot exploitability against iterations on a log scale.

    Args:
        result:    CfrResult from cfr.solve() run with convergence_check_every.
        show:      If True, call plt.show().
        save_path: If not None, save to path.

    Returns:
        matplotlib.figure.Figure.

    Raises:
        ValueError: If the result carries no exploitability history.
    """
    if not result.exploitability_history:
        raise ValueError("Result has no exploitability history; pass convergence_check_every to solve()")

    iters, values = zip(*result.exploitability_history)
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(iters, values, marker="o", color="#1f77b4")
    if all(v > 0 for v in values):
        ax.set_yscale("log")
    ax.set_title(f"CFR Convergence ({result.game_name})", fontsize=12, fontweight="bold")
    ax.set_xlabel("Iteration", fontsize=9)
    ax.set_ylabel("Exploitability", fontsize=9)
    ax.grid(True, alpha=0.3)

    _finish(fig, show, save_path)
    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from cfr_solver.games.kuhn import KuhnPoker
    from cfr_solver.solvers.cfr import solve

    n_iter = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    kuhn = KuhnPoker()
    print(f"Running CFR for {n_iter} iterations …")
    kuhn_result = solve(kuhn, n_iterations=n_iter, convergence_check_every=max(1, n_iter // 10))

    print("Generating strategy heat maps …")
    plot_strategy_heatmaps(kuhn, kuhn_result, show=False, save_path="kuhn_strategy.png")
    plot_convergence(kuhn_result, show=False, save_path="kuhn_convergence.png")
    print("Saved: kuhn_strategy.png, kuhn_convergence.png")
