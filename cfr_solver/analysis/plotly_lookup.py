"""Interactive Plotly strategy lookup tool for CFR and regret-matching results.

Three public functions:

    build_strategy_lookup_figure(game, result, action)
        — Interactive player 1 / player 2 heatmaps of P(action).
    build_matrix_strategy_figure(game, solution)
        — Grouped bar chart of both players' mixed strategies.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

All figures are interactive Plotly figures: hover over any heatmap cell to
see the full average strategy at that information set. Figures open in a
browser via ``fig.show()`` or embed in Jupyter notebooks.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from cfr_solver.analysis.heat_maps import (
    build_strategy_heatmap_data,
    heatmap_action,
    player_strategy_grid,
)
from cfr_solver.games.base import Action, GameDefinition
from cfr_solver.games.matrix_games import MatrixGame
from cfr_solver.solvers.cfr import CfrResult
from cfr_solver.solvers.regret_matching import MatrixSolution

# ─── Constants ────────────────────────────────────────────────────────────────

_CFR_COLORSCALE: str = "RdYlGn"
_PLAYER_COLORS: tuple[str, str] = ("#1f77b4", "#ff7f0e")


# ─── Hover text builder ───────────────────────────────────────────────────────


def _build_hover(
    game: GameDefinition,
    result: CfrResult,
    player: int,
    max_history_len: int | None,
) -> list[list[str]]:
    """Return a rows×cols list of hover strings for one player's panel.

    Each visited cell shows the private info, history and every action's
    probability. Unvisited cells get an empty string.
    """
    entries, privates, histories = player_strategy_grid(result, player, max_history_len)
    rows: list[list[str]] = [["" for _ in histories] for _ in privates]
    for key, probs in entries.items():
        lines = [
            f"Private: <b>{game.private_label(key.private)}</b>",
            f"History: {game.history_label(key.history)}",
        ]
        lines += [f"{game.action_label(a)}: {p:.3f}" for a, p in probs.items()]
        rows[privates.index(key.private)][histories.index(key.history)] = "<br>".join(lines)
    return rows


# ─── Trace builder ─────────────────────────────────────────────────────────────


def _make_heatmap_trace(
    data: np.ndarray,
    hover_text: list[list[str]],
    row_labels: list[str],
    col_labels: list[str],
    *,
    name: str,
    showscale: bool = True,
    colorbar_title: str = "",
) -> go.Heatmap:
    """Build one go.Heatmap trace for a strategy panel.

    NaN values in *data* are converted to None so Plotly renders them as
    blank (transparent) cells.
    """
    z = [[None if np.isnan(v) else v for v in row] for row in data.tolist()]
    return go.Heatmap(
        z=z,
        x=col_labels,
        y=row_labels,
        colorscale=_CFR_COLORSCALE,
        zmin=0.0,
        zmax=1.0,
        text=hover_text,
        hovertemplate="%{text}<extra></extra>",
        showscale=showscale,
        colorbar={"title": colorbar_title, "x": 1.02},
        name=name,
    )


# ─── Public figure builders ───────────────────────────────────────────────────


def build_strategy_lookup_figure(
    game: GameDefinition,
    result: CfrResult,
    action: Action | None = None,
    *,
    max_history_len: int | None = None,
) -> go.Figure:
    """Build an interactive Plotly figure of P(action) for both players.

    Args:
        game:            The game the result was computed for.
        result:          CfrResult returned by cfr.solve().
        action:          Action to colour by; defaults to heatmap_action(game).
        max_history_len: Drop histories longer than this.

    Returns:
        go.Figure with two heatmap traces (player 1, player 2) in a 1×2 layout.
    """
    if action is None:
        action = heatmap_action(game)
    label = f"P({game.action_label(action)})"

    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Player 1", "Player 2"],
        horizontal_spacing=0.12,
    )
    for player in (0, 1):
        data, rows, cols = build_strategy_heatmap_data(
            game, result, player, action, max_history_len=max_history_len
        )
        fig.add_trace(
            _make_heatmap_trace(
                data,
                _build_hover(game, result, player, max_history_len),
                rows,
                cols,
                name=f"Player {player + 1}",
                showscale=player == 0,
                colorbar_title=label if player == 0 else "",
            ),
            row=1,
            col=player + 1,
        )

    fig.update_layout(
        title_text=f"CFR Strategy Lookup ({result.game_name}) · {label}",
        title_font_size=15,
        height=440,
        width=860,
    )
    fig.update_yaxes(title_text="Private info", col=1)
    fig.update_xaxes(title_text="History")
    return fig


def build_matrix_strategy_figure(game: MatrixGame, solution: MatrixSolution) -> go.Figure:
    """Grouped bar chart of both players' average strategies.

    Args:
        game:     The solved MatrixGame.
        solution: MatrixSolution from RegretMatchingSolver.train().

    Returns:
        go.Figure with one bar trace per player.
    """
    fig = go.Figure()
    for player, strategy in enumerate(solution.average_strategies):
        fig.add_trace(
            go.Bar(
                x=list(game.actions),
                y=strategy.tolist(),
                name=f"Player {player + 1}",
                marker_color=_PLAYER_COLORS[player],
                hovertemplate="%{x}: %{y:.4f}<extra></extra>",
            )
        )
    fig.update_layout(
        barmode="group",
        title_text=(
            f"Regret Matching Strategies ({solution.game_name}) · "
            f"value {solution.game_value:+.4f}"
        ),
        title_font_size=15,
        height=420,
        xaxis_title="Action",
        yaxis_title="Probability",
        yaxis_range=[0.0, 1.0],
    )
    return fig


# ─── HTML export ───────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.

    Args:
        fig:  Any go.Figure produced by this module.
        path: Destination file path (e.g. ``"kuhn_lookup.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from cfr_solver.games.kuhn import KuhnPoker
    from cfr_solver.solvers.cfr import solve

    n_iter = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    kuhn = KuhnPoker()
    print(f"Running CFR for {n_iter} iterations …")
    kuhn_result = solve(kuhn, n_iterations=n_iter)

    print("Building interactive lookup figure …")
    save_lookup_html(build_strategy_lookup_figure(kuhn, kuhn_result), "kuhn_lookup.html")
    print("Saved: kuhn_lookup.html")
