"""CFR Solver — Streamlit Dashboard.

Four-tab interactive dashboard for exploring CFR results on Kuhn poker and Dudo:
  Tab 1 — Strategy Heat Maps       (matplotlib, P(action) per infoset)
  Tab 2 — Interactive Lookup       (Plotly, hover for the full strategy)
  Tab 3 — Match Simulation         (trained bot vs random, variance, stack matches)
  Tab 4 — Strategy Report          (value summary and strategy tables)
followed by a Matrix Games section (regret matching on RPS and Colonel Blotto).

Run:
    streamlit run app.py
"""

from __future__ import annotations

import contextlib
import io

import matplotlib

matplotlib.use("Agg")  # must be set before any other matplotlib imports

import pandas as pd
import streamlit as st

from cfr_solver.analysis.bankroll import (
    compute_horizon_projections,
    compute_variance_stats,
    risk_of_ruin,
    simulate_stack_matches,
)
from cfr_solver.analysis.heat_maps import heatmap_action, plot_convergence, plot_strategy_heatmaps
from cfr_solver.analysis.plotly_lookup import (
    build_matrix_strategy_figure,
    build_strategy_lookup_figure,
)
from cfr_solver.analysis.simulator import simulate_games
from cfr_solver.analysis.strategy_report import (
    print_game_value,
    print_matrix_solution,
    print_strategy_table,
)
from cfr_solver.games.factory import available_matrix_games, make_game, make_matrix_game
from cfr_solver.solvers.cfr import CHANCE_MODES, solve
from cfr_solver.solvers.regret_matching import RegretMatchingSolver

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="CFR Solver",
    page_icon="🎲",
    layout="wide",
)

# Dudo histories longer than this are left out of the heat maps.
_DUDO_MAX_HISTORY_LEN: int = 2


def _game_options(game_name: str, num_sides: int) -> dict:
    return {"num_sides": num_sides} if game_name == "dudo" else {}


@st.cache_resource
def _run_cfr(game_name: str, num_sides: int, n_iterations: int, chance_sampling: str):
    """Run CFR and cache the result (keyed on every argument)."""
    game = make_game(game_name, **_game_options(game_name, num_sides))
    return solve(
        game,
        n_iterations=n_iterations,
        chance_sampling=chance_sampling,
        seed=0,
        convergence_check_every=max(1, n_iterations // 10),
    )


@st.cache_resource
def _run_regret_matching(game_name: str, n_iterations: int, sampled: bool):
    game = make_matrix_game(game_name)
    return RegretMatchingSolver(game, sampled=sampled, seed=0).train(n_iterations)


def _captured(fn, *args, **kwargs) -> str:
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        fn(*args, **kwargs)
    return buf.getvalue()


# ─── Sidebar controls ─────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🎲 CFR Solver")
    st.markdown("---")

    game_name = st.selectbox("Game", options=["kuhn", "dudo"], index=0)
    num_sides = 3
    if game_name == "dudo":
        num_sides = st.slider("Die sides", min_value=2, max_value=6, value=3)

    n_cfr_iterations = st.slider(
        "CFR iterations",
        min_value=1_000,
        max_value=100_000,
        value=20_000,
        step=1_000,
    )
    chance_sampling = st.selectbox("Chance sampling", options=list(CHANCE_MODES), index=0)

    run_cfr = st.button("Run CFR Solver", type="primary")

    st.markdown("---")
    n_sim_games = st.slider(
        "Simulated games (simulation tab)",
        min_value=2_000,
        max_value=100_000,
        value=20_000,
        step=2_000,
    )

    st.markdown("---")
    st.caption("Vanilla CFR · Kuhn poker · Dudo · Regret matching")

# ─── CFR solver result ────────────────────────────────────────────────────────

game = make_game(game_name, **_game_options(game_name, num_sides))
max_history_len = _DUDO_MAX_HISTORY_LEN if game_name == "dudo" else None

# Trigger CFR solve if the button was pressed or a cached result exists.
cfr_result = None
if run_cfr or "cfr_result_cached" in st.session_state:
    with st.spinner(f"Running CFR on {game_name} ({n_cfr_iterations:,} iterations) …"):
        cfr_result = _run_cfr(game_name, num_sides, n_cfr_iterations, chance_sampling)
    st.session_state["cfr_result_cached"] = True
    st.sidebar.success(
        f"CFR done: EV {cfr_result.expected_value:+.4f} | "
        f"Exploitability: {cfr_result.exploitability:.4f}"
    )

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3, tab4 = st.tabs(
    [
        "Strategy Heat Maps",
        "Interactive Plotly Lookup",
        "Match Simulation",
        "Strategy Report",
    ]
)

# ── Tab 1: Strategy Heat Maps ─────────────────────────────────────────────────

with tab1:
    st.header("Strategy Heat Maps")
    st.caption(
        f"Rows = private info | Cols = decision history | "
        f"Colour = P({game.action_label(heatmap_action(game))}), grey = not visited"
    )

    if cfr_result is not None:
        st.pyplot(
            plot_strategy_heatmaps(game, cfr_result, max_history_len=max_history_len, show=False)
        )
        st.markdown("---")
        st.subheader("Convergence")
        st.pyplot(plot_convergence(cfr_result, show=False))
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the strategy heat maps.")

# ── Tab 2: Interactive Plotly Lookup ─────────────────────────────────────────

with tab2:
    st.header("Interactive Plotly Strategy Lookup")
    st.caption("Hover over any cell to see the full average strategy at that information set.")

    if cfr_result is not None:
        fig_lookup = build_strategy_lookup_figure(game, cfr_result, max_history_len=max_history_len)
        st.plotly_chart(fig_lookup, use_container_width=True)
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the lookup figure.")

# ── Tab 3: Match Simulation ───────────────────────────────────────────────────

with tab3:
    st.header("Match Simulation")
    st.caption(
        "Player 1 plays the trained average strategy against a uniform-random player 2. "
        "Risk of ruin and horizon projections computed via CLT."
    )

    if cfr_result is not None:
        profiles = (cfr_result.average_strategy, None)
        with st.spinner(f"Simulating {n_sim_games:,} games …"):
            sim = simulate_games(game, profiles, n_games=n_sim_games, seed=42, return_payouts=True)
            match = simulate_stack_matches(game, profiles, starting_stack=10, n_matches=200, seed=42)

        vs = compute_variance_stats(sim.payouts)

        st.subheader("Distribution Statistics")
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Mean EV / game", f"{vs.mean:+.4f}")
        col2.metric("Std dev", f"{vs.std:.4f}")
        col3.metric("Win rate", f"{sim.win_rate:.1%}")
        col4.metric("Skewness", f"{vs.skewness:.3f}")

        pct_df = pd.DataFrame(
            {"Percentile": list(vs.percentiles.keys()), "Value": list(vs.percentiles.values())}
        )
        st.dataframe(pct_df, use_container_width=True, hide_index=True)

        st.markdown("---")
        st.subheader("Risk of Ruin")
        ror_rows = []
        for br in [10, 20, 50, 100]:
            ror = risk_of_ruin(br, vs.mean, vs.std)
            ror_rows.append({"Bankroll (chips)": br, "P(ruin)": f"{ror:.4f}"})
        st.dataframe(pd.DataFrame(ror_rows), use_container_width=True, hide_index=True)

        st.markdown("---")
        st.subheader("Horizon Projections (CLT)")
        proj_rows = [
            {
                "Games": p.n_games,
                "Expected Profit": f"{p.expected_profit:+.2f}",
                "CI Low": f"{p.ci_low:+.2f}",
                "CI High": f"{p.ci_high:+.2f}",
                "P(profit > 0)": f"{p.prob_positive:.3f}",
            }
            for p in compute_horizon_projections(vs.mean, vs.std)
        ]
        st.dataframe(pd.DataFrame(proj_rows), use_container_width=True, hide_index=True)

        st.markdown("---")
        st.subheader("Stack Matches (10 chips each)")
        col1, col2, col3 = st.columns(3)
        col1.metric("Player 1 wins", f"{match.p1_wins} / {match.n_matches}")
        col2.metric("Player 2 wins", f"{match.p2_wins}")
        col3.metric("Mean hands", f"{match.mean_hands:.1f}")
    else:
        st.info("Press **Run CFR Solver** in the sidebar to simulate the trained strategy.")

# ── Tab 4: Strategy Report ────────────────────────────────────────────────────

with tab4:
    st.header("Strategy Report")

    if cfr_result is not None:
        st.subheader("Value Summary")
        st.code(_captured(print_game_value, game, cfr_result), language=None)
        st.subheader("Average Strategy")
        st.code(_captured(print_strategy_table, game, cfr_result, max_rows=80), language=None)
    else:
        st.info("Press **Run CFR Solver** in the sidebar to see the strategy report.")

# ─── Matrix games ─────────────────────────────────────────────────────────────

st.markdown("---")
st.header("Matrix Games")
st.caption("Self-play regret matching on normal-form games.")

col1, col2, col3 = st.columns(3)
matrix_names = available_matrix_games()
matrix_name = col1.selectbox("Matrix game", options=matrix_names, index=matrix_names.index("rps"))
n_rm_iterations = col2.slider("Iterations", min_value=1_000, max_value=50_000, value=5_000, step=1_000)
sampled = col3.checkbox("Sampled regrets", value=False)

matrix_game = make_matrix_game(matrix_name)
solution = _run_regret_matching(matrix_name, n_rm_iterations, sampled)
st.plotly_chart(build_matrix_strategy_figure(matrix_game, solution), use_container_width=True)
st.code(_captured(print_matrix_solution, matrix_game, solution, min_prob=1e-3), language=None)
