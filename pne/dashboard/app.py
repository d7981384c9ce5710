"""Negotiation Dashboard — Streamlit UI for running and inspecting simulated negotiations."""

import sys
from pathlib import Path

# Add project root to path so 'pne' package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

import asyncio

import streamlit as st

from pne.config import get_config
from pne.state import RoundRecord
from pne.simulation import run_simulation
from pne.utils.formatter import _render_round_table

st.set_page_config(page_title="Peer Negotiation Dashboard", layout="wide")
st.title("Peer Negotiation Dashboard")
st.markdown(
    "Runs two peers against an in-memory ledger. Each peer folds the other's "
    "**rate** and **mismatch** into its own state every round, until both the "
    "mismatch and the rate movement fall under tolerance."
)

st.divider()

config = get_config()

col_a, col_b, col_c = st.columns(3)
with col_a:
    st.subheader("Org1 (initiator)")
    rate_a = st.number_input("Initial rate", value=float(config["initial_rate"]), key="rate_a")
    mismatch_a = st.number_input("Initial mismatch", value=float(config["initial_mismatch"]), key="mismatch_a")
with col_b:
    st.subheader("Org2 (responder)")
    rate_b = st.number_input("Initial rate", value=float(config["initial_rate"]), key="rate_b")
    mismatch_b = st.number_input("Initial mismatch", value=float(config["initial_mismatch"]), key="mismatch_b")
with col_c:
    st.subheader("Run")
    max_rounds = st.slider(
        "Round ceiling", min_value=10, max_value=1000,
        value=int(config.get("simulation_max_rounds", 200)),
    )


def _chart_rows(history: list[RoundRecord]) -> dict[str, list[float]]:
    """Reshape round records into columns for st.line_chart."""
    return {
        "rate": [r["rate"] for r in history],
        "mismatch": [r["mismatch"] for r in history],
        "decision": [r["decision"] for r in history],
    }


if st.button("Run negotiation", type="primary"):
    with st.spinner("Negotiating..."):
        results = asyncio.run(run_simulation(
            max_rounds=max_rounds,
            initial_a={"initial_rate": rate_a, "initial_mismatch": mismatch_a},
            initial_b={"initial_rate": rate_b, "initial_mismatch": mismatch_b},
        ))
    st.session_state["results"] = results

results = st.session_state.get("results")
if results:
    for party, (state, history) in results.items():
        st.subheader(party)
        if state["status"] == "terminated":
            st.success(f"Converged after {state['round_index']} round(s).")
        elif state["status"] == "max_rounds_reached":
            st.warning(f"Round ceiling reached ({state['round_index']}) without convergence.")
        else:
            st.info(f"Stopped with status: {state['status']} after {state['round_index']} round(s).")

        m1, m2, m3 = st.columns(3)
        m1.metric("Rate", f"{state['rate']:.4f}")
        m2.metric("Mismatch", f"{state['mismatch']:.4f}")
        m3.metric("Decision", f"{state['decision']:.4f}")

        if history:
            st.line_chart(_chart_rows(history))
            with st.expander("Round log"):
                st.markdown(_render_round_table(history))
