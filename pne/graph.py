"""LangGraph StateGraph definition for the synchronous part of a round."""

from langgraph.graph import END, StateGraph

from pne.rounds.decoder import decode_node
from pne.rounds.updater import update_node
from pne.state import NegotiationState, RoundState


def route_after_publish(state: RoundState, max_rounds: int | None = None) -> str:
    """Decide what the loop does once a round's values are on the ledger.

    Priority order:
    1. terminate → end
    2. round_index >= max_rounds (when bounded) → timeout
    3. otherwise → await the next peer event
    """
    if state.get("terminate"):
        return "end"
    if max_rounds is not None and state["round_index"] >= max_rounds:
        return "timeout"
    return "await"


# --- Build the graph ---

workflow = StateGraph(RoundState)

workflow.add_node("decode", decode_node)
workflow.add_node("update", update_node)

workflow.set_entry_point("decode")

workflow.add_edge("decode", "update")
workflow.add_edge("update", END)

graph = workflow.compile()


def run_round(state: NegotiationState, payload: str | bytes) -> RoundState:
    """Run decode → update for one peer payload.

    state must already carry the incremented round_index. The input state
    is not modified; DecodeError and InvalidRoundIndex propagate.
    """
    round_input: RoundState = {
        "payload": payload,
        "rate": state["rate"],
        "mismatch": state["mismatch"],
        "decision": state["decision"],
        "round_index": state["round_index"],
    }
    return graph.invoke(round_input)


# --- Step-execution helpers for manual stepping ---

_NODE_FNS = {
    "decode": decode_node,
    "update": update_node,
}


def run_single_step(state: RoundState, node_name: str) -> RoundState:
    """Run a single node and return the updated state."""
    node_fn = _NODE_FNS[node_name]
    updates = node_fn(state)
    return {**state, **updates}
