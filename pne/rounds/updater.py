"""Update node — folds the peer observation into the local state."""

from pne.config import get_config
from pne.rules.update import apply_update
from pne.state import RoundState


def update_node(state: RoundState) -> dict:
    """Update node for the round StateGraph.

    Reads the prior rate/mismatch/decision, the peer observation and the
    round index, applies the update rule with the configured constants,
    and returns the new values plus the terminate flag.
    """
    config = get_config()

    result = apply_update(
        state["rate"],
        state["mismatch"],
        state["decision"],
        state["peer_rate"],
        state["peer_mismatch"],
        state["round_index"],
        min_step=config.get("min_step_size", 0.05),
        decision_bounds=(config.get("decision_min", 0.0), config.get("decision_max", 8.0)),
        tolerance=config.get("tolerance", 0.05),
    )

    return {
        "rate": result.rate,
        "mismatch": result.mismatch,
        "decision": result.decision,
        "terminate": result.terminate,
    }
