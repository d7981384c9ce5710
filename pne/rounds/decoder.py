"""Decode node — turns the round's raw peer payload into a peer observation."""

from pne.state import RoundState
from pne.utils.codec import decode_payload


def decode_node(state: RoundState) -> dict:
    """Decode node for the round StateGraph.

    Reads payload from state and returns peer_rate + peer_mismatch.
    DecodeError propagates so the loop can abandon the round.
    """
    peer_rate, peer_mismatch = decode_payload(state["payload"])
    return {"peer_rate": peer_rate, "peer_mismatch": peer_mismatch}
