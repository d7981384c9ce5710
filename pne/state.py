"""Negotiation state — the local record carried across rounds."""

from typing import Literal, TypedDict

Status = Literal["awaiting_event", "terminated", "cancelled", "max_rounds_reached"]


class NegotiationState(TypedDict):
    rate: float  # Local proposed rate ("Lambda").
    mismatch: float  # Local disagreement with the peer.
    decision: float  # Operating point implied by rate. Always clamped.
    round_index: int  # Observed peer events so far. Starts at 0.
    status: Status


class RoundState(TypedDict, total=False):
    payload: str | bytes  # Raw peer event payload for this round.
    rate: float
    mismatch: float
    decision: float
    round_index: int
    peer_rate: float  # Peer observation, discarded after the round.
    peer_mismatch: float
    terminate: bool


class RoundRecord(TypedDict):
    round_index: int
    rate: float
    mismatch: float
    decision: float
    terminate: bool


def initial_state(config: dict) -> NegotiationState:
    """Build the state a negotiation starts from."""
    return {
        "rate": float(config.get("initial_rate", 0.0)),
        "mismatch": float(config.get("initial_mismatch", 1.5)),
        "decision": float(config.get("initial_decision", 0.0)),
        "round_index": 0,
        "status": "awaiting_event",
    }
