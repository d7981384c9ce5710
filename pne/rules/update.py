"""Update rule — next-round state from the local state and one peer observation.

    step         = max(1 / round_index, min_step)
    new_rate     = 0.5 * prior_rate + 0.5 * peer_rate + step * prior_mismatch
    new_decision = clamp(new_rate / 2, low, high)
    new_mismatch = 0.5 * prior_mismatch + 0.5 * peer_mismatch
                   + prior_decision - new_decision

The mismatch term uses the prior decision and the new one, so it measures
how far the averaging and clamping moved the operating point.
"""

from typing import NamedTuple

from pne.errors import InvalidRoundIndex
from pne.rules.convergence import DEFAULT_TOLERANCE, is_converged

DEFAULT_MIN_STEP = 0.05
DEFAULT_DECISION_BOUNDS = (0.0, 8.0)


class UpdateResult(NamedTuple):
    rate: float
    mismatch: float
    decision: float
    terminate: bool


def step_size(round_index: int, min_step: float = DEFAULT_MIN_STEP) -> float:
    """Diminishing step weight, floored at min_step.

    Raises InvalidRoundIndex for anything but a positive integer.
    """
    if isinstance(round_index, bool) or not isinstance(round_index, int):
        raise InvalidRoundIndex(f"Round index must be an int, got {round_index!r}.")
    if round_index < 1:
        raise InvalidRoundIndex(f"Round index must be >= 1, got {round_index}.")
    return max(1 / round_index, min_step)


def clamp(value: float, low: float = 0.0, high: float = 8.0) -> float:
    """Bound value to [low, high]."""
    if value > high:
        return high
    if value < low:
        return low
    return value


def apply_update(
    prior_rate: float,
    prior_mismatch: float,
    prior_decision: float,
    peer_rate: float,
    peer_mismatch: float,
    round_index: int,
    *,
    min_step: float = DEFAULT_MIN_STEP,
    decision_bounds: tuple[float, float] = DEFAULT_DECISION_BOUNDS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> UpdateResult:
    """Compute one round's update and whether the negotiation has converged."""
    step = step_size(round_index, min_step)

    new_rate = 0.5 * prior_rate + 0.5 * peer_rate + step * prior_mismatch
    low, high = decision_bounds
    new_decision = clamp(new_rate / 2, low, high)
    new_mismatch = 0.5 * prior_mismatch + 0.5 * peer_mismatch + prior_decision - new_decision

    terminate = is_converged(new_mismatch, new_rate, prior_rate, tolerance)

    return UpdateResult(new_rate, new_mismatch, new_decision, terminate)
