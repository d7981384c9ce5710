"""Termination policy — deterministic convergence check on an update's output.

Returns a list of unmet conditions. If empty, both parties have settled
and the negotiation can stop after this round's publish.
"""

DEFAULT_TOLERANCE = 0.05


def convergence_gaps(
    new_mismatch: float,
    new_rate: float,
    prior_rate: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[str]:
    """List the termination conditions the update does not yet meet.

    Both the mismatch and the rate movement must be under tolerance. A
    momentarily small mismatch while the rate is still moving is not
    convergence.
    """
    gaps = []

    if not abs(new_mismatch) < tolerance:
        gaps.append(f"|mismatch| = {abs(new_mismatch):.6g} is not below {tolerance}.")

    rate_delta = abs(new_rate - prior_rate)
    if not rate_delta < tolerance:
        gaps.append(f"|rate change| = {rate_delta:.6g} is not below {tolerance}.")

    return gaps


def is_converged(
    new_mismatch: float,
    new_rate: float,
    prior_rate: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> bool:
    return not convergence_gaps(new_mismatch, new_rate, prior_rate, tolerance)
