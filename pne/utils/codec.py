"""Message codec for peer update events.

Peer chaincode events carry free text of the shape
``...Lambda=<number>, ... Mismatch=<number>, end...``.
"""

import math
import re
from decimal import Decimal

from pne.errors import DecodeError

_RATE_RE = re.compile(r"Lambda=([^,]*),")
# Lookahead so a failed capture does not swallow a later occurrence
_MISMATCH_RE = re.compile(r"(?=Mismatch=(.*?), end)", re.DOTALL)
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")


def _parse_number(text: str, field: str) -> float:
    if not _NUMBER_RE.fullmatch(text):
        raise DecodeError(f"{field} value {text!r} is not a decimal number.")
    value = float(text)
    if not math.isfinite(value):
        raise DecodeError(f"{field} value {text!r} is out of range.")
    return value


def _first_number(pattern: re.Pattern, payload: str, field: str, missing: str) -> float:
    """Return the first occurrence of field whose value parses.

    Occurrences with unparseable values are skipped; if every one fails,
    the last failure is raised.
    """
    error = None
    for match in pattern.finditer(payload):
        try:
            return _parse_number(match.group(1), field)
        except DecodeError as exc:
            error = exc
    if error is None:
        raise DecodeError(missing)
    raise error


def decode_payload(payload: str | bytes) -> tuple[float, float]:
    """Extract the (rate, mismatch) pair from an event payload.

    Raises DecodeError if the payload is empty, either marker is missing,
    or a captured value is not a plain decimal number. Malformed input is
    never reported as 0.0.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Payload is not valid UTF-8: {exc}") from exc

    if not payload:
        raise DecodeError("Payload is empty.")

    rate = _first_number(_RATE_RE, payload, "Lambda", "Payload has no 'Lambda=<number>,' field.")
    mismatch = _first_number(
        _MISMATCH_RE, payload, "Mismatch", "Payload has no 'Mismatch=<number>, end' field."
    )
    return rate, mismatch


def format_value(value: float) -> str:
    """Render a float as positional decimal text that decodes back exactly.

    Uses the shortest round-tripping digits (``repr``) but never an
    exponent, since the decoder only accepts plain decimals.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot publish non-finite value {value!r}.")
    return format(Decimal(repr(value)), "f")


def encode_payload(rate: float, mismatch: float, prefix: str = "") -> str:
    """Build the event text a peer's update transaction emits."""
    return f"{prefix}Lambda={format_value(rate)}, Mismatch={format_value(mismatch)}, end"
