"""Error taxonomy for the negotiation engine.

DecodeError is recoverable at the round boundary. Everything else
propagates to whoever called RoundLoop.run().
"""


class NegotiationError(Exception):
    """Base class for every error raised by the engine."""


class DecodeError(NegotiationError, ValueError):
    """A peer payload is empty, lacks a marker, or carries a malformed number."""


class InvalidRoundIndex(NegotiationError, ValueError):
    """The update rule was called with a round index below 1."""


class ConfigError(NegotiationError, ValueError):
    """Ledger settings are missing or malformed."""


class LedgerUnavailable(NegotiationError):
    """The ledger could not be reached. Transient, worth retrying."""


class EventStreamClosed(NegotiationError):
    """The event subscription ended before the negotiation converged."""


class PublishError(NegotiationError):
    """Submitting the round's (rate, mismatch) pair failed for good."""

    def __init__(self, message: str, function_name: str, args: tuple[str, ...], attempts: int):
        super().__init__(message)
        self.function_name = function_name
        self.args_sent = args
        self.attempts = attempts
