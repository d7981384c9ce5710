"""Process-local ledger for loopback runs, simulations and tests.

Stands in for a chaincode whose update function emits an event carrying
the submitted values, e.g. ``SendUpdate: Lambda=1.5, Mismatch=0.75, end``.
"""

from pne.errors import LedgerUnavailable
from pne.ledger.base import LedgerEvent, Subscription
from pne.utils.codec import decode_payload, encode_payload


class InMemoryLedger:
    """Shared event bus plus a log of every submitted transaction."""

    def __init__(self):
        self._subscriptions: dict[str, list[Subscription]] = {}
        self.transactions: list[tuple[str, str, tuple[str, ...]]] = []

    def client(self, publish_event: str) -> "MemoryLedgerClient":
        """Return a client whose update submissions are emitted as publish_event."""
        return MemoryLedgerClient(self, publish_event)

    def emit(self, event_name: str, payload: str | bytes) -> None:
        """Deliver an event to every open subscription for event_name."""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        event = LedgerEvent(event_name, payload)
        for subscription in self._subscriptions.get(event_name, []):
            subscription.deliver(event)

    def subscribe(self, event_name: str) -> Subscription:
        subscription = Subscription(event_name, on_close=self._unsubscribe)
        self._subscriptions.setdefault(event_name, []).append(subscription)
        return subscription

    def subscriber_count(self, event_name: str) -> int:
        return len(self._subscriptions.get(event_name, []))

    def close_streams(self) -> None:
        """End every open event stream, as a ledger shutting down would."""
        for subscriptions in self._subscriptions.values():
            for subscription in subscriptions:
                subscription.end()

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.event_name, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)


class MemoryLedgerClient:
    """LedgerClient over an InMemoryLedger.

    Set ``fail_next`` to make the next N submissions raise ``failure``
    (LedgerUnavailable by default) before anything is recorded.
    """

    def __init__(self, ledger: InMemoryLedger, publish_event: str):
        self.ledger = ledger
        self.publish_event = publish_event
        self.fail_next = 0
        self.failure: Exception | None = None
        self.submissions: list[tuple[str, tuple[str, ...]]] = []
        self.attempts = 0

    async def subscribe(self, event_name: str) -> Subscription:
        return self.ledger.subscribe(event_name)

    async def submit_transaction(self, function_name: str, *args: str) -> bytes:
        self.attempts += 1
        if self.fail_next > 0:
            self.fail_next -= 1
            raise self.failure or LedgerUnavailable("in-memory ledger is unavailable")

        self.submissions.append((function_name, args))
        self.ledger.transactions.append((self.publish_event, function_name, args))

        # Values go through the codec so malformed args fail like the chaincode would
        rate, mismatch = decode_payload(f"Lambda={args[0]}, Mismatch={args[1]}, end")
        self.ledger.emit(self.publish_event, encode_payload(rate, mismatch, prefix=f"{function_name}: "))
        return b""

    async def close(self) -> None:
        return None
