"""Round loop — drives the negotiation one peer event at a time.

AwaitingEvent → Updating → Publishing → AwaitingEvent, until the update
rule reports convergence (terminated), the operator asks for shutdown
(cancelled), or an optional round ceiling is hit (max_rounds_reached).
"""

import asyncio
import sys

from pne.config import get_config
from pne.errors import DecodeError, EventStreamClosed
from pne.graph import route_after_publish, run_round
from pne.ledger.base import LedgerEvent, Subscription
from pne.state import NegotiationState, RoundRecord, initial_state
from pne.utils.codec import format_value
from pne.utils.publishing import submit_with_retry


def print_round(record: RoundRecord) -> None:
    """Default observer: one progress line per completed round."""
    print(
        f"[PNE] Round {record['round_index']} — "
        f"rate={record['rate']}, mismatch={record['mismatch']}, "
        f"decision={record['decision']}, terminate={record['terminate']}"
    )


class RoundLoop:
    """Peer-side negotiation engine over a ledger client.

    Events are consumed strictly in delivery order and each round runs to
    completion (decode, update, publish) before the next event is read.
    The state is only mutated here; ``state`` hands out snapshots.
    """

    def __init__(
        self,
        ledger,
        *,
        event_name: str | None = None,
        function_name: str | None = None,
        observer=print_round,
        max_rounds: int | None = None,
        initiate: bool = False,
        config: dict | None = None,
    ):
        config = config if config is not None else get_config()
        self.ledger = ledger
        self.event_name = event_name or config["event_name"]
        self.function_name = function_name or config["update_function"]
        self.observer = observer
        self.max_rounds = max_rounds if max_rounds is not None else config.get("max_rounds")
        self.initiate = initiate
        self.history: list[RoundRecord] = []
        self.pending_publish: tuple[str, str] | None = None
        self._pending_record: RoundRecord | None = None
        self._state: NegotiationState = initial_state(config)

    @property
    def state(self) -> NegotiationState:
        return dict(self._state)

    async def run(self, shutdown: asyncio.Event | None = None) -> NegotiationState:
        """Negotiate until convergence, shutdown, or the round ceiling.

        Returns the final state snapshot. PublishError, InvalidRoundIndex
        and EventStreamClosed propagate; the subscription is released on
        every exit path.
        """
        shutdown = shutdown or asyncio.Event()
        subscription = await self.ledger.subscribe(self.event_name)
        try:
            route = None
            if self.pending_publish is not None:
                route = await self.republish()
            elif self.initiate and self._state["round_index"] == 0:
                self.initiate = False
                await self._publish(self._state["rate"], self._state["mismatch"])

            while route not in ("end", "timeout"):
                event = await self._next_event(subscription, shutdown)
                if event is None:
                    self._state["status"] = "cancelled"
                    print(f"[PNE] Shutdown requested after round {self._state['round_index']}.")
                    break

                route = await self._handle_event(event)

            if route == "end":
                self._state["status"] = "terminated"
            elif route == "timeout":
                self._state["status"] = "max_rounds_reached"
        finally:
            await subscription.close()

        return self.state

    async def republish(self) -> str | None:
        """Resend the last computed pair whose publish failed.

        Once it lands, the round it belongs to is recorded and observed.
        Returns that round's route, or None for the opening publish.
        """
        rate_text, mismatch_text = self.pending_publish
        await submit_with_retry(self.ledger, self.function_name, (rate_text, mismatch_text))
        self.pending_publish = None

        record, self._pending_record = self._pending_record, None
        if record is None:
            return None
        self.history.append(record)
        if self.observer is not None:
            self.observer(record)
        return route_after_publish(record, self.max_rounds)

    async def _next_event(self, subscription: Subscription, shutdown: asyncio.Event) -> LedgerEvent | None:
        """Wait for the next peer event or shutdown, whichever comes first."""
        if shutdown.is_set():
            return None

        next_task = asyncio.ensure_future(subscription.next_event())
        stop_task = asyncio.ensure_future(shutdown.wait())
        try:
            done, _ = await asyncio.wait({next_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (next_task, stop_task):
                if not task.done():
                    task.cancel()

        if stop_task in done:
            return None
        try:
            return next_task.result()
        except StopAsyncIteration:
            raise EventStreamClosed(
                f"Event stream {self.event_name!r} closed after round {self._state['round_index']}."
            ) from None

    async def _handle_event(self, event: LedgerEvent) -> str | None:
        """Run one round for event. Returns the route, or None if the round was abandoned."""
        print(f"[PNE] Received event: {event.event_name} - {event.payload.decode('utf-8', 'replace')}")
        self._state["round_index"] += 1

        try:
            result = run_round(self._state, event.payload)
        except DecodeError as exc:
            print(
                f"[PNE] Warning: round {self._state['round_index']} abandoned, "
                f"could not decode peer payload: {exc}",
                file=sys.stderr,
            )
            return None

        self._state = {
            "rate": result["rate"],
            "mismatch": result["mismatch"],
            "decision": result["decision"],
            "round_index": result["round_index"],
            "status": "awaiting_event",
        }

        record: RoundRecord = {
            "round_index": result["round_index"],
            "rate": result["rate"],
            "mismatch": result["mismatch"],
            "decision": result["decision"],
            "terminate": result["terminate"],
        }
        return await self._publish(result["rate"], result["mismatch"], record)

    async def _publish(self, rate: float, mismatch: float, record: RoundRecord | None = None) -> str | None:
        self.pending_publish = (format_value(rate), format_value(mismatch))
        self._pending_record = record
        return await self.republish()
