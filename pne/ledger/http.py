"""Ledger client for a Fabric REST gateway, over httpx.

Endpoints (relative to base_url):
    POST /channels/{channel}/contracts/{contract}/transactions
         body: {"function": "...", "args": ["...", ...]}
    GET  /channels/{channel}/contracts/{contract}/events/{event_name}
         newline-delimited JSON: {"eventName": "...", "payload": "..."}
"""

import asyncio
import json
import sys

import httpx

from pne.ledger.base import LedgerEvent, Subscription


class HttpLedgerClient:
    def __init__(
        self,
        base_url: str,
        channel: str,
        contract: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._prefix = f"/channels/{channel}/contracts/{contract}"
        self._readers: dict[Subscription, asyncio.Task] = {}

    async def submit_transaction(self, function_name: str, *args: str) -> bytes:
        """Submit a transaction and return the gateway's response body."""
        response = await self._client.post(
            f"{self._prefix}/transactions",
            json={"function": function_name, "args": list(args)},
        )
        response.raise_for_status()
        return response.content

    async def subscribe(self, event_name: str) -> Subscription:
        """Open the event stream for event_name.

        A background task reads the stream into the subscription's queue
        until the server closes it or the subscription is closed.
        """
        subscription = Subscription(event_name, on_close=self._stop_reader)
        self._readers[subscription] = asyncio.create_task(self._read_events(subscription))
        return subscription

    async def _read_events(self, subscription: Subscription) -> None:
        url = f"{self._prefix}/events/{subscription.event_name}"
        try:
            async with self._client.stream("GET", url, timeout=None) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError:
                        print(f"[PNE] Warning: skipping unreadable event line {line!r}", file=sys.stderr)
                        continue
                    payload = data.get("payload", "") if isinstance(data, dict) else None
                    if not isinstance(payload, str):
                        print(f"[PNE] Warning: skipping event line without a text payload {line!r}", file=sys.stderr)
                        continue
                    subscription.deliver(LedgerEvent(
                        data.get("eventName", subscription.event_name),
                        payload.encode("utf-8"),
                    ))
        except httpx.HTTPError as exc:
            print(f"[PNE] Event stream {subscription.event_name!r} failed: {exc!r}", file=sys.stderr)
        finally:
            subscription.end()

    async def _stop_reader(self, subscription: Subscription) -> None:
        task = self._readers.pop(subscription, None)
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        for subscription in list(self._readers):
            await subscription.close()
        await self._client.aclose()
