"""Tests for pne.ledger.http.HttpLedgerClient against httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from pne.ledger.http import HttpLedgerClient

_PREFIX = "/channels/mychannel/contracts/basic"


def _client(handler, token=None):
    return HttpLedgerClient(
        "http://ledger.test", "mychannel", "basic",
        token=token, transport=httpx.MockTransport(handler),
    )


class TestSubmitTransaction:
    def test_posts_function_and_args(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, content=b"tx-1")

        async def scenario():
            client = _client(handler, token="secret")
            try:
                return await client.submit_transaction("SendUpdate", "1.5", "0.75")
            finally:
                await client.close()

        assert asyncio.run(scenario()) == b"tx-1"
        assert seen["path"] == f"{_PREFIX}/transactions"
        assert seen["body"] == {"function": "SendUpdate", "args": ["1.5", "0.75"]}
        assert seen["auth"] == "Bearer secret"

    def test_error_status_raises(self):
        async def scenario():
            client = _client(lambda request: httpx.Response(503))
            try:
                await client.submit_transaction("SendUpdate", "1", "2")
            finally:
                await client.close()

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(scenario())


class TestSubscribe:
    def test_streams_events_in_order_then_ends(self):
        lines = [
            {"eventName": "Org2", "payload": "Lambda=1, Mismatch=2, end"},
            {"eventName": "Org2", "payload": "Lambda=3, Mismatch=4, end"},
        ]
        body = "\n".join(json.dumps(line) for line in lines) + "\n\nnot json\n"

        def handler(request):
            assert request.url.path == f"{_PREFIX}/events/Org2"
            return httpx.Response(200, content=body.encode())

        async def scenario():
            client = _client(handler)
            subscription = await client.subscribe("Org2")
            events = [event async for event in subscription]
            await subscription.close()
            await client.close()
            return events

        events = asyncio.run(scenario())

        assert [e.event_name for e in events] == ["Org2", "Org2"]
        assert [e.payload for e in events] == [b"Lambda=1, Mismatch=2, end", b"Lambda=3, Mismatch=4, end"]

    def test_failed_stream_ends_subscription(self):
        async def scenario():
            client = _client(lambda request: httpx.Response(500))
            subscription = await client.subscribe("Org2")
            events = [event async for event in subscription]
            await client.close()
            return events

        assert asyncio.run(scenario()) == []

    def test_non_text_payloads_are_skipped_with_warning(self, capsys):
        lines = [
            {"eventName": "Org2", "payload": {"rate": 1}},
            {"eventName": "Org2", "payload": None},
            {"eventName": "Org2", "payload": 5},
            ["not", "an", "object"],
            {"eventName": "Org2", "payload": "Lambda=1, Mismatch=2, end"},
        ]
        body = "\n".join(json.dumps(line) for line in lines) + "\n"

        async def scenario():
            client = _client(lambda request: httpx.Response(200, content=body.encode()))
            subscription = await client.subscribe("Org2")
            events = [event async for event in subscription]
            await client.close()
            return events

        events = asyncio.run(scenario())

        assert [e.payload for e in events] == [b"Lambda=1, Mismatch=2, end"]
        err = capsys.readouterr().err
        assert err.count("[PNE] Warning: skipping event line without a text payload") == 4
