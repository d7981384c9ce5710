"""Offline negotiation runs over an InMemoryLedger.

Two-party mode mirrors the deployed routing: Org1's updates are emitted as
"Org2" events and vice versa, and Org1 opens the negotiation. Loopback
mode has a single party whose own updates come back as its peer events.
"""

import asyncio

from pne.config import get_config
from pne.ledger.memory import InMemoryLedger
from pne.loop import RoundLoop
from pne.state import NegotiationState, RoundRecord


async def run_simulation(
    max_rounds: int | None = None,
    initial_a: dict | None = None,
    initial_b: dict | None = None,
    observer=None,
) -> dict[str, tuple[NegotiationState, list[RoundRecord]]]:
    """Run two parties against each other until one of them finishes.

    initial_a / initial_b override the config's initial_* values for each
    party. Once a party exits, the other is shut down after it finishes
    any in-flight round. Returns {party: (final_state, history)}.
    """
    config = get_config()
    max_rounds = max_rounds if max_rounds is not None else config.get("simulation_max_rounds", 200)
    ledger = InMemoryLedger()

    parties = {
        "Org1": RoundLoop(
            ledger.client(publish_event="Org2"),
            event_name="Org1",
            observer=observer,
            max_rounds=max_rounds,
            initiate=True,
            config={**config, **(initial_a or {})},
        ),
        "Org2": RoundLoop(
            ledger.client(publish_event="Org1"),
            event_name="Org2",
            observer=observer,
            max_rounds=max_rounds,
            config={**config, **(initial_b or {})},
        ),
    }
    shutdowns = {name: asyncio.Event() for name in parties}

    # The responder must be listening before the initiator publishes
    responder = asyncio.create_task(parties["Org2"].run(shutdowns["Org2"]))
    while ledger.subscriber_count("Org2") == 0:
        await asyncio.sleep(0)
    initiator = asyncio.create_task(parties["Org1"].run(shutdowns["Org1"]))

    tasks = {"Org1": initiator, "Org2": responder}
    done, _ = await asyncio.wait(set(tasks.values()), return_when=asyncio.FIRST_COMPLETED)
    for name, task in tasks.items():
        if task not in done:
            shutdowns[name].set()
    await asyncio.gather(*tasks.values())

    return {name: (loop.state, loop.history) for name, loop in parties.items()}


async def run_loopback(max_rounds: int | None = None, observer=None) -> tuple[NegotiationState, list[RoundRecord]]:
    """Negotiate against an echo of our own updates.

    Converges because the peer's values always equal ours, which drives
    the mismatch toward zero.
    """
    config = get_config()
    event_name = config["event_name"]
    ledger = InMemoryLedger()
    loop = RoundLoop(
        ledger.client(publish_event=event_name),
        event_name=event_name,
        observer=observer,
        max_rounds=max_rounds,
        initiate=True,
        config=config,
    )
    state = await loop.run()
    return state, loop.history
