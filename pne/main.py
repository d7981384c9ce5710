"""Entry point: connects to the ledger, runs the round loop, writes the report."""

import asyncio
import signal
import sys

from pne.config import get_config, get_ledger_token
from pne.errors import ConfigError, EventStreamClosed, InvalidRoundIndex, PublishError
from pne.ledger.http import HttpLedgerClient
from pne.loop import RoundLoop, print_round
from pne.simulation import run_loopback, run_simulation
from pne.utils.formatter import write_report
from pne.utils.validator import validate_ledger_settings

USAGE = "Usage: pne [--demo | --loopback] [--initiate] [--max-rounds N]"


def _install_shutdown_handlers(shutdown: asyncio.Event) -> None:
    """Set shutdown on SIGINT/SIGTERM so the loop leaves its wait promptly."""
    loop = asyncio.get_running_loop()

    def _request_shutdown(signum):
        print(f"[PNE] Received signal {signum}, finishing the current round and shutting down...")
        shutdown.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, _request_shutdown, signum)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still raises KeyboardInterrupt
            pass


async def negotiate(max_rounds: int | None = None, initiate: bool = False) -> int:
    """Run one negotiation against the configured ledger gateway. Returns the exit code."""
    config = get_config()
    settings = validate_ledger_settings(config)

    print(f"[PNE] Connecting to {settings['ledger_url']} "
          f"(channel {settings['channel']}, contract {settings['contract']})")
    ledger = HttpLedgerClient(
        settings["ledger_url"],
        settings["channel"],
        settings["contract"],
        token=get_ledger_token(),
        timeout=config.get("ledger_timeout", 30.0),
    )
    shutdown = asyncio.Event()
    _install_shutdown_handlers(shutdown)

    loop = RoundLoop(
        ledger,
        event_name=settings["event_name"],
        function_name=settings["update_function"],
        max_rounds=max_rounds,
        initiate=initiate,
        config=config,
    )
    try:
        state = await loop.run(shutdown)
    finally:
        await ledger.close()

    _finish(state, loop.history, title=f"{settings['channel']}/{settings['contract']}")
    return 0


def _finish(state, history, title: str) -> None:
    output_path = write_report(state, history, title=title)
    if state["status"] == "terminated":
        print(
            f"[PNE] Done at round {state['round_index']}: decision={state['decision']}, "
            f"rate={state['rate']}, mismatch={state['mismatch']}"
        )
    print(f"[PNE] Status: {state['status']}")
    print(f"[PNE] Rounds: {state['round_index']}")
    print(f"[PNE] Report written to: {output_path}")


def run(mode: str = "ledger", max_rounds: int | None = None, initiate: bool = False) -> int:
    """Run the selected mode and map fatal errors to a non-zero exit code.

    Args:
        mode: "ledger" (HTTP gateway), "demo" (two-party in-memory) or "loopback".
        max_rounds: Optional round ceiling. None uses config default.
        initiate: Publish the initial state before waiting (ledger mode only).
    """
    try:
        if mode == "demo":
            results = asyncio.run(run_simulation(max_rounds=max_rounds, observer=print_round))
            for party, (state, history) in results.items():
                _finish(state, history, title=f"Simulation {party}")
            return 0
        if mode == "loopback":
            state, history = asyncio.run(run_loopback(max_rounds=max_rounds, observer=print_round))
            _finish(state, history, title="Loopback")
            return 0
        return asyncio.run(negotiate(max_rounds=max_rounds, initiate=initiate))
    except ConfigError as exc:
        print(f"[PNE] Fatal: config step failed: {exc}", file=sys.stderr)
    except PublishError as exc:
        print(f"[PNE] Fatal: publish step failed: {exc}", file=sys.stderr)
    except InvalidRoundIndex as exc:
        print(f"[PNE] Fatal: update step failed: {exc}", file=sys.stderr)
    except EventStreamClosed as exc:
        print(f"[PNE] Fatal: subscribe step failed: {exc}", file=sys.stderr)
    return 1


def main() -> None:
    """CLI entry point."""
    mode = "ledger"
    max_rounds = None
    initiate = False
    args = sys.argv[1:]

    if "--demo" in args:
        mode = "demo"
        args.remove("--demo")
    if "--loopback" in args:
        mode = "loopback"
        args.remove("--loopback")
    if "--initiate" in args:
        initiate = True
        args.remove("--initiate")
    if "--max-rounds" in args:
        i = args.index("--max-rounds")
        try:
            max_rounds = int(args[i + 1])
        except (IndexError, ValueError):
            print(USAGE, file=sys.stderr)
            sys.exit(2)
        del args[i:i + 2]
    if args:
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    sys.exit(run(mode, max_rounds=max_rounds, initiate=initiate))


if __name__ == "__main__":
    main()
