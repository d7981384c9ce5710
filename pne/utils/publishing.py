"""Outbound publish with bounded retry of the same values."""

import sys

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from pne.errors import LedgerUnavailable, PublishError


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient ledger/network error worth retrying."""
    if isinstance(exc, LedgerUnavailable):
        return True
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in (429, 500, 502, 503)
    return False


async def submit_with_retry(ledger, function_name: str, args: tuple[str, ...], max_retries: int | None = None) -> bytes:
    """Call ledger.submit_transaction(function_name, *args) with exponential backoff.

    The argument strings are fixed before the first attempt, so every retry
    resends exactly the same values. Retries on transient errors only;
    the final failure (or a non-transient one) is raised as PublishError.
    """
    from pne.config import get_config

    config = get_config()
    retries = max_retries if max_retries is not None else config.get("publish_max_retries", 3)
    attempts = 0

    @retry(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(
            multiplier=1,
            min=config.get("publish_wait_min", 1),
            max=config.get("publish_wait_max", 8),
        ),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: print(
            f"[PNE] Publish failed: {state.outcome.exception()!r}. "
            f"Retrying in {state.next_action.sleep:.0f}s "
            f"(attempt {state.attempt_number}/{retries})...",
            file=sys.stderr,
        ),
    )
    async def _submit():
        nonlocal attempts
        attempts += 1
        return await ledger.submit_transaction(function_name, *args)

    try:
        return await _submit()
    except Exception as exc:
        raise PublishError(
            f"{function_name}({', '.join(args)}) failed after {attempts} attempt(s): {exc!r}",
            function_name=function_name,
            args=args,
            attempts=attempts,
        ) from exc
