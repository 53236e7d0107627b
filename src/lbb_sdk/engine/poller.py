"""
Confirmation poller shared by both chains.

State machine::

    PENDING -> CONFIRMED | FAILED | TIMED_OUT

The poller queries a status source once immediately and then once per
interval. An observation made exactly at the timeout boundary still counts;
the wait is reported as timed out only when the source is still pending at
or after the timeout.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .exceptions import ConfirmationCancelledError

#: Seconds between status queries.
DEFAULT_POLL_INTERVAL: float = 1.0

#: Absolute confirmation window, about three blocks at the worst-case block time.
DEFAULT_POLL_TIMEOUT: float = 20.0


class PollState(str, Enum):
    """Confirmation states."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Observation:
    """
    One answer from a status source.

    Attributes:
        state: ``PENDING`` when the transaction is not found yet,
            ``CONFIRMED`` or ``FAILED`` once it is included.
        receipt: Raw receipt / tx response, if any.
    """
    state: PollState
    receipt: Any = None

    @classmethod
    def pending(cls) -> "Observation":
        return cls(PollState.PENDING)


@dataclass(frozen=True)
class PollResult:
    """Final outcome of a wait."""
    state: PollState
    receipt: Any
    attempts: int
    elapsed: float


StatusSource = Callable[[], Awaitable[Observation]]


class ConfirmationPoller:
    """
    Wait-for-finality primitive.

    The clock and sleep functions are injectable so that boundary behaviour
    can be exercised without real time passing.

    Args:
        interval: Seconds between queries (default 1).
        timeout: Absolute window in seconds (default 20).
        clock: Monotonic clock returning seconds.
        sleep: Coroutine function used to wait between queries.
        logger: Optional logger overriding the module logger.

    Example::

        poller = ConfirmationPoller()
        result = await poller.wait(fetch_status, tx_hash=tx_hash)
        if result.state is PollState.CONFIRMED:
            print(result.receipt)
    """

    def __init__(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if timeout < 0:
            raise ValueError(f"timeout must not be negative, got {timeout}")
        self.interval = interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

    async def wait(
        self,
        fetch: StatusSource,
        *,
        tx_hash: str = "",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PollResult:
        """
        Poll ``fetch`` until it reports a final state or the window closes.

        Exceptions raised by ``fetch`` propagate unchanged; "not found" must be
        reported as a pending observation, not as an exception.

        Args:
            fetch: Coroutine function returning an :class:`Observation`.
            tx_hash: Only used for log messages and error context.
            cancel_event: Optional token; once set, the wait stops with
                :class:`ConfirmationCancelledError` before the next query.

        Returns:
            PollResult: ``CONFIRMED``, ``FAILED`` or ``TIMED_OUT``.

        Raises:
            ConfirmationCancelledError: If ``cancel_event`` was set.
        """
        start = self._clock()
        deadline = start + self.timeout
        attempts = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise ConfirmationCancelledError(
                    "confirmation wait cancelled",
                    tx_hash=tx_hash or None,
                    attempts=attempts,
                )

            observation = await fetch()
            attempts += 1
            now = self._clock()
            elapsed = now - start

            if observation.state is not PollState.PENDING:
                self.logger.info(
                    "Transaction %s %s after %.1fs (%d queries)",
                    tx_hash, observation.state.value, elapsed, attempts,
                )
                return PollResult(observation.state, observation.receipt, attempts, elapsed)

            self.logger.debug("Transaction %s still pending (attempt %d)", tx_hash, attempts)

            if now >= deadline:
                self.logger.warning(
                    "Transaction %s not observed within %.1fs", tx_hash, self.timeout
                )
                return PollResult(PollState.TIMED_OUT, None, attempts, elapsed)

            await self._pause(min(self.interval, deadline - now), cancel_event)

    async def _pause(self, seconds: float, cancel_event: Optional[asyncio.Event]) -> None:
        """Sleep between queries, waking early when the cancel token is set."""
        if cancel_event is None:
            await self._sleep(seconds)
            return

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, cancelled):
                if not task.done():
                    task.cancel()
