"""
Confirmation poller tests, driven by a manual clock.
"""

import asyncio

import pytest

from lbb_sdk.engine.exceptions import ConfirmationCancelledError
from lbb_sdk.engine.poller import ConfirmationPoller, Observation, PollState


def _scripted(states):
    """Status source returning ``states`` in order; the last one repeats."""
    calls = []

    async def fetch():
        state = states[min(len(calls), len(states) - 1)]
        calls.append(state)
        return Observation(state, {"n": len(calls)} if state is not PollState.PENDING else None)

    fetch.calls = calls
    return fetch


class TestPoller:

    @pytest.mark.asyncio
    async def test_confirmed_immediately(self, clock):
        result = await clock.poller().wait(_scripted([PollState.CONFIRMED]))
        assert result.state is PollState.CONFIRMED
        assert result.attempts == 1
        assert result.elapsed == 0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_confirmation_at_the_boundary_counts(self, clock):
        fetch = _scripted([PollState.PENDING] * 20 + [PollState.CONFIRMED])
        result = await clock.poller().wait(fetch)
        assert result.state is PollState.CONFIRMED
        assert result.attempts == 21
        assert result.elapsed == 20
        assert result.receipt == {"n": 21}

    @pytest.mark.asyncio
    async def test_times_out_when_still_pending(self, clock):
        result = await clock.poller().wait(_scripted([PollState.PENDING]))
        assert result.state is PollState.TIMED_OUT
        assert result.attempts == 21
        assert result.elapsed == 20
        assert result.receipt is None
        assert clock.sleeps == [1.0] * 20

    @pytest.mark.asyncio
    async def test_failed(self, clock):
        result = await clock.poller().wait(_scripted([PollState.PENDING, PollState.FAILED]))
        assert result.state is PollState.FAILED
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_last_sleep_is_clipped_to_deadline(self, clock):
        result = await clock.poller(interval=3, timeout=7).wait(_scripted([PollState.PENDING]))
        assert clock.sleeps == [3, 3, 1]
        assert result.state is PollState.TIMED_OUT

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self, clock):
        async def fetch():
            raise RuntimeError("node down")

        with pytest.raises(RuntimeError, match="node down"):
            await clock.poller().wait(fetch)

    @pytest.mark.asyncio
    async def test_cancel_before_next_query(self, clock):
        cancel = asyncio.Event()
        calls = []

        async def fetch():
            calls.append(clock.now)
            if len(calls) == 3:
                cancel.set()
            return Observation.pending()

        with pytest.raises(ConfirmationCancelledError) as exc_info:
            await clock.poller().wait(fetch, tx_hash="0xabc", cancel_event=cancel)
        assert len(calls) == 3
        assert exc_info.value.context["tx_hash"] == "0xabc"

    @pytest.mark.asyncio
    async def test_real_sleep_wakes_on_cancel(self):
        cancel = asyncio.Event()
        poller = ConfirmationPoller(interval=30, timeout=60)

        async def fetch():
            asyncio.get_running_loop().call_later(0.01, cancel.set)
            return Observation.pending()

        with pytest.raises(ConfirmationCancelledError):
            await asyncio.wait_for(poller.wait(fetch, cancel_event=cancel), timeout=5)

    def test_rejects_bad_settings(self):
        with pytest.raises(ValueError):
            ConfirmationPoller(interval=0)
        with pytest.raises(ValueError):
            ConfirmationPoller(timeout=-1)
