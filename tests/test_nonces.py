"""
Nonce manager tests: serialization per signer, commit and rollback.
"""

import asyncio

import pytest

from lbb_sdk.engine.nonces import NonceManager


def _remote(value):
    async def fetch():
        return value
    return fetch


class TestNonceManager:

    @pytest.mark.asyncio
    async def test_first_reservation_uses_pending_nonce(self):
        manager = NonceManager()
        async with manager.reserve("0xAbC", _remote(5)) as nonce:
            assert nonce == 5
        assert manager.last_committed("0xabc") == 5

    @pytest.mark.asyncio
    async def test_stale_pending_count_is_not_reused(self):
        manager = NonceManager()
        async with manager.reserve("0xabc", _remote(5)):
            pass
        async with manager.reserve("0xabc", _remote(5)) as nonce:
            assert nonce == 6

    @pytest.mark.asyncio
    async def test_remote_ahead_wins(self):
        manager = NonceManager()
        async with manager.reserve("0xabc", _remote(5)):
            pass
        async with manager.reserve("0xabc", _remote(9)) as nonce:
            assert nonce == 9

    @pytest.mark.asyncio
    async def test_rollback_on_error(self):
        manager = NonceManager()
        with pytest.raises(RuntimeError):
            async with manager.reserve("0xabc", _remote(5)):
                raise RuntimeError("submit failed")
        assert manager.last_committed("0xabc") is None
        async with manager.reserve("0xabc", _remote(5)) as nonce:
            assert nonce == 5

    @pytest.mark.asyncio
    async def test_concurrent_reservations_are_distinct(self):
        manager = NonceManager()
        seen = []

        async def submit():
            async with manager.reserve("0xabc", _remote(0)) as nonce:
                await asyncio.sleep(0)
                seen.append(nonce)

        await asyncio.gather(*(submit() for _ in range(5)))
        assert sorted(seen) == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_addresses_are_independent(self):
        manager = NonceManager()
        async with manager.reserve("0xaaa", _remote(3)):
            pass
        async with manager.reserve("0xbbb", _remote(0)) as nonce:
            assert nonce == 0

    @pytest.mark.asyncio
    async def test_reset(self):
        manager = NonceManager()
        async with manager.reserve("0xaaa", _remote(3)):
            pass
        manager.reset("0xAAA")
        assert manager.last_committed("0xaaa") is None
