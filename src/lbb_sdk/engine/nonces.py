"""
Per-signer EVM nonce allocation.

The node's pending nonce is a shared remote counter. Two concurrent
submissions from the same signer may read the same value, and one of them is
then rejected. ``NonceManager`` serializes nonce-consuming operations per
signer and remembers the last committed nonce, so a submission that the node
has not yet reflected in its pending count is not reused.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional


class NonceManager:
    """
    Serialize nonce allocation per signer address.

    ``reserve`` holds a per-address ``asyncio.Lock`` for the whole
    fetch-sign-submit sequence. The allocated nonce is committed when the
    block exits cleanly and rolled back (forgotten) when it raises.

    Args:
        logger: Optional logger overriding the module logger.

    Example::

        manager = NonceManager()
        async with manager.reserve(sender, fetch_pending_nonce) as nonce:
            signed = sign(nonce)
            await submit(signed)
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._committed: Dict[str, int] = {}
        self.logger = logger or logging.getLogger(__name__)

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def reserve(
        self,
        address: str,
        fetch: Callable[[], Awaitable[int]],
    ) -> AsyncIterator[int]:
        """
        Allocate the next nonce for ``address``.

        Args:
            address: Signer address (case-insensitive).
            fetch: Coroutine function returning the node's pending nonce.

        Yields:
            int: ``max(pending nonce, last committed nonce + 1)``.
        """
        key = address.lower()
        async with self._lock_for(key):
            remote = await fetch()
            local = self._committed.get(key)
            nonce = remote if local is None else max(remote, local + 1)
            self.logger.debug("Reserved nonce %d for %s (pending=%d)", nonce, address, remote)
            try:
                yield nonce
            except BaseException:
                self.logger.debug("Rolled back nonce %d for %s", nonce, address)
                raise
            self._committed[key] = nonce

    def last_committed(self, address: str) -> Optional[int]:
        """Return the last nonce committed for ``address``, if any."""
        return self._committed.get(address.lower())

    def reset(self, address: Optional[str] = None) -> None:
        """Forget committed nonces for one address, or for all when omitted."""
        if address is None:
            self._committed.clear()
        else:
            self._committed.pop(address.lower(), None)
