"""
Chain client shared by identities and builders.

A ``ChainClient`` owns the network handles for one network: the message-chain
node client, the ``AsyncWeb3`` instance, the key store, and the immutable
chain-name to chain-id table. Identities reference it; nothing in it is
mutated after construction.
"""

import logging
from typing import Any, Optional

from web3 import AsyncWeb3

from ..accounts.keystore import InMemoryKeyStore, KeyStore
from ..accounts.networks import DEFAULT_CHAIN_TABLE, ChainTable, NetworkConfig
from ..adapters.cosmos.node import CosmosNodeClient, CosmosRestClient


class ChainClient:
    """
    Network handles for one network.

    Args:
        network: Endpoints and chain parameters.
        chain_table: Chain-name to EVM chain-id table.
        node: Message-chain node client; a ``CosmosRestClient`` on
            ``network.api_url`` by default.
        web3: ``AsyncWeb3`` instance; an HTTP provider on
            ``network.evm_rpc_url`` by default.
        key_store: Key store for chain-native accounts; in-memory by default.
        offline: When set, message-chain simulation and account lookups are
            refused instead of hitting the network.
        logger: Optional logger overriding the module logger.

    Example::

        async with ChainClient.testnet() as client:
            alice = Identity.create(client, "alice", phrase, "passphrase")
    """

    def __init__(
        self,
        network: NetworkConfig,
        chain_table: ChainTable = DEFAULT_CHAIN_TABLE,
        node: Optional[CosmosNodeClient] = None,
        web3: Optional[AsyncWeb3] = None,
        key_store: Optional[KeyStore] = None,
        offline: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.network = network
        self.chain_table = chain_table
        self.offline = offline
        self.logger = logger or logging.getLogger(__name__)

        self._owns_node = node is None
        self.node = node or CosmosRestClient(
            network.api_url, timeout=network.request_timeout, logger=self.logger
        )
        self._owns_web3 = web3 is None
        self.web3 = web3 or self._get_web3_instance(network)
        self.key_store = key_store or InMemoryKeyStore(prefix=network.bech32_prefix)

    @staticmethod
    def _get_web3_instance(network: NetworkConfig) -> AsyncWeb3:
        return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
            network.evm_rpc_url,
            request_kwargs={"timeout": network.request_timeout},
        ))

    @classmethod
    def mainnet(cls, **kwargs: Any) -> "ChainClient":
        return cls(NetworkConfig.mainnet(), **kwargs)

    @classmethod
    def testnet(cls, **kwargs: Any) -> "ChainClient":
        return cls(NetworkConfig.testnet(), **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ChainClient":
        """Client for the network selected by ``LBB_NETWORK`` and the endpoint overrides."""
        return cls(NetworkConfig.from_env(), **kwargs)

    @property
    def chain_name(self) -> str:
        return self.network.chain_name

    @property
    def evm_chain_id(self) -> int:
        """
        EVM chain id of this network.

        Raises:
            UnknownChainError: If the chain name is not in the chain table.
        """
        return self.chain_table.evm_chain_id(self.network.chain_name)

    @property
    def cosmos_chain_id(self) -> str:
        """Message-chain id signed into every transaction, e.g. ``fivenet``."""
        return self.network.cosmos_chain_id

    @property
    def bech32_prefix(self) -> str:
        return self.network.bech32_prefix

    def __repr__(self) -> str:
        return f"ChainClient(chain_name={self.chain_name!r}, offline={self.offline})"

    async def aclose(self) -> None:
        """Close the connections this client opened itself."""
        if self._owns_node:
            await self.node.aclose()
        if self._owns_web3:
            await self.web3.provider.disconnect()

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
