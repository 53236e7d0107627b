"""
Network Configuration

Pydantic models describing the message-chain and EVM endpoints of a network,
plus the immutable chain-name to EVM chain-id table used when an identity
opens its EVM signing context.
"""

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import (
    BASE_DENOM,
    BECH32_PREFIX,
    CHAIN_NAME_MAINNET,
    CHAIN_NAME_TESTNET,
    DEFAULT_CHAIN_IDS,
    DEFAULT_REQUEST_TIMEOUT,
    EVM_DENOM,
    MAINNET_API_URL,
    MAINNET_EVM_RPC_URL,
    MAINNET_RPC_URL,
    TESTNET_API_URL,
    TESTNET_EVM_RPC_URL,
    TESTNET_RPC_URL,
    get_endpoint_overrides_from_env,
    get_network_from_env,
)
from ..engine.exceptions import ConfigurationError, UnknownChainError


class ChainTable(Mapping[str, int]):
    """
    Read-only chain-name to EVM chain-id mapping.

    Built once and passed into constructors; it cannot be modified after
    construction.

    Example::

        table = ChainTable({"fivenet": 150})
        table.evm_chain_id("fivenet")       # 150
    """

    def __init__(self, entries: Mapping[str, int]):
        self._entries: Mapping[str, int] = MappingProxyType(
            {str(name): int(chain_id) for name, chain_id in entries.items()}
        )

    def __getitem__(self, name: str) -> int:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ChainTable({dict(self._entries)!r})"

    def evm_chain_id(self, chain_name: str) -> int:
        """
        Look up the EVM chain id for ``chain_name``.

        Raises:
            UnknownChainError: If the name is not in the table.
        """
        try:
            return self._entries[chain_name]
        except KeyError:
            raise UnknownChainError(
                f"unknown chain name {chain_name!r}",
                chain_name=chain_name,
                known=",".join(sorted(self._entries)),
            ) from None

    def with_entry(self, chain_name: str, chain_id: int) -> "ChainTable":
        """Return a new table with one entry added or replaced."""
        entries: Dict[str, int] = dict(self._entries)
        entries[chain_name] = chain_id
        return ChainTable(entries)


DEFAULT_CHAIN_TABLE = ChainTable(DEFAULT_CHAIN_IDS)


class NetworkConfig(BaseModel):
    """
    Endpoints and chain parameters for one network.

    Attributes:
        chain_name: Message-chain name, also the chain-table key (``sixnet``).
        chain_id: Message-chain id committed to by every sign document.
            Defaults to ``chain_name``; set it for nodes whose id differs.
        rpc_url: Tendermint RPC endpoint.
        api_url: REST (LCD) endpoint used by the message-chain node client.
        evm_rpc_url: EVM JSON-RPC endpoint.
        bech32_prefix: Human-readable part of chain-native addresses.
        base_denom: Fee and bank denomination on the message chain.
        evm_denom: Denomination backing EVM balances.
        request_timeout: HTTP timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    chain_name: str = Field(..., min_length=1, description="Message-chain name")
    chain_id: Optional[str] = Field(default=None, description="Message-chain id override")
    rpc_url: str = Field(..., description="Tendermint RPC endpoint")
    api_url: str = Field(..., description="REST (LCD) endpoint")
    evm_rpc_url: str = Field(..., description="EVM JSON-RPC endpoint")
    bech32_prefix: str = Field(default=BECH32_PREFIX, description="Bech32 human-readable part")
    base_denom: str = Field(default=BASE_DENOM, description="Base denomination")
    evm_denom: str = Field(default=EVM_DENOM, description="EVM denomination")
    request_timeout: int = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="HTTP timeout (seconds)")

    @property
    def cosmos_chain_id(self) -> str:
        return self.chain_id or self.chain_name

    @classmethod
    def mainnet(cls) -> "NetworkConfig":
        return MAINNET

    @classmethod
    def testnet(cls) -> "NetworkConfig":
        return TESTNET

    @classmethod
    def from_env(cls) -> "NetworkConfig":
        """
        Build a config from ``LBB_NETWORK`` and the endpoint overrides.

        Raises:
            ConfigurationError: If ``LBB_NETWORK`` names an unknown preset.
        """
        name = get_network_from_env()
        presets: Dict[str, NetworkConfig] = {"mainnet": MAINNET, "testnet": TESTNET}
        if name not in presets:
            raise ConfigurationError(
                f"LBB_NETWORK must be one of {sorted(presets)}, got {name!r}"
            )

        overrides = {k: v for k, v in get_endpoint_overrides_from_env().items() if v}
        return presets[name].model_copy(update=overrides)


MAINNET = NetworkConfig(
    chain_name=CHAIN_NAME_MAINNET,
    rpc_url=MAINNET_RPC_URL,
    api_url=MAINNET_API_URL,
    evm_rpc_url=MAINNET_EVM_RPC_URL,
)

TESTNET = NetworkConfig(
    chain_name=CHAIN_NAME_TESTNET,
    rpc_url=TESTNET_RPC_URL,
    api_url=TESTNET_API_URL,
    evm_rpc_url=TESTNET_EVM_RPC_URL,
)


def resolve_network(network: Optional[str] = None) -> NetworkConfig:
    """Return the preset for ``"mainnet"`` / ``"testnet"``, or the env config when omitted."""
    if network is None:
        return NetworkConfig.from_env()
    if network == "mainnet":
        return MAINNET
    if network == "testnet":
        return TESTNET
    raise ConfigurationError(f"unknown network preset {network!r}")
