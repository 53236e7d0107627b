"""
SDK-wide constants and environment access.

Loads a ``.env`` file on import (``python-dotenv``) so that the getters below
see values defined there as well as real environment variables.

Environment Variables:
    - LBB_NETWORK: ``mainnet`` or ``testnet`` (default ``testnet``)
    - LBB_RPC_URL / LBB_API_URL / LBB_EVM_RPC_URL: endpoint overrides
    - LBB_CHAIN_NAME: chain name override (e.g. ``testnet`` for a local node)
    - LBB_CHAIN_ID: message-chain id override, when it differs from the chain name
    - LBB_MNEMONIC / LBB_PASSPHRASE: recovery phrase and BIP-39 passphrase
    - LBB_PRIVATE_KEY: raw EVM private key (hex)
"""

import os
from typing import Dict, Optional

import dotenv

dotenv.load_dotenv()

# ---------------------------------------------------------------------------
# Chain identifiers
# ---------------------------------------------------------------------------

CHAIN_NAME_MAINNET: str = "sixnet"
CHAIN_NAME_TESTNET: str = "fivenet"
CHAIN_NAME_LOCALNET: str = "testnet"

EVM_CHAIN_ID_MAINNET: int = 98
EVM_CHAIN_ID_TESTNET: int = 150
EVM_CHAIN_ID_LOCALNET: int = 666

DEFAULT_CHAIN_IDS: Dict[str, int] = {
    CHAIN_NAME_MAINNET: EVM_CHAIN_ID_MAINNET,
    CHAIN_NAME_TESTNET: EVM_CHAIN_ID_TESTNET,
    CHAIN_NAME_LOCALNET: EVM_CHAIN_ID_LOCALNET,
}

# ---------------------------------------------------------------------------
# Addresses and denominations
# ---------------------------------------------------------------------------

BECH32_PREFIX: str = "6x"
BASE_DENOM: str = "usix"
EVM_DENOM: str = "asix"

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

MAINNET_RPC_URL: str = "https://sixnet-rpc.sixprotocol.net/"
MAINNET_API_URL: str = "https://sixnet-api.sixprotocol.net"
MAINNET_EVM_RPC_URL: str = "https://sixnet-rpc.sixprotocol.net"

TESTNET_RPC_URL: str = "https://rpc1.fivenet.sixprotocol.net"
TESTNET_API_URL: str = "https://api1.fivenet.sixprotocol.net"
TESTNET_EVM_RPC_URL: str = "https://rpc-evm.fivenet.sixprotocol.net"

DEFAULT_REQUEST_TIMEOUT: int = 30

# ---------------------------------------------------------------------------
# Environment getters
# ---------------------------------------------------------------------------


def get_network_from_env() -> str:
    return (os.getenv("LBB_NETWORK") or "testnet").strip().lower()


def get_endpoint_overrides_from_env() -> Dict[str, Optional[str]]:
    """Return endpoint overrides; missing variables map to ``None``."""
    return {
        "rpc_url": os.getenv("LBB_RPC_URL"),
        "api_url": os.getenv("LBB_API_URL"),
        "evm_rpc_url": os.getenv("LBB_EVM_RPC_URL"),
        "chain_name": os.getenv("LBB_CHAIN_NAME"),
        "chain_id": os.getenv("LBB_CHAIN_ID"),
    }


def get_mnemonic_from_env() -> Optional[str]:
    return os.getenv("LBB_MNEMONIC")


def get_passphrase_from_env() -> str:
    return os.getenv("LBB_PASSPHRASE", "")


def get_private_key_from_env() -> Optional[str]:
    return os.getenv("LBB_PRIVATE_KEY")
