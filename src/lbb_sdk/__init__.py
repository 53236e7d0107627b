"""
LBB SDK: dual-chain wallet and transaction toolkit.

One recovery phrase yields an EVM account and a chain-native (bech32) account.
The SDK builds, signs and submits message-chain transactions and EVM contract
calls, signs EIP-712 permits for gasless execution by a third party, and waits
for confirmation on either chain.

Example::

    from lbb_sdk import ChainClient, Identity, EVMTransactionBuilder

    async with ChainClient.testnet() as client:
        alice = Identity.create(client, "alice", phrase, "passphrase")
        builder = EVMTransactionBuilder(alice)
"""

from .accounts import (
    Identity,
    IdentityMode,
    NetworkConfig,
    ChainTable,
    MAINNET,
    TESTNET,
    generate_mnemonic,
    validate_mnemonic,
)
from .clients import ChainClient
from .adapters import (
    TxFactory,
    broadcast_tx,
    broadcast_tx_and_wait,
    wait_for_tx,
    EVMTransactionBuilder,
    PermitExecutor,
    CertificateClient,
    sign_permit,
    sign_permit_for_all,
    create_permit,
    create_permit_for_all,
    verify_permit,
    parse_permit,
)
from .engine import (
    LbbError,
    ConfirmationPoller,
    NonceManager,
)

__version__ = "0.1.0"

__all__ = [
    "Identity",
    "IdentityMode",
    "NetworkConfig",
    "ChainTable",
    "MAINNET",
    "TESTNET",
    "generate_mnemonic",
    "validate_mnemonic",
    "ChainClient",
    "TxFactory",
    "broadcast_tx",
    "broadcast_tx_and_wait",
    "wait_for_tx",
    "EVMTransactionBuilder",
    "PermitExecutor",
    "CertificateClient",
    "sign_permit",
    "sign_permit_for_all",
    "create_permit",
    "create_permit_for_all",
    "verify_permit",
    "parse_permit",
    "LbbError",
    "ConfirmationPoller",
    "NonceManager",
]
