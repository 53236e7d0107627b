from .hdpath import (
    HDPath,
    iterate_paths,
    HARDENED_OFFSET,
    BIP44_PURPOSE,
    EVM_COIN_TYPE,
    COSMOS_COIN_TYPE,
    DEFAULT_EVM_PATH,
    DEFAULT_CHAIN_PATH,
)
from .mnemonic import (
    DerivedKey,
    validate_mnemonic,
    generate_mnemonic,
    seed_from_mnemonic,
    derive_private_key,
    derive_evm,
)
from .addresses import (
    pubkey_to_chain_address,
    evm_to_chain_address,
    chain_to_evm_address,
    is_valid_chain_address,
)
from .keystore import (
    KeyRecord,
    KeyStore,
    InMemoryKeyStore,
    derive_chain_account,
    label_derivation_path,
)
from .networks import (
    ChainTable,
    NetworkConfig,
    DEFAULT_CHAIN_TABLE,
    MAINNET,
    TESTNET,
    resolve_network,
)
from .identity import (
    Identity,
    IdentityMode,
    IdentityCapability,
    create,
    create_from_private_key,
)

__all__ = [
    "HDPath",
    "iterate_paths",
    "HARDENED_OFFSET",
    "BIP44_PURPOSE",
    "EVM_COIN_TYPE",
    "COSMOS_COIN_TYPE",
    "DEFAULT_EVM_PATH",
    "DEFAULT_CHAIN_PATH",
    "DerivedKey",
    "validate_mnemonic",
    "generate_mnemonic",
    "seed_from_mnemonic",
    "derive_private_key",
    "derive_evm",
    "pubkey_to_chain_address",
    "evm_to_chain_address",
    "chain_to_evm_address",
    "is_valid_chain_address",
    "KeyRecord",
    "KeyStore",
    "InMemoryKeyStore",
    "derive_chain_account",
    "label_derivation_path",
    "ChainTable",
    "NetworkConfig",
    "DEFAULT_CHAIN_TABLE",
    "MAINNET",
    "TESTNET",
    "resolve_network",
    "Identity",
    "IdentityMode",
    "IdentityCapability",
    "create",
    "create_from_private_key",
]
