"""
Local key store for chain-native accounts.

The key store is the capability "given a recovery phrase and passphrase,
derive a key and register it under a label". Keys never leave the store;
callers get a :class:`KeyRecord` and ask the store to sign.

Chain-native derivation is namespaced by the account label: the label picks
the hardened BIP-44 account index, so the same recovery phrase registered
under two labels gives two different chain addresses.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from eth_keys import keys
from eth_keys.constants import SECPK1_N
from eth_keys.exceptions import ValidationError as KeyValidationError

from ..constants import BECH32_PREFIX
from ..engine.exceptions import KeyStoreError, SigningError, ValidationError
from .addresses import pubkey_to_chain_address
from .hdpath import COSMOS_COIN_TYPE, HDPath
from .mnemonic import derive_private_key, seed_from_mnemonic

logger = logging.getLogger(__name__)

_ACCOUNT_INDEX_MASK = 0x7FFFFFFF


def label_account_index(label: str) -> int:
    """Hardened account index for a label: first four bytes of ``sha256(label)``, 31 bits."""
    digest = hashlib.sha256(label.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") & _ACCOUNT_INDEX_MASK


def label_derivation_path(label: str) -> HDPath:
    """``m/44'/118'/<label index>'/0/0``."""
    return HDPath.bip44(COSMOS_COIN_TYPE, account=label_account_index(label))


@dataclass(frozen=True)
class KeyRecord:
    """
    Public view of a registered key.

    Attributes:
        label: Local name of the account.
        address: Bech32 chain-native address.
        path: Derivation path of the key.
        public_key: 33-byte compressed secp256k1 public key.
    """
    label: str
    address: str
    path: HDPath
    public_key: bytes = field(repr=False)


def sign_digest_low_s(private_key: keys.PrivateKey, digest: bytes) -> bytes:
    """
    Sign a 32-byte digest and return the 64-byte ``r || s`` form with low s.

    Raises:
        SigningError: If the digest is not 32 bytes.
    """
    if len(digest) != 32:
        raise SigningError(f"digest must be 32 bytes, got {len(digest)}")
    signature = private_key.sign_msg_hash(digest)
    s = signature.s
    if s > SECPK1_N // 2:
        s = SECPK1_N - s
    return signature.r.to_bytes(32, "big") + s.to_bytes(32, "big")


class KeyStore(ABC):
    """Abstract label-keyed key store."""

    @abstractmethod
    def register(
        self,
        label: str,
        secret_seed: str,
        passphrase: str = "",
        path: Union[str, HDPath, None] = None,
    ) -> KeyRecord:
        """
        Derive a key from a recovery phrase and register it under ``label``.

        Raises:
            InvalidSeedError: If the phrase fails validation.
            KeyStoreError: If ``label`` is already bound to another address.
        """

    @abstractmethod
    def get(self, label: str) -> KeyRecord:
        """Raises :class:`KeyStoreError` for an unknown label."""

    @abstractmethod
    def sign(self, label: str, digest: bytes) -> bytes:
        """Sign a 32-byte digest with the key under ``label`` (64-byte ``r || s``)."""

    @abstractmethod
    def labels(self) -> List[str]:
        pass

    @abstractmethod
    def delete(self, label: str) -> None:
        pass

    def __contains__(self, label: object) -> bool:
        return label in self.labels()


class InMemoryKeyStore(KeyStore):
    """
    Process-local key store; nothing is persisted.

    Duplicate labels: registering a label again with material that yields the
    same address is a no-op returning the existing record; material that
    yields a different address raises :class:`KeyStoreError`.

    Args:
        prefix: Bech32 prefix for derived addresses.

    Example::

        store = InMemoryKeyStore()
        record = store.register("alice", phrase, "passphrase")
        record.address        # "6x1..."
        store.sign("alice", digest)
    """

    def __init__(self, prefix: str = BECH32_PREFIX):
        self.prefix = prefix
        self._records: Dict[str, KeyRecord] = {}
        self._keys: Dict[str, keys.PrivateKey] = {}

    def register(
        self,
        label: str,
        secret_seed: str,
        passphrase: str = "",
        path: Union[str, HDPath, None] = None,
    ) -> KeyRecord:
        if not isinstance(label, str) or not label.strip():
            raise ValidationError("account label must not be empty", field="label")

        if path is None:
            hd_path = label_derivation_path(label)
        elif isinstance(path, HDPath):
            hd_path = path
        else:
            hd_path = HDPath.parse(path)

        seed = seed_from_mnemonic(secret_seed, passphrase)
        try:
            private_key = keys.PrivateKey(derive_private_key(seed, hd_path))
        except KeyValidationError as e:
            raise KeyStoreError(f"derived key rejected: {e}", label=label) from e

        public_key = private_key.public_key.to_compressed_bytes()
        record = KeyRecord(
            label=label,
            address=pubkey_to_chain_address(public_key, self.prefix),
            path=hd_path,
            public_key=public_key,
        )

        existing = self._records.get(label)
        if existing is not None:
            if existing.address != record.address:
                raise KeyStoreError(
                    f"label {label!r} is already bound to another address",
                    label=label,
                    address=existing.address,
                )
            return existing

        self._records[label] = record
        self._keys[label] = private_key
        logger.debug("Registered key %r at %s", label, hd_path)
        return record

    def get(self, label: str) -> KeyRecord:
        try:
            return self._records[label]
        except KeyError:
            raise KeyStoreError(f"no key registered under {label!r}", label=label) from None

    def sign(self, label: str, digest: bytes) -> bytes:
        try:
            private_key = self._keys[label]
        except KeyError:
            raise KeyStoreError(f"no key registered under {label!r}", label=label) from None
        return sign_digest_low_s(private_key, digest)

    def labels(self) -> List[str]:
        return sorted(self._records)

    def delete(self, label: str) -> None:
        if label not in self._records:
            raise KeyStoreError(f"no key registered under {label!r}", label=label)
        del self._records[label]
        del self._keys[label]


def derive_chain_account(
    key_store: KeyStore,
    label: str,
    secret_seed: str,
    passphrase: str = "",
    hd_path: Optional[Union[str, HDPath]] = None,
) -> str:
    """
    Register the chain-native account for ``label`` and return its address.

    The result is deterministic per (label, recovery phrase, passphrase).
    Only a valid recovery phrase produces an address.

    Args:
        key_store: Store receiving the key.
        label: Local account label; selects the derivation namespace.
        secret_seed: BIP-39 recovery phrase.
        passphrase: BIP-39 passphrase.
        hd_path: Explicit path overriding the label-derived one.

    Returns:
        str: Bech32 chain-native address.

    Raises:
        InvalidSeedError: If the phrase fails validation.
        KeyStoreError: If ``label`` is already bound to a different address.
    """
    return key_store.register(label, secret_seed, passphrase, hd_path).address
