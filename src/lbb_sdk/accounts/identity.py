"""
Identity: one user on both chains.

An :class:`Identity` holds the EVM address, the chain-native address, the EVM
signing context bound to the network's chain id, and a handle to the
:class:`~lbb_sdk.clients.client.ChainClient`. It is immutable after
construction; builders hold a reference to it instead of embedding it.

Construction modes:
    - ``DUAL_CHAIN``: from a recovery phrase. Both addresses are derived and
      the chain-native key is registered in the client's key store.
    - ``EVM_ONLY``: from a raw private key. Only the EVM address exists;
      message-chain signing raises :class:`UninitializedSignerError`.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from eth_keys.exceptions import ValidationError as KeyValidationError

from ..constants import (
    get_mnemonic_from_env,
    get_passphrase_from_env,
    get_private_key_from_env,
)
from ..engine.exceptions import (
    ConfigurationError,
    InvalidSeedError,
    SigningError,
    UninitializedSignerError,
    ValidationError,
)
from .keystore import derive_chain_account
from .mnemonic import derive_evm, validate_mnemonic

if TYPE_CHECKING:
    from ..clients.client import ChainClient

logger = logging.getLogger(__name__)


class IdentityMode(str, Enum):
    DUAL_CHAIN = "dual_chain"
    EVM_ONLY = "evm_only"


class IdentityCapability(Protocol):
    """What the transaction builders need from an identity."""

    @property
    def client(self) -> "ChainClient": ...

    @property
    def label(self) -> str: ...

    @property
    def evm_address(self) -> str: ...

    @property
    def chain_address(self) -> Optional[str]: ...

    @property
    def evm_chain_id(self) -> int: ...

    @property
    def chain_public_key(self) -> bytes: ...

    def sign_digest(self, digest: bytes) -> Tuple[int, int, int]: ...

    def sign_chain_bytes(self, sign_bytes: bytes) -> bytes: ...

    def sign_transaction(self, transaction: Dict[str, Any]) -> Any: ...


def _require_client(client: Any) -> None:
    if client is None:
        raise ValidationError("client is required", field="client")


def _require_label(label: Any) -> None:
    if not isinstance(label, str) or not label.strip():
        raise ValidationError("account label must not be empty", field="label")


@dataclass(frozen=True, eq=False)
class Identity:
    """
    Immutable dual-chain identity.

    Use :meth:`create` or :meth:`create_from_private_key` rather than the
    constructor. Assigning to any attribute raises ``AttributeError``.

    Example::

        client = ChainClient.testnet()
        alice = Identity.create(client, "alice", phrase, "passphrase")
        alice.evm_address     # "0x..."
        alice.chain_address   # "6x1..."
    """

    client: "ChainClient"
    label: str
    mode: IdentityMode
    evm_address: str
    chain_address: Optional[str]
    evm_chain_id: int
    _account: LocalAccount = field(repr=False)

    @classmethod
    def create(
        cls,
        client: "ChainClient",
        label: str,
        secret_seed: str,
        passphrase: str = "",
    ) -> "Identity":
        """
        Derive a dual-chain identity from a recovery phrase.

        Args:
            client: Chain client providing the key store and the chain table.
            label: Local account label (key-store namespace).
            secret_seed: BIP-39 recovery phrase.
            passphrase: BIP-39 passphrase.

        Returns:
            Identity: ``DUAL_CHAIN`` identity.

        Raises:
            ValidationError: If ``client`` is missing or ``label`` is empty.
            InvalidSeedError: If the phrase fails the checksum check.
            UnknownChainError: If the client's chain name is not in its table.
            KeyStoreError: If ``label`` is bound to another address.
        """
        _require_client(client)
        _require_label(label)
        if not validate_mnemonic(secret_seed):
            raise InvalidSeedError()

        chain_id = client.evm_chain_id
        derived = derive_evm(secret_seed, passphrase)
        chain_address = derive_chain_account(client.key_store, label, secret_seed, passphrase)

        logger.info("Created identity %r (evm=%s, chain=%s)", label, derived.address, chain_address)
        return cls(
            client=client,
            label=label,
            mode=IdentityMode.DUAL_CHAIN,
            evm_address=derived.address,
            chain_address=chain_address,
            evm_chain_id=chain_id,
            _account=Account.from_key(derived.private_key),
        )

    @classmethod
    def create_from_private_key(
        cls,
        client: "ChainClient",
        label: str,
        private_key: str,
    ) -> "Identity":
        """
        Build an EVM-only identity from a raw private key.

        No chain-native address is derived, so this identity can never sign
        message-chain transactions.

        Raises:
            ValidationError: If ``client``, ``label`` or ``private_key`` is invalid.
            UnknownChainError: If the client's chain name is not in its table.
        """
        _require_client(client)
        _require_label(label)
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError, KeyValidationError) as e:
            raise ValidationError("invalid private key", field="private_key") from e

        chain_id = client.evm_chain_id
        logger.info("Created EVM-only identity %r (evm=%s)", label, account.address)
        return cls(
            client=client,
            label=label,
            mode=IdentityMode.EVM_ONLY,
            evm_address=account.address,
            chain_address=None,
            evm_chain_id=chain_id,
            _account=account,
        )

    @classmethod
    def from_env(cls, client: "ChainClient", label: str) -> "Identity":
        """
        Build an identity from ``LBB_MNEMONIC`` / ``LBB_PASSPHRASE``, falling
        back to ``LBB_PRIVATE_KEY``.

        Raises:
            ConfigurationError: If neither variable is set.
        """
        phrase = get_mnemonic_from_env()
        if phrase:
            return cls.create(client, label, phrase, get_passphrase_from_env())
        private_key = get_private_key_from_env()
        if private_key:
            return cls.create_from_private_key(client, label, private_key)
        raise ConfigurationError("set LBB_MNEMONIC or LBB_PRIVATE_KEY")

    def __repr__(self) -> str:
        return (
            f"Identity(label={self.label!r}, mode={self.mode.value}, "
            f"evm_address={self.evm_address}, chain_address={self.chain_address}, "
            f"evm_chain_id={self.evm_chain_id}, private_key=***)"
        )

    @property
    def is_dual_chain(self) -> bool:
        return self.mode is IdentityMode.DUAL_CHAIN

    @property
    def chain_public_key(self) -> bytes:
        """Compressed public key of the chain-native account."""
        self._require_chain_signer()
        return self.client.key_store.get(self.label).public_key

    def export_private_key(self) -> str:
        """Return the EVM private key as 0x-prefixed hex."""
        return "0x" + bytes(self._account.key).hex()

    def sign_digest(self, digest: bytes) -> Tuple[int, int, int]:
        """
        Sign a 32-byte digest with the EVM key.

        Returns:
            Tuple[int, int, int]: ``(v, r, s)`` with ``v`` in ``{27, 28}``.

        Raises:
            SigningError: If the digest is not 32 bytes.
        """
        if len(digest) != 32:
            raise SigningError(f"digest must be 32 bytes, got {len(digest)}")
        signature = keys.PrivateKey(bytes(self._account.key)).sign_msg_hash(digest)
        return signature.v + 27, signature.r, signature.s

    def sign_chain_bytes(self, sign_bytes: bytes) -> bytes:
        """
        Sign message-chain sign bytes: ``sha256`` then secp256k1, low-s,
        64-byte ``r || s``.

        Raises:
            UninitializedSignerError: For EVM-only identities.
        """
        self._require_chain_signer()
        digest = hashlib.sha256(sign_bytes).digest()
        return self.client.key_store.sign(self.label, digest)

    def sign_transaction(self, transaction: Dict[str, Any]) -> Any:
        """
        Sign an EVM transaction dict (EIP-155, bound to :attr:`evm_chain_id`).

        Raises:
            SigningError: If the dict carries another chain id or cannot be signed.
        """
        chain_id = transaction.get("chainId", self.evm_chain_id)
        if chain_id != self.evm_chain_id:
            raise SigningError(
                "transaction chain id does not match the identity",
                chain_id=chain_id,
                expected=self.evm_chain_id,
            )
        try:
            return self._account.sign_transaction({**transaction, "chainId": self.evm_chain_id})
        except (ValueError, TypeError) as e:
            raise SigningError(f"failed to sign transaction: {e}", address=self.evm_address) from e

    def _require_chain_signer(self) -> None:
        if self.chain_address is None:
            raise UninitializedSignerError(label=self.label, address=self.evm_address)


create = Identity.create
create_from_private_key = Identity.create_from_private_key
