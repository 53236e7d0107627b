"""
Recovery phrase handling and EVM key derivation.

Exported helpers
----------------
validate_mnemonic
    BIP-39 wordlist and checksum check.

generate_mnemonic
    New English recovery phrase, 256 bits of entropy by default.

seed_from_mnemonic
    64-byte BIP-39 seed. Only a valid phrase produces a seed.

derive_evm
    Recovery phrase + passphrase -> EVM private key and address along the
    coin-type 60 BIP-44 path.
"""

from dataclasses import dataclass, field
from typing import Union

from eth_account import Account
from eth_account.hdaccount import key_from_seed
from mnemonic import Mnemonic

from ..engine.exceptions import DerivationError, InvalidSeedError
from .hdpath import DEFAULT_EVM_PATH, HDPath

#: Entropy of generated phrases, in bits (24 words).
MNEMONIC_ENTROPY_BITS: int = 256

_WORDLIST = Mnemonic("english")


def normalize_mnemonic(phrase: str) -> str:
    """Collapse whitespace and lower-case the phrase."""
    return " ".join(phrase.lower().split())


def validate_mnemonic(phrase: str) -> bool:
    """
    Check a recovery phrase against the English BIP-39 wordlist and checksum.

    Returns:
        bool: ``True`` only for a well-formed phrase.
    """
    if not isinstance(phrase, str) or not phrase.strip():
        return False
    try:
        return _WORDLIST.check(normalize_mnemonic(phrase))
    except (ValueError, LookupError):
        return False


def generate_mnemonic(strength: int = MNEMONIC_ENTROPY_BITS) -> str:
    """
    Generate a new English recovery phrase.

    Args:
        strength: Entropy in bits; one of 128, 160, 192, 224, 256.

    Raises:
        ValueError: For an unsupported strength.
    """
    return _WORDLIST.generate(strength=strength)


def seed_from_mnemonic(phrase: str, passphrase: str = "") -> bytes:
    """
    Turn a recovery phrase and passphrase into the 64-byte BIP-39 seed.

    Raises:
        InvalidSeedError: If the phrase fails validation.
    """
    if not validate_mnemonic(phrase):
        raise InvalidSeedError("invalid mnemonic")
    return Mnemonic.to_seed(normalize_mnemonic(phrase), passphrase=passphrase or "")


def derive_private_key(seed: bytes, path: Union[str, HDPath]) -> bytes:
    """
    Derive a 32-byte secp256k1 private key from a BIP-39 seed along ``path``.

    Raises:
        DerivationError: If child key derivation fails.
    """
    hd_path = path if isinstance(path, HDPath) else HDPath.parse(path)
    try:
        return key_from_seed(seed, str(hd_path))
    except ValueError as e:
        raise DerivationError(f"key derivation failed: {e}", path=str(hd_path)) from e


@dataclass(frozen=True)
class DerivedKey:
    """
    EVM key material derived from a seed.

    Attributes:
        address: EIP-55 checksummed address.
        private_key: Raw 32-byte key; excluded from ``repr``.
        path: Derivation path used.
    """
    address: str
    private_key: bytes = field(repr=False)
    path: HDPath = DEFAULT_EVM_PATH

    @property
    def private_key_hex(self) -> str:
        return "0x" + self.private_key.hex()


def derive_evm(
    secret_seed: str,
    passphrase: str = "",
    path: Union[str, HDPath] = DEFAULT_EVM_PATH,
) -> DerivedKey:
    """
    Derive the EVM key and address for a recovery phrase.

    Pure and deterministic: the same phrase, passphrase and path always give
    the same address; a different passphrase gives a different one.

    Args:
        secret_seed: BIP-39 recovery phrase.
        passphrase: BIP-39 passphrase (may be empty).
        path: Derivation path, ``m/44'/60'/0'/0/0`` by default.

    Returns:
        DerivedKey: Address and private key.

    Raises:
        InvalidSeedError: If the phrase fails wordlist or checksum validation.
        DerivationError: If the derived scalar is unusable.

    Example::

        key = derive_evm("test test test test test test test test test test test junk")
        key.address  # "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    """
    hd_path = path if isinstance(path, HDPath) else HDPath.parse(path)
    seed = seed_from_mnemonic(secret_seed, passphrase)
    private_key = derive_private_key(seed, hd_path)
    try:
        address = Account.from_key(private_key).address
    except ValueError as e:
        raise DerivationError(f"derived key is not a valid secp256k1 scalar: {e}") from e
    return DerivedKey(address=address, private_key=private_key, path=hd_path)
