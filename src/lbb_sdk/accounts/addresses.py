"""
Chain-native (bech32) address helpers.

A chain-native address is ``bech32(prefix, ripemd160(sha256(compressed_pubkey)))``.
The same 20 bytes can also be shown in EVM hex form, which is how EVM balances
are looked up through the bank module.
"""

import hashlib

import bech32
from Crypto.Hash import RIPEMD160
from eth_utils import is_address, to_checksum_address

from ..constants import BECH32_PREFIX
from ..engine.exceptions import ValidationError

_ADDRESS_LENGTH = 20


def hash160(data: bytes) -> bytes:
    """``ripemd160(sha256(data))``."""
    digest = RIPEMD160.new()
    digest.update(hashlib.sha256(data).digest())
    return digest.digest()


def encode_chain_address(raw: bytes, prefix: str = BECH32_PREFIX) -> str:
    """Bech32-encode 20 raw address bytes."""
    if len(raw) != _ADDRESS_LENGTH:
        raise ValidationError(
            f"address must be {_ADDRESS_LENGTH} bytes, got {len(raw)}", field="address"
        )
    words = bech32.convertbits(raw, 8, 5, True)
    return bech32.bech32_encode(prefix, words)


def decode_chain_address(address: str, prefix: str = BECH32_PREFIX) -> bytes:
    """
    Decode a bech32 address into its 20 raw bytes.

    Raises:
        ValidationError: On a bad checksum, a wrong prefix or a wrong length.
    """
    hrp, words = bech32.bech32_decode(address)
    if hrp is None or words is None:
        raise ValidationError(f"invalid bech32 address {address!r}", field="address")
    if hrp != prefix:
        raise ValidationError(
            f"address prefix {hrp!r} does not match {prefix!r}", field="address"
        )
    raw = bech32.convertbits(words, 5, 8, False)
    if raw is None or len(raw) != _ADDRESS_LENGTH:
        raise ValidationError(f"invalid address payload in {address!r}", field="address")
    return bytes(raw)


def pubkey_to_chain_address(public_key: bytes, prefix: str = BECH32_PREFIX) -> str:
    """Chain-native address of a 33-byte compressed secp256k1 public key."""
    if len(public_key) != 33:
        raise ValidationError(
            f"expected a 33-byte compressed public key, got {len(public_key)} bytes",
            field="public_key",
        )
    return encode_chain_address(hash160(public_key), prefix)


def evm_to_chain_address(evm_address: str, prefix: str = BECH32_PREFIX) -> str:
    """Show an EVM hex address in bech32 form (same 20 bytes)."""
    if not is_address(evm_address):
        raise ValidationError(f"invalid EVM address {evm_address!r}", field="evm_address")
    return encode_chain_address(bytes.fromhex(evm_address[2:]), prefix)


def chain_to_evm_address(address: str, prefix: str = BECH32_PREFIX) -> str:
    """Show a bech32 address in EIP-55 hex form (same 20 bytes)."""
    return to_checksum_address("0x" + decode_chain_address(address, prefix).hex())


def is_valid_chain_address(address: str, prefix: str = BECH32_PREFIX) -> bool:
    if not isinstance(address, str) or not address:
        return False
    try:
        decode_chain_address(address, prefix)
    except ValidationError:
        return False
    return True
