"""
Chain-native address encoding tests.
"""

import pytest
from eth_keys import keys

from lbb_sdk.accounts.addresses import (
    chain_to_evm_address,
    decode_chain_address,
    encode_chain_address,
    evm_to_chain_address,
    hash160,
    is_valid_chain_address,
    pubkey_to_chain_address,
)
from lbb_sdk.engine.exceptions import ValidationError

from mocks import TEST_EVM_ADDRESS, TEST_EVM_PRIVATE_KEY


class TestChainAddresses:

    def test_evm_round_trip(self):
        chain_address = evm_to_chain_address(TEST_EVM_ADDRESS)
        assert chain_address.startswith("6x1")
        assert chain_to_evm_address(chain_address) == TEST_EVM_ADDRESS

    def test_same_bytes_in_both_forms(self):
        chain_address = evm_to_chain_address(TEST_EVM_ADDRESS)
        assert decode_chain_address(chain_address) == bytes.fromhex(TEST_EVM_ADDRESS[2:])

    def test_pubkey_address_is_hash160_of_compressed_key(self):
        public_key = keys.PrivateKey(bytes.fromhex(TEST_EVM_PRIVATE_KEY[2:])).public_key.to_compressed_bytes()
        address = pubkey_to_chain_address(public_key)
        assert decode_chain_address(address) == hash160(public_key)
        assert len(hash160(public_key)) == 20

    def test_custom_prefix(self):
        address = encode_chain_address(b"\x01" * 20, prefix="cosmos")
        assert address.startswith("cosmos1")
        assert is_valid_chain_address(address, prefix="cosmos")
        assert not is_valid_chain_address(address)

    def test_wrong_prefix_rejected(self):
        address = encode_chain_address(b"\x01" * 20, prefix="cosmos")
        with pytest.raises(ValidationError):
            decode_chain_address(address)

    def test_bad_checksum_rejected(self):
        address = evm_to_chain_address(TEST_EVM_ADDRESS)
        tampered = address[:-1] + ("q" if address[-1] != "q" else "p")
        assert not is_valid_chain_address(tampered)

    @pytest.mark.parametrize("value", ["", None, "6x1", "0x1234"])
    def test_invalid_inputs(self, value):
        assert not is_valid_chain_address(value)

    def test_invalid_evm_address(self):
        with pytest.raises(ValidationError) as exc_info:
            evm_to_chain_address("0x1234")
        assert exc_info.value.field == "evm_address"

    def test_uncompressed_pubkey_rejected(self):
        with pytest.raises(ValidationError):
            pubkey_to_chain_address(b"\x04" + b"\x01" * 64)
