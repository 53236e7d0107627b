"""
Recovery phrase validation and EVM key derivation tests.
"""

import pytest
from eth_account import Account

from lbb_sdk.accounts.mnemonic import (
    derive_evm,
    derive_private_key,
    generate_mnemonic,
    normalize_mnemonic,
    seed_from_mnemonic,
    validate_mnemonic,
)
from lbb_sdk.engine.exceptions import InvalidSeedError, ValidationError

from mocks import (
    SCENARIO_MNEMONIC,
    SCENARIO_PASSPHRASE,
    TEST_EVM_ADDRESS,
    TEST_EVM_PRIVATE_KEY,
    TEST_MNEMONIC,
)


class TestValidation:

    def test_valid_phrases(self):
        assert validate_mnemonic(TEST_MNEMONIC)
        assert validate_mnemonic(SCENARIO_MNEMONIC)

    def test_whitespace_and_case_are_normalized(self):
        messy = "  " + TEST_MNEMONIC.upper().replace(" ", "   ") + "\n"
        assert normalize_mnemonic(messy) == TEST_MNEMONIC
        assert validate_mnemonic(messy)

    @pytest.mark.parametrize("phrase", [
        "",
        "   ",
        "test " * 11 + "test",
        "notaword " * 12,
        TEST_MNEMONIC.replace("junk", "test"),
        None,
    ])
    def test_invalid_phrases(self, phrase):
        assert validate_mnemonic(phrase) is False

    def test_generated_phrase_is_valid_and_24_words(self):
        phrase = generate_mnemonic()
        assert len(phrase.split()) == 24
        assert validate_mnemonic(phrase)

    def test_generate_rejects_bad_strength(self):
        with pytest.raises(ValueError):
            generate_mnemonic(strength=100)


class TestSeed:

    def test_seed_length(self):
        assert len(seed_from_mnemonic(TEST_MNEMONIC)) == 64

    def test_invalid_phrase_raises(self):
        with pytest.raises(InvalidSeedError) as exc_info:
            seed_from_mnemonic("not a valid phrase")
        assert isinstance(exc_info.value, ValidationError)
        assert str(exc_info.value).startswith("invalid mnemonic")

    def test_passphrase_changes_seed(self):
        assert seed_from_mnemonic(TEST_MNEMONIC, "a") != seed_from_mnemonic(TEST_MNEMONIC, "b")


class TestDeriveEVM:

    def test_known_vector(self):
        key = derive_evm(TEST_MNEMONIC)
        assert key.address == TEST_EVM_ADDRESS
        assert key.private_key_hex == TEST_EVM_PRIVATE_KEY
        assert str(key.path) == "m/44'/60'/0'/0/0"

    def test_deterministic(self):
        first = derive_evm(SCENARIO_MNEMONIC, SCENARIO_PASSPHRASE)
        second = derive_evm(SCENARIO_MNEMONIC, SCENARIO_PASSPHRASE)
        assert first.address == second.address
        assert first.private_key == second.private_key

    def test_passphrase_sensitivity(self):
        assert derive_evm(SCENARIO_MNEMONIC, "one").address != derive_evm(SCENARIO_MNEMONIC, "two").address

    def test_matches_eth_account_hd_wallet(self):
        Account.enable_unaudited_hdwallet_features()
        expected = Account.from_mnemonic(
            SCENARIO_MNEMONIC,
            passphrase=SCENARIO_PASSPHRASE,
            account_path="m/44'/60'/0'/0/0",
        )
        assert derive_evm(SCENARIO_MNEMONIC, SCENARIO_PASSPHRASE).address == expected.address

    def test_other_path(self):
        assert derive_evm(TEST_MNEMONIC, path="m/44'/60'/0'/0/1").address != TEST_EVM_ADDRESS

    def test_private_key_hidden_from_repr(self):
        key = derive_evm(TEST_MNEMONIC)
        assert TEST_EVM_PRIVATE_KEY[2:] not in repr(key)

    def test_invalid_phrase(self):
        with pytest.raises(InvalidSeedError):
            derive_evm("abandon abandon abandon")

    def test_derive_private_key_accepts_string_path(self):
        seed = seed_from_mnemonic(TEST_MNEMONIC)
        assert derive_private_key(seed, "m/44'/60'/0'/0/0").hex() == TEST_EVM_PRIVATE_KEY[2:]
