"""
Derivation path parsing and iteration tests.
"""

import pytest

from lbb_sdk.accounts.hdpath import (
    DEFAULT_CHAIN_PATH,
    DEFAULT_EVM_PATH,
    HARDENED_OFFSET,
    HDPath,
    iterate_paths,
)
from lbb_sdk.engine.exceptions import InvalidDerivationPathError, ValidationError


class TestParse:

    def test_round_trip(self):
        assert str(HDPath.parse("m/44'/60'/0'/0/0")) == "m/44'/60'/0'/0/0"

    def test_hardened_markers(self):
        path = HDPath.parse("m/44h/118H/0'/0/1")
        assert path.components == (
            44 + HARDENED_OFFSET,
            118 + HARDENED_OFFSET,
            HARDENED_OFFSET,
            0,
            1,
        )
        assert str(path) == "m/44'/118'/0'/0/1"

    def test_leading_m_is_optional(self):
        assert HDPath.parse("44'/60'/0'/0/0") == DEFAULT_EVM_PATH

    def test_defaults(self):
        assert str(DEFAULT_EVM_PATH) == "m/44'/60'/0'/0/0"
        assert str(DEFAULT_CHAIN_PATH) == "m/44'/118'/0'/0/0"

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "m",
        "m//0",
        "m/44'/abc/0",
        "m/44'/-1/0",
        "m/2147483648",
        "m/" + "/".join(["0"] * 256),
    ])
    def test_rejects_malformed(self, text):
        with pytest.raises(InvalidDerivationPathError) as exc_info:
            HDPath.parse(text)
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.field == "path"


class TestIterator:

    def test_siblings_increment_last_component(self):
        paths = [str(p) for p in iterate_paths("m/44'/60'/0'/0/0", 3)]
        assert paths == ["m/44'/60'/0'/0/0", "m/44'/60'/0'/0/1", "m/44'/60'/0'/0/2"]

    def test_preserves_hardened_last_component(self):
        paths = [str(p) for p in HDPath.parse("m/44'/60'/5'").iterator(2)]
        assert paths == ["m/44'/60'/5'", "m/44'/60'/6'"]

    def test_unbounded_iterator(self):
        iterator = DEFAULT_CHAIN_PATH.iterator()
        first = [str(next(iterator)) for _ in range(4)]
        assert first[-1] == "m/44'/118'/0'/0/3"

    def test_sibling_out_of_range(self):
        with pytest.raises(InvalidDerivationPathError):
            DEFAULT_EVM_PATH.sibling(-1)
