"""
BIP-32 / BIP-44 derivation paths.

``HDPath`` parses and formats paths such as ``m/44'/60'/0'/0/0`` and can
iterate over successive sibling paths (``.../0``, ``.../1``, ...).
"""

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from ..engine.exceptions import InvalidDerivationPathError

#: First hardened child index.
HARDENED_OFFSET: int = 0x80000000

BIP44_PURPOSE: int = 44
EVM_COIN_TYPE: int = 60
COSMOS_COIN_TYPE: int = 118

_MAX_DEPTH: int = 255


@dataclass(frozen=True)
class HDPath:
    """
    Immutable derivation path.

    Components are stored as raw child indices; hardened components carry
    :data:`HARDENED_OFFSET`.

    Example::

        path = HDPath.parse("m/44'/60'/0'/0/0")
        str(path.sibling(3))          # "m/44'/60'/0'/0/3"
        [str(p) for p in path.iterator(2)]
        # ["m/44'/60'/0'/0/0", "m/44'/60'/0'/0/1"]
    """

    components: Tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> "HDPath":
        """
        Parse a path string.

        Accepts an optional leading ``m/`` and ``'``, ``h`` or ``H`` as the
        hardened marker.

        Raises:
            InvalidDerivationPathError: On empty input, empty segments,
                non-numeric components, out-of-range indices or excessive depth.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidDerivationPathError("derivation path is empty", path=text)

        raw = text.strip()
        segments = raw.split("/")
        if segments[0] == "m":
            segments = segments[1:]
        if not segments:
            raise InvalidDerivationPathError("derivation path has no components", path=raw)
        if len(segments) > _MAX_DEPTH:
            raise InvalidDerivationPathError("derivation path is too deep", path=raw)

        components = []
        for segment in segments:
            hardened = segment[-1:] in ("'", "h", "H")
            digits = segment[:-1] if hardened else segment
            if not digits.isdigit() or not digits.isascii():
                raise InvalidDerivationPathError(
                    f"invalid path component {segment!r}", path=raw
                )
            index = int(digits)
            if index >= HARDENED_OFFSET:
                raise InvalidDerivationPathError(
                    f"path component {segment!r} out of range", path=raw
                )
            components.append(index + HARDENED_OFFSET if hardened else index)

        return cls(tuple(components))

    @classmethod
    def bip44(
        cls,
        coin_type: int,
        account: int = 0,
        change: int = 0,
        address_index: int = 0,
    ) -> "HDPath":
        """Build ``m/44'/<coin_type>'/<account>'/<change>/<address_index>``."""
        return cls.parse(f"m/{BIP44_PURPOSE}'/{coin_type}'/{account}'/{change}/{address_index}")

    @staticmethod
    def is_hardened(index: int) -> bool:
        return index >= HARDENED_OFFSET

    def __str__(self) -> str:
        parts = ["m"]
        for index in self.components:
            if self.is_hardened(index):
                parts.append(f"{index - HARDENED_OFFSET}'")
            else:
                parts.append(str(index))
        return "/".join(parts)

    def sibling(self, offset: int) -> "HDPath":
        """
        Return the path whose last component is moved by ``offset``.

        Raises:
            InvalidDerivationPathError: If the result leaves the valid index
                range of the last component's hardened-ness.
        """
        last = self.components[-1]
        hardened = self.is_hardened(last)
        base = last - HARDENED_OFFSET if hardened else last
        index = base + offset
        if index < 0 or index >= HARDENED_OFFSET:
            raise InvalidDerivationPathError("sibling index out of range", path=str(self))
        new_last = index + HARDENED_OFFSET if hardened else index
        return HDPath(self.components[:-1] + (new_last,))

    def iterator(self, count: Union[int, None] = None) -> Iterator["HDPath"]:
        """
        Yield this path followed by its successive siblings.

        Args:
            count: Number of paths to yield; unbounded when ``None``.
        """
        produced = 0
        current = self
        while count is None or produced < count:
            yield current
            produced += 1
            if count is not None and produced >= count:
                return
            current = current.sibling(1)


DEFAULT_EVM_PATH = HDPath.bip44(EVM_COIN_TYPE)
DEFAULT_CHAIN_PATH = HDPath.bip44(COSMOS_COIN_TYPE)


def iterate_paths(base: Union[str, HDPath], count: Union[int, None] = None) -> Iterator[HDPath]:
    """Iterate sibling paths starting from ``base`` (string or :class:`HDPath`)."""
    path = base if isinstance(base, HDPath) else HDPath.parse(base)
    return path.iterator(count)
