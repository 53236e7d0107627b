"""
ABI packing for contract calls and deployments.

``encode_function_call`` produces ``selector || abi.encode(args)`` and
``encode_deploy_data`` appends the encoded constructor arguments to the
contract bytecode. Address arguments are checksummed before encoding.
"""

from typing import Any, Dict, List, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import function_abi_to_4byte_selector, is_address, to_checksum_address
from eth_utils.abi import collapse_if_tuple

from ...engine.exceptions import PackingError


def _strip_hex(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def _find_entry(abi: Sequence[Dict[str, Any]], name: str) -> Dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise PackingError(f"function {name!r} not found in ABI", function=name)


def _find_constructor(abi: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "constructor":
            return entry
    return {"type": "constructor", "inputs": []}


def _normalize(types: List[str], args: Sequence[Any]) -> List[Any]:
    normalized = []
    for abi_type, value in zip(types, args):
        if abi_type == "address" and isinstance(value, str) and is_address(value):
            value = to_checksum_address(value)
        normalized.append(value)
    return normalized


def encode_arguments(entry: Dict[str, Any], args: Sequence[Any]) -> bytes:
    """
    ABI-encode ``args`` against the inputs of one ABI entry.

    Raises:
        PackingError: On an argument count or type mismatch.
    """
    name = entry.get("name", entry.get("type"))
    types = [collapse_if_tuple(item) for item in entry.get("inputs", [])]
    if len(types) != len(args):
        raise PackingError(
            f"{name} expects {len(types)} arguments, got {len(args)}",
            function=name,
        )
    try:
        return encode(types, _normalize(types, args))
    except (AbiEncodingError, TypeError, ValueError, OverflowError) as e:
        raise PackingError(f"cannot encode arguments for {name}: {e}", function=name) from e


def encode_function_call(abi: Sequence[Dict[str, Any]], name: str, args: Sequence[Any]) -> str:
    """
    Call data for ``name(args)``.

    Args:
        abi: Contract ABI (or a fragment containing the function).
        name: Function name.
        args: Positional arguments in ABI order.

    Returns:
        str: 0x-prefixed call data.

    Raises:
        PackingError: If the function is missing or the arguments do not match.

    Example::

        data = encode_function_call(get_mint_abi(), "safeMint", [owner, 1])
    """
    entry = _find_entry(abi, name)
    selector = function_abi_to_4byte_selector(entry)
    return "0x" + (selector + encode_arguments(entry, args)).hex()


def encode_deploy_data(bytecode: str, abi: Sequence[Dict[str, Any]], args: Sequence[Any]) -> str:
    """
    Deployment data: contract bytecode followed by the encoded constructor arguments.

    Raises:
        PackingError: If the bytecode is not hex or the arguments do not match.
    """
    code = _strip_hex(bytecode or "")
    if not code:
        raise PackingError("contract bytecode must not be empty", function="constructor")
    try:
        bytes.fromhex(code)
    except ValueError as e:
        raise PackingError("contract bytecode is not valid hex", function="constructor") from e
    return "0x" + code + encode_arguments(_find_constructor(abi), args).hex()
