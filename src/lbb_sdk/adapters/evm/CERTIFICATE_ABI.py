"""
Certificate NFT Contract ABI Module

Simplified ABI fragments for the ERC-721 certificate contract: minting,
transfers, burning, ownership queries and the permit (gasless) entry points.

Usage:
    from CERTIFICATE_ABI import (
        get_certificate_abi,
        get_nonces_abi,
        get_transfer_with_permit_abi,
    )

    # Whole contract surface used by the SDK
    abi = get_certificate_abi()

    # Read the permit nonce of an owner
    nonces_abi = get_nonces_abi()
"""

from typing import Any, Dict, List


def _inputs(*pairs: str) -> List[Dict[str, str]]:
    return [{"name": pairs[i], "type": pairs[i + 1]} for i in range(0, len(pairs), 2)]


def get_constructor_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the certificate contract constructor.

    Returns:
        List[Dict[str, Any]]: Constructor taking name, symbol, base URI,
        contract URI and initial owner.
    """
    return [
        {
            "type": "constructor",
            "stateMutability": "nonpayable",
            "inputs": _inputs(
                "name", "string",
                "symbol", "string",
                "baseURI", "string",
                "contractURI", "string",
                "initialOwner", "address",
            ),
        }
    ]


def get_nonces_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ``nonces(address)``, the permit nonce of an owner.

    Returns:
        List[Dict[str, Any]]: ABI for the nonces view function.

    Example:
        abi = get_nonces_abi()
        contract = web3.eth.contract(address=contract_address, abi=abi)
        nonce = await contract.functions.nonces(owner).call()
    """
    return [
        {
            "name": "nonces",
            "type": "function",
            "stateMutability": "view",
            "inputs": _inputs("owner", "address"),
            "outputs": [{"name": "", "type": "uint256"}],
        }
    ]


def get_owner_of_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-721 ``ownerOf(tokenId)``.

    Returns:
        List[Dict[str, Any]]: ABI for the ownerOf view function.
    """
    return [
        {
            "name": "ownerOf",
            "type": "function",
            "stateMutability": "view",
            "inputs": _inputs("tokenId", "uint256"),
            "outputs": [{"name": "", "type": "address"}],
        }
    ]


def get_mint_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ``safeMint(to, tokenId)``.

    Returns:
        List[Dict[str, Any]]: ABI for the safeMint function.
    """
    return [
        {
            "name": "safeMint",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs("to", "address", "tokenId", "uint256"),
            "outputs": [],
        }
    ]


def get_transfer_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-721 ``safeTransferFrom(from, to, tokenId)``.

    Returns:
        List[Dict[str, Any]]: ABI for the three-argument safeTransferFrom.
    """
    return [
        {
            "name": "safeTransferFrom",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs("from", "address", "to", "address", "tokenId", "uint256"),
            "outputs": [],
        }
    ]


def get_burn_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ERC-721 ``burn(tokenId)``.

    Returns:
        List[Dict[str, Any]]: ABI for the burn function.
    """
    return [
        {
            "name": "burn",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs("tokenId", "uint256"),
            "outputs": [],
        }
    ]


def get_permit_for_all_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ``permitForAll(owner, operator, approved, deadline, v, r, s)``.

    The gasless counterpart of ``setApprovalForAll``; any account may submit it.

    Returns:
        List[Dict[str, Any]]: ABI for the permitForAll function.
    """
    return [
        {
            "name": "permitForAll",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs(
                "owner", "address",
                "operator", "address",
                "approved", "bool",
                "deadline", "uint256",
                "v", "uint8",
                "r", "bytes32",
                "s", "bytes32",
            ),
            "outputs": [],
        }
    ]


def get_transfer_with_permit_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ``transferWithPermit(from, to, tokenId, deadline, v, r, s)``.

    Returns:
        List[Dict[str, Any]]: ABI for the transferWithPermit function.
    """
    return [
        {
            "name": "transferWithPermit",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs(
                "from", "address",
                "to", "address",
                "tokenId", "uint256",
                "deadline", "uint256",
                "v", "uint8",
                "r", "bytes32",
                "s", "bytes32",
            ),
            "outputs": [],
        }
    ]


def get_burn_with_permit_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for ``burnWithPermit(owner, tokenId, deadline, v, r, s)``.

    Returns:
        List[Dict[str, Any]]: ABI for the burnWithPermit function.
    """
    return [
        {
            "name": "burnWithPermit",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": _inputs(
                "owner", "address",
                "tokenId", "uint256",
                "deadline", "uint256",
                "v", "uint8",
                "r", "bytes32",
                "s", "bytes32",
            ),
            "outputs": [],
        }
    ]


def get_certificate_abi() -> List[Dict[str, Any]]:
    """
    Get every fragment above as one ABI list.

    Returns:
        List[Dict[str, Any]]: Combined certificate contract ABI.
    """
    return (
        get_constructor_abi()
        + get_nonces_abi()
        + get_owner_of_abi()
        + get_mint_abi()
        + get_transfer_abi()
        + get_burn_abi()
        + get_permit_for_all_abi()
        + get_transfer_with_permit_abi()
        + get_burn_with_permit_abi()
    )
