from dataclasses import dataclass, field
from typing import Any, Dict, List

from .constants import (
    EIP712_DOMAIN_TYPE,
    PERMIT_DOMAIN_VERSION,
    PERMIT_FOR_ALL_TYPE,
    PERMIT_TYPE,
)


# -----------------------------
# EIP-712 Domain
# -----------------------------

@dataclass
class EIP712Domain:
    """
    EIP-712 domain separator.
    Binds a signature to one contract on one chain.
    """
    name: str
    chainId: int
    verifyingContract: str
    version: str = PERMIT_DOMAIN_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


# -----------------------------
# Permit (single token)
# -----------------------------

@dataclass
class PermitMessage:
    """
    Message payload of ``Permit(owner,spender,tokenId,nonce,deadline)``.

    Attributes:
        owner: Token owner signing the permit.
        spender: Account allowed to act on the token.
        tokenId: Token the permit covers.
        nonce: Owner's permit nonce on the contract.
        deadline: Unix timestamp after which the permit is invalid.
    """
    owner: str
    spender: str
    tokenId: int
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "spender": self.spender,
            "tokenId": self.tokenId,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


@dataclass
class PermitTypedData:
    """
    Full EIP-712 typed data for a single-token permit.

    ``to_dict()`` is accepted by ``eth_account.messages.encode_typed_data``
    and ``eth_signTypedData_v4``.
    """
    domain: EIP712Domain
    message: PermitMessage
    types: Dict[str, List[Dict[str, str]]] = field(default_factory=lambda: {
        "EIP712Domain": EIP712_DOMAIN_TYPE,
        "Permit": PERMIT_TYPE,
    })
    primaryType: str = "Permit"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "primaryType": self.primaryType,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }


# -----------------------------
# PermitForAll (operator approval)
# -----------------------------

@dataclass
class PermitForAllMessage:
    """
    Message payload of ``PermitForAll(owner,operator,approved,nonce,deadline)``.
    """
    owner: str
    operator: str
    approved: bool
    nonce: int
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "operator": self.operator,
            "approved": self.approved,
            "nonce": self.nonce,
            "deadline": self.deadline,
        }


@dataclass
class PermitForAllTypedData:
    """Full EIP-712 typed data for an operator approval permit."""
    domain: EIP712Domain
    message: PermitForAllMessage
    types: Dict[str, List[Dict[str, str]]] = field(default_factory=lambda: {
        "EIP712Domain": EIP712_DOMAIN_TYPE,
        "PermitForAll": PERMIT_FOR_ALL_TYPE,
    })
    primaryType: str = "PermitForAll"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "primaryType": self.primaryType,
            "domain": self.domain.to_dict(),
            "message": self.message.to_dict(),
        }
