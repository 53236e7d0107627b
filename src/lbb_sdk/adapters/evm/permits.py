"""
EVM Permit Signing Utilities

Local EIP-712 signing for the certificate contract's gasless entry points.
The key holder signs; a separate broadcaster executes and pays gas (see
:mod:`lbb_sdk.adapters.evm.executors`).

Exported helpers
----------------
sign_permit
    Sign ``Permit(owner,spender,tokenId,nonce,deadline)`` offline and return
    a :class:`SignedPermit` carrying every signed field plus ``{v, r, s, deadline}``.

sign_permit_for_all
    Same for ``PermitForAll(owner,operator,approved,nonce,deadline)``.

create_permit / create_permit_for_all
    Fetch the chain id and the owner's permit nonce from the contract, then sign.

build_permit_typed_data / build_permit_for_all_typed_data
    Typed-data envelopes without signing, for external signers.

permit_digest / sign_permit_digest
    The final EIP-712 digest and raw digest signing.

Signing never checks the deadline or any other business rule; that is the
verifier's job (:mod:`lbb_sdk.adapters.evm.verifies`).
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_keys import keys
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import is_address, keccak, to_checksum_address
from web3 import AsyncWeb3

from ...accounts.identity import IdentityCapability
from ...engine.exceptions import ChainCommunicationError, SigningError, ValidationError
from .CERTIFICATE_ABI import get_nonces_abi
from .constants import PERMIT_DOMAIN_VERSION, RECOVERY_ID_OFFSET
from .schemas import PermitSignature, SignedPermit, SignedPermitForAll
from .standards import (
    EIP712Domain,
    PermitForAllMessage,
    PermitForAllTypedData,
    PermitMessage,
    PermitTypedData,
)

logger = logging.getLogger(__name__)

TypedData = Union[PermitTypedData, PermitForAllTypedData, Mapping[str, Any]]


def _checksum(address: str, field: str) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise ValidationError(f"invalid address: {address!r}", field=field)
    return to_checksum_address(address)


# ---------------------------------------------------------------------------
# Typed data and digest
# ---------------------------------------------------------------------------

def build_permit_typed_data(
    *,
    contract_name: str,
    contract_address: str,
    chain_id: int,
    owner: str,
    spender: str,
    token_id: int,
    nonce: int,
    deadline: int,
) -> PermitTypedData:
    """
    Wrap single-token permit fields in an EIP-712 envelope without signing.

    Example::

        typed_data = build_permit_typed_data(
            contract_name="Certificate", contract_address=contract,
            chain_id=150, owner=alice, spender=relayer,
            token_id=1, nonce=0, deadline=1_900_000_000,
        )
        payload = typed_data.to_dict()   # hand off to external signer
    """
    domain = EIP712Domain(
        name=contract_name,
        version=PERMIT_DOMAIN_VERSION,
        chainId=chain_id,
        verifyingContract=_checksum(contract_address, "contract_address"),
    )
    message = PermitMessage(
        owner=_checksum(owner, "owner"),
        spender=_checksum(spender, "spender"),
        tokenId=token_id,
        nonce=nonce,
        deadline=deadline,
    )
    return PermitTypedData(domain=domain, message=message)


def build_permit_for_all_typed_data(
    *,
    contract_name: str,
    contract_address: str,
    chain_id: int,
    owner: str,
    operator: str,
    approved: bool,
    nonce: int,
    deadline: int,
) -> PermitForAllTypedData:
    """Wrap operator-approval permit fields in an EIP-712 envelope without signing."""
    domain = EIP712Domain(
        name=contract_name,
        version=PERMIT_DOMAIN_VERSION,
        chainId=chain_id,
        verifyingContract=_checksum(contract_address, "contract_address"),
    )
    message = PermitForAllMessage(
        owner=_checksum(owner, "owner"),
        operator=_checksum(operator, "operator"),
        approved=approved,
        nonce=nonce,
        deadline=deadline,
    )
    return PermitForAllTypedData(domain=domain, message=message)


def permit_digest(typed_data: TypedData) -> bytes:
    """
    EIP-712 digest: ``keccak(0x19 0x01 || domainSeparator || structHash)``.

    Args:
        typed_data: Typed-data dataclass or its ``to_dict()`` form.

    Returns:
        bytes: 32-byte digest.
    """
    payload = typed_data.to_dict() if hasattr(typed_data, "to_dict") else dict(typed_data)
    signable = encode_typed_data(full_message=payload)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def sign_permit_digest(private_key: Union[str, bytes], digest: bytes) -> Tuple[int, int, int]:
    """
    Sign a 32-byte digest with a raw private key.

    Returns:
        Tuple[int, int, int]: ``(v, r, s)`` with ``v`` in ``{27, 28}``.

    Raises:
        SigningError: If the key or the digest is malformed.
    """
    if len(digest) != 32:
        raise SigningError(f"digest must be 32 bytes, got {len(digest)}")
    try:
        key = keys.PrivateKey(bytes(Account.from_key(private_key).key))
    except (ValueError, TypeError, KeyValidationError) as e:
        raise SigningError("invalid private key") from e
    signature = key.sign_msg_hash(digest)
    return signature.v + RECOVERY_ID_OFFSET, signature.r, signature.s


def _resolve_signer(
    identity: Optional[IdentityCapability],
    private_key: Optional[Union[str, bytes]],
    chain_id: Optional[int],
) -> Tuple[str, int]:
    if (identity is None) == (private_key is None):
        raise ValidationError("pass exactly one of identity or private_key", field="identity")
    if identity is not None:
        return identity.evm_address, chain_id if chain_id is not None else identity.evm_chain_id
    if chain_id is None:
        raise ValidationError("chain_id is required when signing with a private key", field="chain_id")
    try:
        owner = Account.from_key(private_key).address
    except (ValueError, TypeError, KeyValidationError) as e:
        raise ValidationError("invalid private key", field="private_key") from e
    return owner, chain_id


def _sign(
    identity: Optional[IdentityCapability],
    private_key: Optional[Union[str, bytes]],
    digest: bytes,
) -> Tuple[int, int, int]:
    if identity is not None:
        return identity.sign_digest(digest)
    return sign_permit_digest(private_key, digest)


def _signature(signature_type: str, vrs: Tuple[int, int, int], deadline: int) -> PermitSignature:
    v, r, s = vrs
    return PermitSignature(
        signature_type=signature_type,
        v=v,
        r="0x" + r.to_bytes(32, "big").hex(),
        s="0x" + s.to_bytes(32, "big").hex(),
        deadline=deadline,
    )


# ---------------------------------------------------------------------------
# Offline signers
# ---------------------------------------------------------------------------

def sign_permit(
    *,
    contract_name: str,
    contract_address: str,
    spender: str,
    token_id: int,
    deadline: int,
    nonce: int,
    identity: Optional[IdentityCapability] = None,
    private_key: Optional[Union[str, bytes]] = None,
    chain_id: Optional[int] = None,
) -> SignedPermit:
    """
    Sign a single-token permit offline.

    Signing is performed entirely in-process; no RPC endpoint is needed. The
    owner is the address of the signing key.

    Args:
        contract_name: EIP-712 domain ``name`` of the certificate contract.
        contract_address: Verifying contract.
        spender: Account allowed to transfer or burn the token.
        token_id: Token covered by the permit.
        deadline: Unix timestamp after which the permit is invalid. Not checked here.
        nonce: Owner's current permit nonce on the contract.
        identity: Signing identity (mutually exclusive with ``private_key``).
        private_key: Raw signing key (mutually exclusive with ``identity``).
        chain_id: EVM chain id; defaults to the identity's chain id.

    Returns:
        SignedPermit: All signed fields plus ``PermitSignature(v, r, s, deadline)``.

    Raises:
        ValidationError: On a malformed address or missing signer.
        SigningError: If signing fails.

    Example::

        permit = sign_permit(
            identity=alice,
            contract_name="Certificate",
            contract_address=contract,
            spender=relayer.evm_address,
            token_id=1,
            deadline=int(time.time()) + 3600,
            nonce=0,
        )
        permit.signature.to_packed_hex()
    """
    owner, resolved_chain_id = _resolve_signer(identity, private_key, chain_id)
    typed_data = build_permit_typed_data(
        contract_name=contract_name,
        contract_address=contract_address,
        chain_id=resolved_chain_id,
        owner=owner,
        spender=spender,
        token_id=token_id,
        nonce=nonce,
        deadline=deadline,
    )
    vrs = _sign(identity, private_key, permit_digest(typed_data))
    return SignedPermit(
        owner=typed_data.message.owner,
        spender=typed_data.message.spender,
        token_id=token_id,
        nonce=nonce,
        deadline=deadline,
        chain_id=resolved_chain_id,
        contract_name=contract_name,
        contract_address=typed_data.domain.verifyingContract,
        domain_version=typed_data.domain.version,
        signature=_signature("Permit", vrs, deadline),
    )


def sign_permit_for_all(
    *,
    contract_name: str,
    contract_address: str,
    operator: str,
    approved: bool,
    deadline: int,
    nonce: int,
    identity: Optional[IdentityCapability] = None,
    private_key: Optional[Union[str, bytes]] = None,
    chain_id: Optional[int] = None,
) -> SignedPermitForAll:
    """
    Sign an operator-approval permit offline.

    Same contract as :func:`sign_permit` with ``operator`` and ``approved``
    in place of ``spender`` and ``token_id``.
    """
    owner, resolved_chain_id = _resolve_signer(identity, private_key, chain_id)
    typed_data = build_permit_for_all_typed_data(
        contract_name=contract_name,
        contract_address=contract_address,
        chain_id=resolved_chain_id,
        owner=owner,
        operator=operator,
        approved=approved,
        nonce=nonce,
        deadline=deadline,
    )
    vrs = _sign(identity, private_key, permit_digest(typed_data))
    return SignedPermitForAll(
        owner=typed_data.message.owner,
        operator=typed_data.message.operator,
        approved=approved,
        nonce=nonce,
        deadline=deadline,
        chain_id=resolved_chain_id,
        contract_name=contract_name,
        contract_address=typed_data.domain.verifyingContract,
        domain_version=typed_data.domain.version,
        signature=_signature("PermitForAll", vrs, deadline),
    )


# ---------------------------------------------------------------------------
# Chain-aware signers
# ---------------------------------------------------------------------------

async def get_permit_nonce(web3: AsyncWeb3, contract_address: str, owner: str) -> int:
    """
    Read ``nonces(owner)`` from the contract.

    This counter only moves when a permit is consumed on-chain; it is not the
    account nonce.

    Raises:
        ValidationError: On a malformed address.
        ChainCommunicationError: If the call fails.
    """
    contract = web3.eth.contract(
        address=_checksum(contract_address, "contract_address"), abi=get_nonces_abi()
    )
    try:
        return int(await contract.functions.nonces(_checksum(owner, "owner")).call())
    except Exception as e:
        raise ChainCommunicationError(
            f"cannot read permit nonce: {e}",
            address=owner,
            contract=contract_address,
            endpoint="nonces",
        ) from e


async def _chain_context(identity: IdentityCapability, web3: Optional[AsyncWeb3], contract_address: str) -> Dict[str, int]:
    web3 = web3 or identity.client.web3
    try:
        chain_id = int(await web3.eth.chain_id)
    except Exception as e:
        raise ChainCommunicationError(f"cannot fetch chain id: {e}", endpoint="eth_chainId") from e
    nonce = await get_permit_nonce(web3, contract_address, identity.evm_address)
    logger.debug("Permit context for %s on %s: chain %d, nonce %d",
                 identity.evm_address, contract_address, chain_id, nonce)
    return {"chain_id": chain_id, "nonce": nonce}


async def create_permit(
    identity: IdentityCapability,
    *,
    contract_name: str,
    contract_address: str,
    spender: str,
    token_id: int,
    deadline: int,
    web3: Optional[AsyncWeb3] = None,
) -> SignedPermit:
    """
    Fetch the chain id and the owner's permit nonce, then :func:`sign_permit`.

    Raises:
        ChainCommunicationError: If either read fails.
    """
    context = await _chain_context(identity, web3, contract_address)
    return sign_permit(
        identity=identity,
        contract_name=contract_name,
        contract_address=contract_address,
        spender=spender,
        token_id=token_id,
        deadline=deadline,
        **context,
    )


async def create_permit_for_all(
    identity: IdentityCapability,
    *,
    contract_name: str,
    contract_address: str,
    operator: str,
    approved: bool,
    deadline: int,
    web3: Optional[AsyncWeb3] = None,
) -> SignedPermitForAll:
    """Fetch the chain id and the owner's permit nonce, then :func:`sign_permit_for_all`."""
    context = await _chain_context(identity, web3, contract_address)
    return sign_permit_for_all(
        identity=identity,
        contract_name=contract_name,
        contract_address=contract_address,
        operator=operator,
        approved=approved,
        deadline=deadline,
        **context,
    )
