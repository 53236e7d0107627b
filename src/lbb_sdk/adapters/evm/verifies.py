"""
Off-chain permit verification.

Mirrors what the certificate contract checks before it consumes a permit:

    1. structure: addresses and signature components
    2. domain: chain id and verifying contract
    3. owner: the permit claims the expected owner
    4. signature: the recovered signer equals the owner
    5. time window: the deadline has not passed
    6. nonce: the permit nonce equals the current on-chain nonce

Checks 5 and 6 run only when the corresponding context is supplied.
Replay protection itself lives on-chain; check 6 is an early warning.
"""

import time
from typing import Any, Dict, Optional, Tuple, Union

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from ...schemas.bases import VerificationStatus
from .constants import RECOVERY_ID_OFFSET
from .schemas import PermitSignature, PermitVerificationResult, SignedPermit, SignedPermitForAll

AnyPermit = Union[SignedPermit, SignedPermitForAll]


def recover_digest_signer(digest: bytes, v: int, r: int, s: int) -> str:
    """
    Recover the checksummed signer of a raw 32-byte digest.

    Raises:
        ValueError: If the signature components are not recoverable.
    """
    recovery_id = v - RECOVERY_ID_OFFSET if v >= RECOVERY_ID_OFFSET else v
    try:
        signature = keys.Signature(vrs=(recovery_id, r, s))
        return signature.recover_public_key_from_msg_hash(digest).to_checksum_address()
    except (BadSignature, EthKeysValidationError) as e:
        raise ValueError(f"unrecoverable signature: {e}") from e


def _vrs(signature: PermitSignature) -> Tuple[int, int, int]:
    return signature.v, int.from_bytes(signature.r_bytes, "big"), int.from_bytes(signature.s_bytes, "big")


def recover_permit_signer(permit: AnyPermit) -> str:
    """
    Recover the address that signed ``permit``.

    Raises:
        ValueError: If the typed data cannot be encoded or the signature is malformed.
    """
    signable = encode_typed_data(full_message=permit.to_typed_data().to_dict())
    try:
        return Account.recover_message(signable, vrs=_vrs(permit.signature))
    except (BadSignature, EthKeysValidationError) as e:
        raise ValueError(f"unrecoverable signature: {e}") from e


def verify_permit_signature(owner: str, signature: PermitSignature, digest: bytes) -> bool:
    """True when ``signature`` over ``digest`` recovers to ``owner``."""
    try:
        recovered = recover_digest_signer(digest, *_vrs(signature))
    except ValueError:
        return False
    return recovered.lower() == owner.lower()


def verify_permit(
    permit: AnyPermit,
    *,
    expected_chain_id: int,
    expected_contract: str,
    expected_owner: Optional[str] = None,
    current_time: Optional[int] = None,
    on_chain_nonce: Optional[int] = None,
) -> PermitVerificationResult:
    """
    Check a signed permit the way the verifying contract would.

    Args:
        permit: Signed permit to check.
        expected_chain_id: Chain the permit is about to be executed on.
        expected_contract: Contract that will verify it.
        expected_owner: Owner the caller expects; defaults to the permit's owner.
        current_time: Unix time used for the deadline check; wall clock when omitted.
        on_chain_nonce: Current ``nonces(owner)``; the nonce check is skipped when omitted.

    Returns:
        PermitVerificationResult: ``SUCCESS``, ``INVALID_SIGNATURE``,
        ``DOMAIN_MISMATCH``, ``EXPIRED`` or ``REPLAY_ATTACK``.
    """
    now = int(current_time) if current_time is not None else int(time.time())

    def _fail(
        status: VerificationStatus,
        message: str,
        error_details: Optional[Dict[str, Any]] = None,
        recovered: Optional[str] = None,
    ) -> PermitVerificationResult:
        return PermitVerificationResult(
            status=status,
            is_valid=False,
            message=message,
            error_details=error_details,
            recovered_signer=recovered,
            owner=permit.owner,
            nonce=permit.nonce,
        )

    # 1. Structure
    try:
        permit.validate_structure()
    except ValueError as exc:
        return _fail(VerificationStatus.INVALID_SIGNATURE, f"Malformed permit: {exc}", {"error": str(exc)})

    # 2. Domain
    if permit.chain_id != expected_chain_id:
        return _fail(
            VerificationStatus.DOMAIN_MISMATCH,
            f"Permit signed for chain {permit.chain_id}, expected {expected_chain_id}.",
            {"chain_id": permit.chain_id, "expected_chain_id": expected_chain_id},
        )
    if permit.contract_address.lower() != expected_contract.lower():
        return _fail(
            VerificationStatus.DOMAIN_MISMATCH,
            "Permit signed for another verifying contract.",
            {"contract": permit.contract_address, "expected_contract": expected_contract},
        )

    # 3. Owner
    owner = expected_owner or permit.owner
    if permit.owner.lower() != owner.lower():
        return _fail(
            VerificationStatus.INVALID_SIGNATURE,
            "Permit owner does not match the expected owner.",
            {"owner": permit.owner, "expected_owner": owner},
        )

    # 4. Signature
    try:
        recovered = recover_permit_signer(permit)
    except ValueError as exc:
        return _fail(
            VerificationStatus.INVALID_SIGNATURE,
            f"Signature recovery failed: {exc}",
            {"error": str(exc)},
        )
    if recovered.lower() != owner.lower():
        return _fail(
            VerificationStatus.INVALID_SIGNATURE,
            "Signature invalid: signer does not match owner.",
            {"expected": owner, "recovered": recovered},
            recovered=recovered,
        )

    # 5. Time window
    if now > permit.deadline:
        return _fail(
            VerificationStatus.EXPIRED,
            f"Permit has expired: current_time={now} > deadline={permit.deadline}.",
            {"current_time": now, "deadline": permit.deadline},
            recovered=recovered,
        )

    # 6. Nonce
    if on_chain_nonce is not None and int(on_chain_nonce) != permit.nonce:
        return _fail(
            VerificationStatus.REPLAY_ATTACK,
            "Nonce mismatch: permit nonce does not match on-chain nonce.",
            {"provided_nonce": permit.nonce, "on_chain_nonce": on_chain_nonce},
            recovered=recovered,
        )

    return PermitVerificationResult(
        status=VerificationStatus.SUCCESS,
        is_valid=True,
        message="Permit valid: signer verified as owner.",
        recovered_signer=recovered,
        owner=permit.owner,
        nonce=permit.nonce,
    )
