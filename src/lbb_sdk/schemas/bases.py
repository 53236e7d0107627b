"""
Base Schema Models for the LBB SDK

This module defines the fundamental base classes that all other schema models
inherit from. It provides the foundation for type safety, validation, and
consistent serialization across both chains handled by the SDK.

Core Classes:
    - CanonicalModel: Pydantic base model with deterministic JSON serialization
    - BaseSignature: Abstract signature component model
    - BaseVerificationResult: Abstract off-chain verification result model
    - BaseTransactionConfirmation: Abstract transaction result (``TxResult``)

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    The canonical form has sorted keys and no insignificant whitespace, so
    two equal models always serialize to the same bytes. The message-chain
    sign documents depend on this property.

    Example:
        class MyModel(CanonicalModel):
            name: str
            value: int

        MyModel(name="test", value=123).to_canonical_json()
        # '{"name":"test","value":123}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to a canonical JSON string.

        ``model_dump(mode="json", by_alias=True)`` turns enums, datetimes and
        nested models into plain JSON types; ``json.dumps`` then sorts keys
        and drops whitespace.

        Returns:
            str: JSON string with sorted keys and compact separators.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(
            data,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to dictionary representation.

        Returns:
            Dict[str, Any]: Dictionary with all model fields.
        """
        return self.model_dump()


def canonical_json(data: Any) -> str:
    """Serialize plain data with sorted keys and compact separators."""
    return json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


class BaseSignature(CanonicalModel, ABC):
    """
    Abstract base class for signature components.

    Attributes:
        signature_type: The signing scheme (e.g. ``"EIP712Permit"``)
        created_at: Timestamp when the signature was created
    """

    signature_type: str = Field(..., description="Signing scheme identifier")
    created_at: datetime = Field(default_factory=datetime.now, description="Signature creation timestamp")

    @abstractmethod
    def validate_format(self) -> bool:
        """
        Validate the signature components for the scheme.

        Returns:
            bool: True if signature format is valid.

        Raises:
            ValueError: If signature format is invalid with descriptive message.
        """


class VerificationStatus(str, Enum):
    """
    Enumeration of possible off-chain verification statuses.

    Attributes:
        SUCCESS: Signature is valid and every checked condition holds
        INVALID_SIGNATURE: Signature is malformed or recovers to another signer
        DOMAIN_MISMATCH: Signature was produced for another chain or contract
        EXPIRED: Permit deadline has passed
        REPLAY_ATTACK: Nonce does not match the current on-chain nonce
    """
    SUCCESS = "success"
    INVALID_SIGNATURE = "invalid_signature"
    DOMAIN_MISMATCH = "domain_mismatch"
    EXPIRED = "expired"
    REPLAY_ATTACK = "replay_attack"


class BaseVerificationResult(CanonicalModel, ABC):
    """
    Abstract base class for signature verification results.

    Attributes:
        verification_type: Type of verification (e.g. ``"evm_permit"``)
        status: Verification result status
        is_valid: Whether verification was successful
        message: Human-readable status message
        error_details: Detailed error information if verification failed
        verified_at: Timestamp when verification was performed
    """

    verification_type: str = Field(..., description="Type of verification")
    status: VerificationStatus = Field(..., description="Verification result status")
    is_valid: bool = Field(..., description="Whether the signature is valid and all checks passed")
    message: str = Field(..., description="Human-readable status message")
    error_details: Optional[Dict[str, Any]] = Field(None, description="Detailed error information")
    verified_at: datetime = Field(default_factory=datetime.now, description="Verification timestamp")

    def is_success(self) -> bool:
        """
        Check if verification was successful.

        Returns:
            bool: True if verification was successful, False otherwise.

        Example:
            result = verify_permit(permit, expected_chain_id=150, ...)
            if result.is_success():
                await executor.transfer_with_permit(permit)
        """
        return self.is_valid and self.status == VerificationStatus.SUCCESS

    def get_error_message(self) -> Optional[str]:
        """
        Get formatted error message from verification result.

        Returns:
            Optional[str]: Error message if verification failed, None if successful.
        """
        if self.is_success():
            return None

        error_msg = f"Verification failed: {self.message}"
        if self.error_details:
            details_str = json.dumps(self.error_details, indent=2, default=str)
            error_msg += f"\nDetails: {details_str}"
        return error_msg


class TransactionStatus(str, Enum):
    """
    Enumeration of transaction outcomes shared by both chains.

    Attributes:
        PENDING: Transaction was submitted and is not yet observed on-chain
        SUCCESS: Transaction executed successfully on-chain
        FAILED: Transaction reached the chain and executed with a non-zero code/status
        REJECTED: Node refused the transaction at submission (CheckTx code != 0)
        SIMULATED: Simulation-only run, nothing was submitted
    """
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REJECTED = "rejected"
    SIMULATED = "simulated"


class BaseTransactionConfirmation(CanonicalModel, ABC):
    """
    Abstract transaction result (``TxResult``).

    Produced once per broadcast and never mutated afterwards.

    Attributes:
        confirmation_type: ``"cosmos"`` or ``"evm"``
        status: Transaction outcome
        tx_hash: Transaction hash
        code: Chain result code (0 on success; EVM maps status 0 to 1)
        error_message: Human-readable failure reason
        gas_used: Gas consumed
        gas_limit: Gas limit of the transaction
        block_number: Block height containing the transaction
        execution_time: Seconds spent waiting for the confirmation
        logs: Raw event logs
        created_at: Timestamp when the result was recorded
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    confirmation_type: str = Field(..., description="Chain family of the transaction")
    status: TransactionStatus = Field(..., description="Transaction outcome")
    tx_hash: str = Field(default="", description="Transaction hash")
    code: int = Field(default=0, ge=0, description="Chain result code")
    error_message: Optional[str] = Field(None, description="Failure reason if not successful")
    gas_used: Optional[int] = Field(None, ge=0, description="Gas consumed")
    gas_limit: Optional[int] = Field(None, ge=0, description="Gas limit")
    block_number: Optional[int] = Field(None, ge=0, description="Block height containing the transaction")
    execution_time: Optional[float] = Field(None, ge=0, description="Time to confirm (seconds)")
    logs: Optional[List[Any]] = Field(None, description="Transaction logs/events")
    created_at: datetime = Field(default_factory=datetime.now, description="Result recording timestamp")

    def is_success(self) -> bool:
        """
        Check if the transaction executed successfully.

        A ``SIMULATED`` result counts as success: nothing failed, nothing was sent.

        Returns:
            bool: True for ``SUCCESS`` and ``SIMULATED``.
        """
        return self.status in (TransactionStatus.SUCCESS, TransactionStatus.SIMULATED)

    def get_confirmation_status(self) -> str:
        """
        Get human-readable confirmation status message.

        Returns:
            str: Message describing the transaction state.
        """
        if self.status == TransactionStatus.SUCCESS:
            height = f" at height {self.block_number}" if self.block_number is not None else ""
            return f"Transaction {self.tx_hash} confirmed{height}"
        if self.status == TransactionStatus.PENDING:
            return f"Transaction {self.tx_hash} is pending confirmation"
        if self.status == TransactionStatus.SIMULATED:
            return "Simulation only, transaction was not submitted"
        return f"Transaction failed: {self.error_message or self.status.value}"
