"""
EVM Adapter Schema Models

Pydantic models for the EVM side: permit signatures and signed permits,
transaction requests, signed transactions and receipts. All classes inherit
from the base schema hierarchy in ``schemas.bases``.

Signature classes:
    - PermitSignature: v/r/s plus deadline, the portable authorization bundle.

Permit classes:
    - SignedPermit: ``Permit(owner,spender,tokenId,nonce,deadline)`` with its
      domain and signature.
    - SignedPermitForAll: ``PermitForAll(owner,operator,approved,nonce,deadline)``
      with its domain and signature.

Transaction classes:
    - EVMTransactionRequest: Unsigned legacy transaction envelope.
    - SignedEVMTransaction: Signed envelope, submitted or not.
    - EVMTransactionConfirmation: Transaction result from a receipt.

Result classes:
    - PermitVerificationResult: Off-chain permit verification outcome.
"""

from typing import Any, Dict, Literal, Mapping, Optional

from eth_utils import is_address
from pydantic import Field

from ...schemas.bases import (
    BaseSignature,
    BaseTransactionConfirmation,
    BaseVerificationResult,
    CanonicalModel,
    TransactionStatus,
)
from .standards import (
    EIP712Domain,
    PermitForAllMessage,
    PermitForAllTypedData,
    PermitMessage,
    PermitTypedData,
)


def to_hex_str(value: Any) -> str:
    """0x-prefixed hex for bytes-like values; strings pass through."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def _strip_hex(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


class PermitSignature(BaseSignature):
    """
    Portable permit authorization: ``{v, r, s, deadline}``.

    Contains no gas information and needs no network access to produce.

    Attributes:
        signature_type: ``"Permit"`` or ``"PermitForAll"``.
        v: Recovery byte, 27 or 28.
        r: r component, 32 bytes as hex.
        s: s component, 32 bytes as hex.
        deadline: Unix timestamp after which the permit is invalid.

    Example::

        sig = PermitSignature(signature_type="Permit", v=27, r="0x" + "a" * 64,
                              s="0x" + "b" * 64, deadline=1_900_000_000)
        sig.to_packed_hex()   # r || s || v
    """

    signature_type: Literal["Permit", "PermitForAll"] = Field(
        ..., description="Signed primary type: 'Permit' or 'PermitForAll'"
    )
    v: int = Field(..., ge=27, le=28, description="ECDSA recovery byte (27 or 28)")
    r: str = Field(..., description="Signature r component (32 bytes, 64-char hex)")
    s: str = Field(..., description="Signature s component (32 bytes, 64-char hex)")
    deadline: int = Field(..., ge=0, description="Unix timestamp after which the permit expires")

    def validate_format(self) -> bool:
        """
        Validate v/r/s components.

        Returns:
            True when all components pass.

        Raises:
            ValueError: Descriptive message on the first failed check.
        """
        if self.v not in (27, 28):
            raise ValueError(f"Invalid recovery byte: {self.v}. Must be 27 or 28")

        for name, val in [("r", self.r), ("s", self.s)]:
            hex_str = _strip_hex(val)
            if len(hex_str) != 64:
                raise ValueError(f"Invalid {name}: expected 64 hex chars, got {len(hex_str)}")
            try:
                int(hex_str, 16)
            except ValueError:
                raise ValueError(f"Invalid {name}: not valid hexadecimal")

        return True

    @property
    def r_bytes(self) -> bytes:
        return bytes.fromhex(_strip_hex(self.r).zfill(64))

    @property
    def s_bytes(self) -> bytes:
        return bytes.fromhex(_strip_hex(self.s).zfill(64))

    def to_packed_hex(self) -> str:
        """
        Encode into a packed 65-byte hex string (``r || s || v``).

        Raises:
            ValueError: If components do not pass ``validate_format()``.
        """
        self.validate_format()
        return "0x" + self.r_bytes.hex() + self.s_bytes.hex() + format(self.v, "02x")


class _SignedPermitBase(CanonicalModel):
    owner: str = Field(..., description="Owner that signed the permit")
    nonce: int = Field(..., ge=0, description="Owner's permit nonce at signing time")
    deadline: int = Field(..., ge=0, description="Unix timestamp after which the permit expires")
    chain_id: int = Field(..., ge=1, description="EVM chain id bound into the domain")
    contract_name: str = Field(..., min_length=1, description="EIP-712 domain name of the contract")
    contract_address: str = Field(..., description="Verifying contract address")
    domain_version: str = Field(default="1", description="EIP-712 domain version")
    signature: PermitSignature = Field(..., description="Permit signature bundle")

    def domain(self) -> EIP712Domain:
        return EIP712Domain(
            name=self.contract_name,
            version=self.domain_version,
            chainId=self.chain_id,
            verifyingContract=self.contract_address,
        )

    def _check_addresses(self, **addresses: str) -> None:
        for field_name, address in {"owner": self.owner, "contract_address": self.contract_address, **addresses}.items():
            if not is_address(address):
                raise ValueError(f"'{field_name}' is not a valid address: {address!r}")

    def validate_structure(self) -> bool:
        """
        Validate addresses and the embedded signature.

        Raises:
            ValueError: Descriptive message on the first failed check.
        """
        self._check_addresses()
        try:
            self.signature.validate_format()
        except ValueError as e:
            raise ValueError(f"Signature validation failed: {e}")
        if self.signature.deadline != self.deadline:
            raise ValueError("signature deadline does not match the signed deadline")
        return True


class SignedPermit(_SignedPermitBase):
    """
    Signed single-token permit with every field that went into the digest.

    Example::

        permit = sign_permit(identity=alice, contract_name="Certificate",
                             contract_address=contract, spender=relayer,
                             token_id=1, deadline=deadline, nonce=0, chain_id=150)
        permit.signature.v    # 27 or 28
    """

    permit_type: Literal["Permit"] = Field(default="Permit", description="Primary type")
    spender: str = Field(..., description="Account allowed to act on the token")
    token_id: int = Field(..., ge=0, description="Token covered by the permit")

    def to_typed_data(self) -> PermitTypedData:
        return PermitTypedData(
            domain=self.domain(),
            message=PermitMessage(
                owner=self.owner,
                spender=self.spender,
                tokenId=self.token_id,
                nonce=self.nonce,
                deadline=self.deadline,
            ),
        )

    def validate_structure(self) -> bool:
        self._check_addresses(spender=self.spender)
        return super().validate_structure()


class SignedPermitForAll(_SignedPermitBase):
    """Signed operator-approval permit with every field that went into the digest."""

    permit_type: Literal["PermitForAll"] = Field(default="PermitForAll", description="Primary type")
    operator: str = Field(..., description="Operator being approved or revoked")
    approved: bool = Field(..., description="Approval flag")

    def to_typed_data(self) -> PermitForAllTypedData:
        return PermitForAllTypedData(
            domain=self.domain(),
            message=PermitForAllMessage(
                owner=self.owner,
                operator=self.operator,
                approved=self.approved,
                nonce=self.nonce,
                deadline=self.deadline,
            ),
        )

    def validate_structure(self) -> bool:
        self._check_addresses(operator=self.operator)
        return super().validate_structure()


class EVMTransactionRequest(CanonicalModel):
    """
    Unsigned legacy transaction envelope.

    Attributes:
        sender: Signer's EVM address.
        to: Target contract or account; ``None`` for a deployment.
        nonce: Sender's pending account nonce.
        value: Always zero for the operations in scope.
        gas: Gas limit.
        gas_price: Gas price in wei.
        data: Call data or deployment bytecode, 0x hex.
        chain_id: EIP-155 chain id.
    """

    sender: str = Field(..., description="Signer address")
    to: Optional[str] = Field(None, description="Target address, None for deployment")
    nonce: int = Field(..., ge=0, description="Account nonce")
    value: int = Field(default=0, ge=0, description="Value in wei")
    gas: int = Field(..., ge=0, description="Gas limit")
    gas_price: int = Field(..., ge=0, description="Gas price in wei")
    data: str = Field(default="0x", description="Call data, 0x hex")
    chain_id: int = Field(..., ge=1, description="EIP-155 chain id")

    @property
    def is_deploy(self) -> bool:
        return self.to is None

    def to_tx_dict(self) -> Dict[str, Any]:
        """Dict accepted by ``Account.sign_transaction``."""
        tx: Dict[str, Any] = {
            "nonce": self.nonce,
            "value": self.value,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "data": self.data,
            "chainId": self.chain_id,
        }
        if self.to is not None:
            tx["to"] = self.to
        return tx


class SignedEVMTransaction(CanonicalModel):
    """
    Signed transaction, ready to submit or already submitted.

    Attributes:
        raw_transaction: RLP-encoded signed transaction, 0x hex.
        tx_hash: Transaction hash, 0x hex.
        request: The envelope that was signed.
        submitted: Whether it was sent to the node.
    """

    raw_transaction: str = Field(..., description="Signed RLP bytes, 0x hex")
    tx_hash: str = Field(..., description="Transaction hash")
    request: EVMTransactionRequest = Field(..., description="Signed envelope")
    submitted: bool = Field(default=False, description="Whether the transaction was submitted")

    @property
    def raw_bytes(self) -> bytes:
        return bytes.fromhex(_strip_hex(self.raw_transaction))


class EVMTransactionConfirmation(BaseTransactionConfirmation):
    """
    EVM transaction result from a receipt.

    ``code`` is 0 for receipt status 1 and 1 for status 0.
    """

    confirmation_type: Literal["evm"] = Field(default="evm", description="Chain family")
    contract_address: Optional[str] = Field(None, description="Deployed contract address")
    from_address: Optional[str] = Field(None, description="Sender")
    to_address: Optional[str] = Field(None, description="Recipient")
    effective_gas_price: Optional[int] = Field(None, ge=0, description="Effective gas price in wei")

    @classmethod
    def from_receipt(cls, receipt: Mapping[str, Any], **extra: Any) -> "EVMTransactionConfirmation":
        success = receipt.get("status") == 1
        return cls(
            status=TransactionStatus.SUCCESS if success else TransactionStatus.FAILED,
            tx_hash=to_hex_str(receipt.get("transactionHash", "")),
            code=0 if success else 1,
            error_message=None if success else "Transaction reverted on-chain",
            gas_used=receipt.get("gasUsed"),
            block_number=receipt.get("blockNumber"),
            contract_address=receipt.get("contractAddress"),
            from_address=receipt.get("from"),
            to_address=receipt.get("to"),
            effective_gas_price=receipt.get("effectiveGasPrice"),
            **extra,
        )


class PermitVerificationResult(BaseVerificationResult):
    """
    Off-chain permit verification outcome.

    Attributes:
        recovered_signer: Address recovered from the signature, when recoverable.
        owner: Owner claimed by the permit.
        nonce: Nonce the permit was signed with.
    """

    verification_type: Literal["evm_permit"] = Field(default="evm_permit", description="Verification type")
    recovered_signer: Optional[str] = Field(None, description="Recovered signer address")
    owner: Optional[str] = Field(None, description="Owner claimed by the permit")
    nonce: Optional[int] = Field(None, ge=0, description="Permit nonce")
