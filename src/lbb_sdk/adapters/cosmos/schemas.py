"""
Message-Chain Schema Models

Pydantic models for coins, fees, account state, node answers and the
transaction result, plus the protobuf message helpers the transaction
pipeline packs into a ``TxBody``.

Messages are protobuf objects (``cosmpy`` generated types, or the module
types in :mod:`.protos`); anything with a ``DESCRIPTOR`` can be packed.
"""

import re
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from cosmpy.protos.cosmos.bank.v1beta1.tx_pb2 import MsgSend
from cosmpy.protos.cosmos.base.v1beta1.coin_pb2 import Coin as CoinProto
from cosmpy.protos.cosmos.tx.v1beta1.tx_pb2 import Fee as FeeProto
from google.protobuf.any_pb2 import Any as AnyProto
from google.protobuf.message import Message
from pydantic import Field, field_validator

from ...engine.exceptions import ValidationError
from ...schemas.bases import (
    BaseTransactionConfirmation,
    CanonicalModel,
    TransactionStatus,
)

_COIN_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z][a-zA-Z0-9/:._-]{1,127})\s*$")

#: Message type accepted by the transaction pipeline.
Msg = Message


class Coin(CanonicalModel):
    """
    Integer amount of one denomination.

    Attributes:
        denom: Denomination (``usix``).
        amount: Decimal integer string, as the node reports it.
    """

    denom: str = Field(..., min_length=1, description="Denomination")
    amount: str = Field(..., description="Integer amount as a string")

    @field_validator("amount", mode="before")
    @classmethod
    def _normalize_amount(cls, value: Any) -> str:
        text = str(value)
        if not text.isdigit():
            raise ValueError(f"coin amount must be a non-negative integer, got {value!r}")
        return str(int(text))

    @classmethod
    def parse(cls, text: str) -> "Coin":
        """
        Parse ``"100usix"``.

        Raises:
            ValidationError: If the text is not an integer amount followed by a denom.
        """
        amount, denom = parse_dec_coin(text)
        if amount != amount.to_integral_value():
            raise ValidationError(f"coin amount must be an integer: {text!r}", field="coin")
        return cls(denom=denom, amount=str(int(amount)))

    def to_proto(self) -> CoinProto:
        return CoinProto(denom=self.denom, amount=self.amount)

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


def parse_dec_coin(text: str) -> Tuple[Decimal, str]:
    """
    Split a decimal coin string such as ``"1.25usix"`` into amount and denom.

    Raises:
        ValidationError: If the text is not a decimal amount followed by a denom.
    """
    match = _COIN_RE.match(text or "")
    if match is None:
        raise ValidationError(f"invalid coin string {text!r}", field="coin")
    return Decimal(match.group(1)), match.group(2)


def parse_coins(text: str) -> List[Coin]:
    """Parse a comma separated coin list (``"10usix,5asix"``)."""
    if not text or not text.strip():
        return []
    return [Coin.parse(part) for part in text.split(",")]


class Fee(CanonicalModel):
    """
    Transaction fee as committed to by ``AuthInfo``.

    Attributes:
        amount: Fee coins.
        gas: Gas limit.
        payer: Optional fee payer address.
        granter: Optional fee granter address.
    """

    amount: List[Coin] = Field(default_factory=list, description="Fee coins")
    gas: int = Field(..., ge=0, description="Gas limit")
    payer: Optional[str] = Field(None, description="Fee payer override")
    granter: Optional[str] = Field(None, description="Fee granter override")

    def to_proto(self) -> FeeProto:
        return FeeProto(
            amount=[coin.to_proto() for coin in self.amount],
            gas_limit=self.gas,
            payer=self.payer or "",
            granter=self.granter or "",
        )


def msg_send(from_address: str, to_address: str, coins: Sequence[Coin]) -> MsgSend:
    """Bank ``MsgSend``."""
    return MsgSend(
        from_address=from_address,
        to_address=to_address,
        amount=[coin.to_proto() for coin in coins],
    )


def type_url(msg: Message) -> str:
    """``/cosmos.bank.v1beta1.MsgSend`` style type URL of a message."""
    return f"/{msg.DESCRIPTOR.full_name}"


def pack_msg(msg: Message) -> AnyProto:
    """Wrap a message in ``google.protobuf.Any`` with a ``/``-prefixed type URL."""
    packed = AnyProto()
    packed.Pack(msg, type_url_prefix="/")
    return packed


class AccountInfo(CanonicalModel):
    """Signer metadata resolved from the chain."""

    address: str = Field(..., description="Bech32 address")
    account_number: int = Field(..., ge=0, description="Account number")
    sequence: int = Field(..., ge=0, description="Next sequence")


class SimulateResponse(CanonicalModel):
    gas_used: int = Field(..., ge=0, description="Gas used by the simulation")
    gas_wanted: int = Field(default=0, ge=0, description="Gas wanted by the simulation")


class BroadcastResponse(CanonicalModel):
    """
    Synchronous broadcast answer (CheckTx result).

    A non-zero ``code`` means the node refused the transaction even though
    the HTTP call succeeded.
    """

    tx_hash: str = Field(..., alias="txhash", description="Transaction hash")
    code: int = Field(default=0, ge=0, description="CheckTx code")
    raw_log: str = Field(default="", description="Raw log")
    codespace: str = Field(default="", description="Error codespace")
    height: int = Field(default=0, ge=0, description="Block height (0 for sync mode)")
    gas_wanted: int = Field(default=0, ge=0, description="Gas wanted")
    gas_used: int = Field(default=0, ge=0, description="Gas used")

    @field_validator("height", "gas_wanted", "gas_used", mode="before")
    @classmethod
    def _int_from_string(cls, value: Any) -> int:
        return int(value or 0)

    def is_accepted(self) -> bool:
        return self.code == 0


class CosmosTransactionConfirmation(BaseTransactionConfirmation):
    """
    Message-chain transaction result.

    ``block_number`` is the block height; ``error_message`` carries the raw
    log for failed transactions.

    Example::

        result = await broadcast_tx_and_wait(identity, factory, [msg])
        if result.is_success():
            print(result.tx_hash, result.block_number, result.gas_used)
    """

    confirmation_type: Literal["cosmos"] = Field(default="cosmos", description="Chain family")
    codespace: str = Field(default="", description="Error codespace")
    gas_wanted: Optional[int] = Field(None, ge=0, description="Gas wanted")

    @classmethod
    def from_tx_response(cls, tx_response: Dict[str, Any], **extra: Any) -> "CosmosTransactionConfirmation":
        """Build a result from a node ``tx_response`` object."""
        code = int(tx_response.get("code") or 0)
        raw_log = tx_response.get("raw_log") or ""
        return cls(
            status=TransactionStatus.SUCCESS if code == 0 else TransactionStatus.FAILED,
            tx_hash=tx_response.get("txhash", ""),
            code=code,
            codespace=tx_response.get("codespace") or "",
            error_message=raw_log if code else None,
            gas_used=int(tx_response.get("gas_used") or 0),
            gas_wanted=int(tx_response.get("gas_wanted") or 0),
            block_number=int(tx_response.get("height") or 0),
            logs=tx_response.get("logs") or None,
            **extra,
        )
