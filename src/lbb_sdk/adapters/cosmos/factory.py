"""
Transaction factory for the message chain.

``TxFactory`` is an immutable bundle of per-broadcast settings. Every
``with_*`` method returns a new factory, so a base factory can be shared by
concurrent message builders without one caller changing another's gas or
memo.
"""

from dataclasses import dataclass, replace
from decimal import ROUND_CEILING, Decimal
from typing import Optional

from ...constants import BASE_DENOM
from ...engine.exceptions import ChainCommunicationError, FactoryPrepareError, ValidationError
from .node import BROADCAST_MODE_SYNC, CosmosNodeClient
from .schemas import Coin, Fee, parse_coins, parse_dec_coin

DEFAULT_GAS: int = 1_000_000
DEFAULT_GAS_PRICES: str = f"1.25{BASE_DENOM}"
DEFAULT_GAS_ADJUSTMENT: float = 1.5


def adjust_gas(gas_used: int, adjustment: float) -> int:
    """``ceil(gas_used * adjustment)``."""
    scaled = Decimal(gas_used) * Decimal(str(adjustment))
    return int(scaled.to_integral_value(rounding=ROUND_CEILING))


def _check_coins(text: str, field: str, decimal: bool = False) -> None:
    try:
        if decimal:
            parse_dec_coin(text)
        else:
            parse_coins(text)
    except ValidationError as e:
        raise ValidationError(e.message, field=field, value=text) from e


@dataclass(frozen=True)
class TxFactory:
    """
    Settings for one message-chain broadcast.

    Attributes:
        gas: Gas limit; replaced by the simulated estimate when ``simulate`` is on.
        gas_prices: Decimal coin string used to price gas (``"1.25usix"``).
        gas_adjustment: Multiplier applied to the simulated gas.
        memo: Transaction memo.
        timeout_height: Block height after which the transaction is invalid (0 = none).
        fees: Explicit fee coins (``"1000usix"``); overrides ``gas * gas_prices``.
        fee_granter: Fee granter address.
        fee_payer: Fee payer address.
        simulate: Estimate gas with the node before signing.
        simulate_only: Stop after simulation; nothing is submitted.
        account_number: Signer account number; resolved from the chain when ``None``.
        sequence: Signer sequence; resolved from the chain when ``None``.
        broadcast_mode: ``BROADCAST_MODE_SYNC`` or ``BROADCAST_MODE_ASYNC``.

    Example::

        base = TxFactory()
        cheap = base.with_gas(200_000).with_memo("hello")
        base.gas    # still 1_000_000
    """

    gas: int = DEFAULT_GAS
    gas_prices: str = DEFAULT_GAS_PRICES
    gas_adjustment: float = DEFAULT_GAS_ADJUSTMENT
    memo: str = ""
    timeout_height: int = 0
    fees: Optional[str] = None
    fee_granter: Optional[str] = None
    fee_payer: Optional[str] = None
    simulate: bool = False
    simulate_only: bool = False
    account_number: Optional[int] = None
    sequence: Optional[int] = None
    broadcast_mode: str = BROADCAST_MODE_SYNC

    def __post_init__(self):
        if self.gas < 0:
            raise ValidationError(f"gas must not be negative, got {self.gas}", field="gas")
        if self.gas_adjustment <= 0:
            raise ValidationError(
                f"gas_adjustment must be positive, got {self.gas_adjustment}", field="gas_adjustment"
            )
        if self.timeout_height < 0:
            raise ValidationError(
                f"timeout_height must not be negative, got {self.timeout_height}", field="timeout_height"
            )
        _check_coins(self.gas_prices, "gas_prices", decimal=True)
        if self.fees:
            _check_coins(self.fees, "fees")

    def with_gas(self, gas: int) -> "TxFactory":
        return replace(self, gas=gas)

    def with_gas_adjustment(self, gas_adjustment: float) -> "TxFactory":
        return replace(self, gas_adjustment=gas_adjustment)

    def with_gas_prices(self, gas_prices: str) -> "TxFactory":
        return replace(self, gas_prices=gas_prices)

    def with_fees(self, fees: Optional[str]) -> "TxFactory":
        return replace(self, fees=fees)

    def with_memo(self, memo: str) -> "TxFactory":
        return replace(self, memo=memo)

    def with_timeout_height(self, timeout_height: int) -> "TxFactory":
        return replace(self, timeout_height=timeout_height)

    def with_fee_granter(self, fee_granter: Optional[str]) -> "TxFactory":
        return replace(self, fee_granter=fee_granter)

    def with_fee_payer(self, fee_payer: Optional[str]) -> "TxFactory":
        return replace(self, fee_payer=fee_payer)

    def with_simulate(self, simulate: bool = True) -> "TxFactory":
        return replace(self, simulate=simulate)

    def with_simulate_only(self, simulate_only: bool = True) -> "TxFactory":
        return replace(self, simulate_only=simulate_only)

    def with_account_number(self, account_number: Optional[int]) -> "TxFactory":
        return replace(self, account_number=account_number)

    def with_sequence(self, sequence: Optional[int]) -> "TxFactory":
        return replace(self, sequence=sequence)

    def with_broadcast_mode(self, broadcast_mode: str) -> "TxFactory":
        return replace(self, broadcast_mode=broadcast_mode)

    @property
    def is_prepared(self) -> bool:
        return self.account_number is not None and self.sequence is not None

    def compute_fee(self) -> Fee:
        """
        Fee for the current gas limit.

        Explicit ``fees`` win; otherwise the amount is ``ceil(gas * price)``
        in the gas-price denomination.
        """
        if self.fees:
            coins = parse_coins(self.fees)
        else:
            price, denom = parse_dec_coin(self.gas_prices)
            amount = (Decimal(self.gas) * price).to_integral_value(rounding=ROUND_CEILING)
            coins = [Coin(denom=denom, amount=str(int(amount)))]
        return Fee(amount=coins, gas=self.gas, payer=self.fee_payer, granter=self.fee_granter)

    async def prepare(
        self,
        node: CosmosNodeClient,
        address: str,
        offline: bool = False,
    ) -> "TxFactory":
        """
        Return a factory with account number and sequence filled in.

        Values already set are kept. Nothing is retried.

        Raises:
            FactoryPrepareError: If the account cannot be read, or the client
                is offline and the values were not given explicitly.
        """
        if self.is_prepared:
            return self
        if offline:
            raise FactoryPrepareError(
                "offline mode requires an explicit account number and sequence",
                address=address,
            )
        try:
            account = await node.get_account(address)
        except ChainCommunicationError as e:
            raise FactoryPrepareError(
                f"cannot resolve account state: {e.message}", address=address
            ) from e

        return replace(
            self,
            account_number=self.account_number if self.account_number is not None else account.account_number,
            sequence=self.sequence if self.sequence is not None else account.sequence,
        )
