"""
Bank helpers on the message chain: balance queries and plain transfers.
"""

import asyncio
from typing import List, Optional

from ...accounts.addresses import evm_to_chain_address, is_valid_chain_address
from ...accounts.identity import IdentityCapability
from ...engine.exceptions import UninitializedSignerError, ValidationError
from ...engine.poller import ConfirmationPoller
from .broadcaster import broadcast_tx, broadcast_tx_and_wait
from .factory import TxFactory
from .schemas import Coin, CosmosTransactionConfirmation, Msg, msg_send


def _chain_address(identity: IdentityCapability) -> str:
    if not identity.chain_address:
        raise UninitializedSignerError(label=identity.label, address=identity.evm_address)
    return identity.chain_address


async def get_balance(identity: IdentityCapability) -> List[Coin]:
    """All balances of the identity's chain-native address."""
    return await identity.client.node.get_all_balances(_chain_address(identity))


async def get_balance_by_denom(identity: IdentityCapability, denom: Optional[str] = None) -> Coin:
    """Balance of one denomination, the network's base denom by default."""
    denom = denom or identity.client.network.base_denom
    return await identity.client.node.get_balance(_chain_address(identity), denom)


async def get_evm_balance(identity: IdentityCapability) -> Coin:
    """
    EVM-side balance, read through the bank module.

    The EVM balance is held by the bech32 form of the EVM address in the EVM
    denomination (``asix``). Works for EVM-only identities too.
    """
    network = identity.client.network
    address = evm_to_chain_address(identity.evm_address, network.bech32_prefix)
    return await identity.client.node.get_balance(address, network.evm_denom)


def _send_msg(identity: IdentityCapability, to: str, amount: int, denom: Optional[str]) -> Msg:
    network = identity.client.network
    if not is_valid_chain_address(to, network.bech32_prefix):
        raise ValidationError(f"invalid recipient address {to!r}", field="to")
    if amount <= 0:
        raise ValidationError(f"amount must be positive, got {amount}", field="amount")
    coin = Coin(denom=denom or network.base_denom, amount=str(amount))
    return msg_send(_chain_address(identity), to, [coin])


async def send_balance(
    identity: IdentityCapability,
    factory: TxFactory,
    to: str,
    amount: int,
    denom: Optional[str] = None,
) -> CosmosTransactionConfirmation:
    """
    Send ``amount`` of ``denom`` to ``to``.

    Raises:
        ValidationError: For a malformed recipient or a non-positive amount.
        Anything :func:`broadcast_tx` raises.
    """
    return await broadcast_tx(identity, factory, [_send_msg(identity, to, amount, denom)])


async def send_balance_and_wait(
    identity: IdentityCapability,
    factory: TxFactory,
    to: str,
    amount: int,
    denom: Optional[str] = None,
    poller: Optional[ConfirmationPoller] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> CosmosTransactionConfirmation:
    """:func:`send_balance` and wait for the confirmation."""
    return await broadcast_tx_and_wait(
        identity,
        factory,
        [_send_msg(identity, to, amount, denom)],
        poller,
        cancel_event=cancel_event,
    )
