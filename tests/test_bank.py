"""
Bank helper tests.
"""

import pytest
from cosmpy.protos.cosmos.bank.v1beta1.tx_pb2 import MsgSend
from cosmpy.protos.cosmos.tx.v1beta1.tx_pb2 import TxBody, TxRaw

from lbb_sdk.accounts.addresses import evm_to_chain_address
from lbb_sdk.adapters.cosmos.bank import (
    get_balance,
    get_balance_by_denom,
    get_evm_balance,
    send_balance,
    send_balance_and_wait,
)
from lbb_sdk.adapters.cosmos.factory import TxFactory
from lbb_sdk.adapters.cosmos.schemas import Coin
from lbb_sdk.engine.exceptions import UninitializedSignerError, ValidationError

from mocks import MOCK_RECIPIENT_ADDRESS, RELAYER_ADDRESS

RECIPIENT = evm_to_chain_address(MOCK_RECIPIENT_ADDRESS)


class TestBalances:

    @pytest.mark.asyncio
    async def test_all_balances(self, alice, node):
        node.balances[alice.chain_address] = [Coin(denom="usix", amount="500")]
        assert await get_balance(alice) == [Coin(denom="usix", amount="500")]

    @pytest.mark.asyncio
    async def test_by_denom_defaults_to_base_denom(self, alice, node):
        coin = await get_balance_by_denom(alice)
        assert coin == Coin(denom="usix", amount="0")
        assert node.balance_queries == [(alice.chain_address, "usix")]

    @pytest.mark.asyncio
    async def test_evm_balance_for_evm_only_identity(self, relayer, node):
        address = evm_to_chain_address(RELAYER_ADDRESS)
        node.balances[address] = [Coin(denom="asix", amount="7")]
        assert (await get_evm_balance(relayer)).amount == "7"
        assert node.balance_queries == [(address, "asix")]

    @pytest.mark.asyncio
    async def test_chain_balance_needs_chain_address(self, relayer):
        with pytest.raises(UninitializedSignerError):
            await get_balance(relayer)


class TestSend:

    @pytest.mark.asyncio
    async def test_send(self, alice, node):
        result = await send_balance(alice, TxFactory(), RECIPIENT, 1000)
        assert result.tx_hash
        body = TxBody.FromString(TxRaw.FromString(node.broadcasts[0]).body_bytes)
        assert body.messages[0].type_url == "/cosmos.bank.v1beta1.MsgSend"
        msg = MsgSend()
        body.messages[0].Unpack(msg)
        assert msg.from_address == alice.chain_address
        assert msg.to_address == RECIPIENT
        assert [(c.denom, c.amount) for c in msg.amount] == [("usix", "1000")]

    @pytest.mark.asyncio
    async def test_send_and_wait(self, alice, clock):
        result = await send_balance_and_wait(alice, TxFactory(), RECIPIENT, 1, "asix", clock.poller())
        assert result.is_success()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("to, amount, field", [
        ("6x1notanaddress", 10, "to"),
        (MOCK_RECIPIENT_ADDRESS, 10, "to"),
        (RECIPIENT, 0, "amount"),
    ])
    async def test_invalid_input(self, alice, node, to, amount, field):
        with pytest.raises(ValidationError) as exc_info:
            await send_balance(alice, TxFactory(), to, amount)
        assert exc_info.value.field == field
        assert node.broadcasts == []
