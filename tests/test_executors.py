"""
Permit execution tests: a relayer submits permits signed by the owner and
pays the gas; every contract argument comes from the signed permit.
"""

import pytest
from eth_abi import decode
from eth_account import Account
from eth_utils import function_signature_to_4byte_selector

from lbb_sdk.adapters.evm.builder import EVMTransactionBuilder
from lbb_sdk.adapters.evm.executors import PermitExecutor
from lbb_sdk.adapters.evm.permits import sign_permit, sign_permit_for_all
from lbb_sdk.engine.exceptions import PermitScopeError, ValidationError

from mocks import (
    MOCK_CONTRACT_ADDRESS,
    MOCK_CONTRACT_NAME,
    MOCK_DEADLINE,
    MOCK_RECIPIENT_ADDRESS,
    RELAYER_ADDRESS,
    TEST_EVM_ADDRESS,
)

PERMIT_ARGS = ["uint256", "uint8", "bytes32", "bytes32"]


def _call(signed, signature, types):
    data = signed.request.data
    assert data[:10] == "0x" + function_signature_to_4byte_selector(signature).hex()
    return decode(types, bytes.fromhex(data[10:]))


@pytest.fixture
def permit(alice):
    return sign_permit(
        identity=alice,
        contract_name=MOCK_CONTRACT_NAME,
        contract_address=MOCK_CONTRACT_ADDRESS,
        spender=RELAYER_ADDRESS,
        token_id=7,
        deadline=MOCK_DEADLINE,
        nonce=0,
    )


@pytest.fixture
def permit_for_all(alice):
    return sign_permit_for_all(
        identity=alice,
        contract_name=MOCK_CONTRACT_NAME,
        contract_address=MOCK_CONTRACT_ADDRESS,
        operator=RELAYER_ADDRESS,
        approved=True,
        deadline=MOCK_DEADLINE,
        nonce=0,
    )


@pytest.fixture
def executor(relayer):
    return PermitExecutor(EVMTransactionBuilder(relayer))


class TestTransferWithPermit:

    @pytest.mark.asyncio
    async def test_relayer_submits_signed_transfer(self, executor, permit, web3):
        signed = await executor.transfer_with_permit(permit)

        assert signed.submitted
        assert signed.request.to == MOCK_CONTRACT_ADDRESS
        assert Account.recover_transaction(signed.raw_transaction) == RELAYER_ADDRESS
        owner, to, token_id, deadline, v, r, s = _call(
            signed,
            "transferWithPermit(address,address,uint256,uint256,uint8,bytes32,bytes32)",
            ["address", "address", "uint256"] + PERMIT_ARGS,
        )
        assert owner.lower() == TEST_EVM_ADDRESS.lower()
        assert to.lower() == RELAYER_ADDRESS.lower()
        assert (token_id, deadline, v) == (7, MOCK_DEADLINE, permit.signature.v)
        assert (r, s) == (permit.signature.r_bytes, permit.signature.s_bytes)
        web3.eth.send_raw_transaction.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_spender_may_pick_recipient(self, executor, permit):
        signed = await executor.transfer_with_permit(permit, MOCK_RECIPIENT_ADDRESS)
        _, to, *_ = _call(
            signed,
            "transferWithPermit(address,address,uint256,uint256,uint8,bytes32,bytes32)",
            ["address", "address", "uint256"] + PERMIT_ARGS,
        )
        assert to.lower() == MOCK_RECIPIENT_ADDRESS.lower()

    @pytest.mark.asyncio
    async def test_non_spender_cannot_redirect(self, outsider, permit, web3):
        executor = PermitExecutor(EVMTransactionBuilder(outsider))
        with pytest.raises(PermitScopeError) as exc_info:
            await executor.transfer_with_permit(permit, MOCK_RECIPIENT_ADDRESS)
        assert exc_info.value.field == "to"
        web3.eth.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sign_only(self, executor, permit, web3):
        signed = await executor.transfer_with_permit(permit, sign_only=True)
        assert not signed.submitted
        web3.eth.send_raw_transaction.assert_not_awaited()


class TestBurnAndApproval:

    @pytest.mark.asyncio
    async def test_burn_with_permit(self, executor, permit):
        signed = await executor.burn_with_permit(permit)
        owner, token_id, deadline, v, r, s = _call(
            signed,
            "burnWithPermit(address,uint256,uint256,uint8,bytes32,bytes32)",
            ["address", "uint256"] + PERMIT_ARGS,
        )
        assert owner.lower() == TEST_EVM_ADDRESS.lower()
        assert (token_id, deadline) == (7, MOCK_DEADLINE)

    @pytest.mark.asyncio
    async def test_permit_for_all(self, executor, permit_for_all):
        signed = await executor.execute_permit_for_all(permit_for_all, serialize=True)
        owner, operator, approved, deadline, v, r, s = _call(
            signed,
            "permitForAll(address,address,bool,uint256,uint8,bytes32,bytes32)",
            ["address", "address", "bool"] + PERMIT_ARGS,
        )
        assert owner.lower() == TEST_EVM_ADDRESS.lower()
        assert operator.lower() == RELAYER_ADDRESS.lower()
        assert approved is True
        assert v == permit_for_all.signature.v


class TestScope:

    @pytest.mark.asyncio
    async def test_wrong_permit_kind(self, executor, permit, permit_for_all):
        with pytest.raises(PermitScopeError) as exc_info:
            await executor.execute_permit_for_all(permit)
        assert exc_info.value.field == "permit"
        with pytest.raises(PermitScopeError):
            await executor.burn_with_permit(permit_for_all)

    @pytest.mark.asyncio
    async def test_other_chain(self, executor, alice):
        foreign = sign_permit(
            private_key=alice.export_private_key(),
            chain_id=98,
            contract_name=MOCK_CONTRACT_NAME,
            contract_address=MOCK_CONTRACT_ADDRESS,
            spender=RELAYER_ADDRESS,
            token_id=7,
            deadline=MOCK_DEADLINE,
            nonce=0,
        )
        with pytest.raises(PermitScopeError) as exc_info:
            await executor.transfer_with_permit(foreign)
        assert exc_info.value.field == "chain_id"

    @pytest.mark.asyncio
    async def test_malformed_permit(self, executor, permit, web3):
        broken = permit.model_copy(update={"signature": permit.signature.model_copy(update={"s": "0x01"})})
        with pytest.raises(ValidationError) as exc_info:
            await executor.burn_with_permit(broken)
        assert not isinstance(exc_info.value, PermitScopeError)
        web3.eth.estimate_gas.assert_not_awaited()
