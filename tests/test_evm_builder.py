"""
EVM transaction builder tests: gas sizing, nonces, signing, submission and
receipt polling against a mocked ``AsyncWeb3``.
"""

import asyncio

import pytest
from eth_account import Account
from web3.exceptions import TransactionNotFound

from lbb_sdk.adapters.evm.builder import EVMTransactionBuilder
from lbb_sdk.adapters.evm.CERTIFICATE_ABI import get_constructor_abi, get_mint_abi
from lbb_sdk.adapters.evm.encoding import encode_function_call
from lbb_sdk.adapters.evm.schemas import EVMTransactionRequest
from lbb_sdk.engine.exceptions import (
    ChainCommunicationError,
    ConfirmationTimeoutError,
    GasEstimationError,
    LogicalTxFailure,
    NonceFetchError,
    SigningError,
    SubmissionError,
    TransactionBuildError,
    ValidationError,
)
from lbb_sdk.schemas.bases import TransactionStatus

from mocks import (
    MOCK_BYTECODE,
    MOCK_CONTRACT_ADDRESS,
    MOCK_GAS_ESTIMATE,
    MOCK_GAS_PRICE,
    MOCK_GAS_USED,
    MOCK_TX_HASH,
    RELAYER_ADDRESS,
    TEST_EVM_ADDRESS,
    TESTNET_CHAIN_ID,
    make_receipt,
)


@pytest.fixture
def builder(alice):
    return EVMTransactionBuilder(alice)


@pytest.fixture
def mint_data():
    return encode_function_call(get_mint_abi(), "safeMint", [TEST_EVM_ADDRESS, 1])


class TestBuild:

    @pytest.mark.asyncio
    async def test_call_envelope(self, builder, web3, mint_data):
        web3.eth.get_transaction_count.return_value = 4
        request = await builder.build(MOCK_CONTRACT_ADDRESS, mint_data)

        assert request.sender == TEST_EVM_ADDRESS
        assert request.to == MOCK_CONTRACT_ADDRESS
        assert request.gas == MOCK_GAS_ESTIMATE
        assert request.nonce == 4
        assert request.gas_price == MOCK_GAS_PRICE
        assert request.value == 0
        assert request.chain_id == TESTNET_CHAIN_ID
        web3.eth.get_transaction_count.assert_awaited_with(TEST_EVM_ADDRESS, "pending")
        params = web3.eth.estimate_gas.await_args.args[0]
        assert params["to"] == MOCK_CONTRACT_ADDRESS
        assert params["from"] == TEST_EVM_ADDRESS

    @pytest.mark.asyncio
    async def test_deploy_gas_buffer(self, builder, web3):
        request = await builder.build(None, MOCK_BYTECODE, is_deploy=True)
        assert request.gas == MOCK_GAS_ESTIMATE * 120 // 100
        assert request.is_deploy
        assert "to" not in request.to_tx_dict()
        assert "to" not in web3.eth.estimate_gas.await_args.args[0]

    @pytest.mark.asyncio
    async def test_nonce_not_incremented_locally(self, builder, mint_data):
        first = await builder.build(MOCK_CONTRACT_ADDRESS, mint_data)
        second = await builder.build(MOCK_CONTRACT_ADDRESS, mint_data)
        assert first.nonce == second.nonce == 0

    @pytest.mark.asyncio
    async def test_call_requires_target(self, builder, mint_data):
        with pytest.raises(TransactionBuildError):
            await builder.build(None, mint_data)

    @pytest.mark.asyncio
    async def test_gas_estimation_failure(self, builder, web3, mint_data):
        web3.eth.estimate_gas.side_effect = ValueError("execution reverted")
        with pytest.raises(GasEstimationError) as exc_info:
            await builder.send(MOCK_CONTRACT_ADDRESS, mint_data)
        assert exc_info.value.context["address"] == TEST_EVM_ADDRESS
        web3.eth.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nonce_failure(self, builder, web3, mint_data):
        web3.eth.get_transaction_count.side_effect = ConnectionError("down")
        with pytest.raises(NonceFetchError):
            await builder.build(MOCK_CONTRACT_ADDRESS, mint_data)

    @pytest.mark.asyncio
    async def test_gas_price_failure(self, builder, web3, mint_data):
        web3.eth.mock_gas_price = ConnectionError("down")
        with pytest.raises(ChainCommunicationError) as exc_info:
            await builder.build(MOCK_CONTRACT_ADDRESS, mint_data)
        assert exc_info.value.context["endpoint"] == "eth_gasPrice"


class TestSignAndSend:

    @pytest.mark.asyncio
    async def test_signature_recovers_to_sender(self, builder, mint_data):
        signed = builder.sign(await builder.build(MOCK_CONTRACT_ADDRESS, mint_data))
        assert Account.recover_transaction(signed.raw_transaction) == TEST_EVM_ADDRESS
        assert signed.tx_hash.startswith("0x") and len(signed.tx_hash) == 66
        assert not signed.submitted

    def test_sender_mismatch(self, builder):
        request = EVMTransactionRequest(
            sender=RELAYER_ADDRESS, to=MOCK_CONTRACT_ADDRESS, nonce=0, gas=21000, gas_price=1,
            chain_id=TESTNET_CHAIN_ID,
        )
        with pytest.raises(SigningError):
            builder.sign(request)

    def test_foreign_chain_envelope(self, builder):
        request = EVMTransactionRequest(
            sender=TEST_EVM_ADDRESS, to=MOCK_CONTRACT_ADDRESS, nonce=0, gas=21000, gas_price=1, chain_id=1,
        )
        with pytest.raises(SigningError):
            builder.sign(request)

    @pytest.mark.asyncio
    async def test_sign_only(self, builder, web3, mint_data):
        signed = await builder.send(MOCK_CONTRACT_ADDRESS, mint_data, sign_only=True)
        assert not signed.submitted
        web3.eth.send_raw_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send(self, builder, web3, mint_data):
        signed = await builder.send(MOCK_CONTRACT_ADDRESS, mint_data)
        assert signed.submitted
        assert signed.tx_hash == MOCK_TX_HASH
        web3.eth.send_raw_transaction.assert_awaited_once_with(signed.raw_bytes)

    @pytest.mark.asyncio
    async def test_submission_failure(self, builder, web3, mint_data):
        web3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")
        with pytest.raises(SubmissionError) as exc_info:
            await builder.send(MOCK_CONTRACT_ADDRESS, mint_data)
        assert exc_info.value.context["nonce"] == 0
        assert exc_info.value.context["chain_id"] == TESTNET_CHAIN_ID

    @pytest.mark.asyncio
    async def test_serialized_sends_get_distinct_nonces(self, builder, web3, mint_data):
        web3.eth.get_transaction_count.return_value = 5
        first = await builder.send(MOCK_CONTRACT_ADDRESS, mint_data, serialize=True)
        second = await builder.send(MOCK_CONTRACT_ADDRESS, mint_data, serialize=True)
        assert (first.request.nonce, second.request.nonce) == (5, 6)

    @pytest.mark.asyncio
    async def test_concurrent_serialized_sends(self, builder, web3, mint_data):
        web3.eth.get_transaction_count.return_value = 5
        results = await asyncio.gather(*(
            builder.send(MOCK_CONTRACT_ADDRESS, mint_data, serialize=True) for _ in range(3)
        ))
        assert sorted(r.request.nonce for r in results) == [5, 6, 7]

    @pytest.mark.asyncio
    async def test_failed_serialized_send_releases_nonce(self, builder, web3, mint_data):
        web3.eth.get_transaction_count.return_value = 5
        web3.eth.send_raw_transaction.side_effect = [ValueError("underpriced"), bytes.fromhex(MOCK_TX_HASH[2:])]
        with pytest.raises(SubmissionError):
            await builder.send(MOCK_CONTRACT_ADDRESS, mint_data, serialize=True)
        retried = await builder.send(MOCK_CONTRACT_ADDRESS, mint_data, serialize=True)
        assert retried.request.nonce == 5

    @pytest.mark.asyncio
    async def test_deploy(self, builder):
        signed = await builder.deploy(
            MOCK_BYTECODE, get_constructor_abi(), ["Diploma", "DIP", "URL", "URL", TEST_EVM_ADDRESS],
        )
        assert signed.request.to is None
        assert signed.request.data.startswith(MOCK_BYTECODE)
        assert signed.request.gas == MOCK_GAS_ESTIMATE * 120 // 100


class TestReceipts:

    @pytest.mark.asyncio
    async def test_check_receipt_pending(self, builder, web3):
        web3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not yet")
        assert await builder.check_transaction_receipt(MOCK_TX_HASH) is None

    @pytest.mark.asyncio
    async def test_check_receipt(self, builder):
        confirmation = await builder.check_transaction_receipt(MOCK_TX_HASH)
        assert confirmation.status is TransactionStatus.SUCCESS
        assert confirmation.tx_hash == MOCK_TX_HASH

    @pytest.mark.asyncio
    async def test_wait_success(self, builder, web3, clock):
        web3.eth.get_transaction_receipt.side_effect = [
            TransactionNotFound("not yet"),
            TransactionNotFound("not yet"),
            make_receipt(),
        ]
        confirmation = await builder.wait_for_transaction(MOCK_TX_HASH, clock.poller())

        assert confirmation.is_success()
        assert confirmation.code == 0
        assert confirmation.gas_used == MOCK_GAS_USED
        assert confirmation.execution_time == 2

    @pytest.mark.asyncio
    async def test_wait_reverted(self, builder, web3, clock):
        web3.eth.get_transaction_receipt.return_value = make_receipt(status=0)
        with pytest.raises(LogicalTxFailure) as exc_info:
            await builder.wait_for_transaction(MOCK_TX_HASH, clock.poller())

        confirmation = exc_info.value.confirmation
        assert confirmation.status is TransactionStatus.FAILED
        assert confirmation.code == 1
        assert confirmation.gas_used == MOCK_GAS_USED

    @pytest.mark.asyncio
    async def test_wait_timeout(self, builder, web3, clock):
        web3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not yet")
        with pytest.raises(ConfirmationTimeoutError):
            await builder.wait_for_transaction(MOCK_TX_HASH, clock.poller())
        assert web3.eth.get_transaction_receipt.await_count == 21

    @pytest.mark.asyncio
    async def test_wait_transport_error(self, builder, web3, clock):
        web3.eth.get_transaction_receipt.side_effect = ConnectionError("down")
        with pytest.raises(ChainCommunicationError):
            await builder.wait_for_transaction(MOCK_TX_HASH, clock.poller())

    @pytest.mark.asyncio
    async def test_wait_empty_hash(self, builder):
        with pytest.raises(ValidationError):
            await builder.wait_for_transaction("")

    @pytest.mark.asyncio
    async def test_deployed_contract_address(self, builder, web3, clock):
        web3.eth.get_transaction_receipt.return_value = make_receipt(
            contractAddress=MOCK_CONTRACT_ADDRESS, to=None
        )
        confirmation = await builder.wait_for_transaction(MOCK_TX_HASH, clock.poller())
        assert confirmation.contract_address == MOCK_CONTRACT_ADDRESS
