"""
EVM transaction builder.

Pipeline for one state-changing call or deployment:

    1. ABI-encode the call (or bytecode + constructor arguments)
    2. estimate gas; deployments get a 20% buffer, calls use the raw estimate
    3. fetch the sender's ``pending`` nonce
    4. fetch the suggested gas price
    5. build a legacy envelope with zero value
    6. sign with EIP-155 (chain-id bound)
    7. submit, unless only a signed envelope was asked for

Failures surface as ``PackingError``, ``GasEstimationError``,
``NonceFetchError``, ``SigningError`` or ``SubmissionError``. Nothing is
retried; the nonce is never incremented locally unless a
:class:`~lbb_sdk.engine.nonces.NonceManager` is used through ``serialize=True``.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound

from ...accounts.identity import IdentityCapability
from ...engine.exceptions import (
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
from ...engine.nonces import NonceManager
from ...engine.poller import ConfirmationPoller, Observation, PollState
from .constants import PENDING_BLOCK, ZERO_VALUE, deploy_gas_limit
from .encoding import encode_deploy_data
from .schemas import (
    EVMTransactionConfirmation,
    EVMTransactionRequest,
    SignedEVMTransaction,
    to_hex_str,
)


class EVMTransactionBuilder:
    """
    Construct, price, sign and submit transactions for one identity.

    Args:
        identity: Signer; its EVM key pays gas.
        web3: ``AsyncWeb3`` instance; defaults to ``identity.client.web3``.
        nonce_manager: Allocator used by ``send(..., serialize=True)``.
        logger: Optional logger overriding the module logger.

    Example::

        builder = EVMTransactionBuilder(alice)
        data = encode_function_call(get_mint_abi(), "safeMint", [alice.evm_address, 1])
        signed = await builder.send(contract, data)
        confirmation = await builder.wait_for_transaction(signed.tx_hash)
    """

    def __init__(
        self,
        identity: IdentityCapability,
        web3: Optional[AsyncWeb3] = None,
        nonce_manager: Optional[NonceManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.identity = identity
        self.web3 = web3 or identity.client.web3
        self.logger = logger or logging.getLogger(__name__)
        self.nonce_manager = nonce_manager or NonceManager(logger=self.logger)

    @property
    def sender(self) -> str:
        return self.identity.evm_address

    @property
    def chain_id(self) -> int:
        return self.identity.evm_chain_id

    async def estimate_gas(self, to: Optional[str], data: str, is_deploy: bool = False) -> int:
        """
        Gas limit for a call or deployment.

        Returns:
            int: The raw estimate for calls, ``estimate * 120 // 100`` for deployments.

        Raises:
            GasEstimationError: If the node cannot estimate (revert or transport error).
        """
        params: Dict[str, Any] = {"from": self.sender, "data": data, "value": ZERO_VALUE}
        if to is not None:
            params["to"] = to
        try:
            estimate = int(await self.web3.eth.estimate_gas(params))
        except Exception as e:
            raise GasEstimationError(
                f"gas estimation failed: {e}",
                address=self.sender,
                to=to,
                chain_id=self.chain_id,
            ) from e

        gas = deploy_gas_limit(estimate) if is_deploy else estimate
        self.logger.debug("Estimated gas for %s: %d (limit %d)", to or "deployment", estimate, gas)
        return gas

    async def get_nonce(self) -> int:
        """
        The sender's ``pending`` transaction count.

        Raises:
            NonceFetchError: If the node call fails.
        """
        try:
            return int(await self.web3.eth.get_transaction_count(self.sender, PENDING_BLOCK))
        except Exception as e:
            raise NonceFetchError(
                f"cannot fetch pending nonce: {e}",
                address=self.sender,
                endpoint="eth_getTransactionCount",
            ) from e

    async def get_gas_price(self) -> int:
        """
        Suggested gas price in wei.

        Raises:
            ChainCommunicationError: If the node call fails.
        """
        try:
            return int(await self.web3.eth.gas_price)
        except Exception as e:
            raise ChainCommunicationError(
                f"cannot fetch gas price: {e}", endpoint="eth_gasPrice"
            ) from e

    async def build(
        self,
        to: Optional[str],
        data: str,
        *,
        is_deploy: bool = False,
        nonce: Optional[int] = None,
    ) -> EVMTransactionRequest:
        """
        Assemble an unsigned envelope: gas, pending nonce, gas price, zero value.

        Args:
            to: Target contract; ``None`` only for deployments.
            data: Call data or deployment data.
            is_deploy: Apply the deployment gas buffer.
            nonce: Pre-allocated nonce; fetched from the node when omitted.

        Raises:
            TransactionBuildError: If a call has no target.
            GasEstimationError: If gas estimation fails.
            NonceFetchError: If the nonce cannot be fetched.
        """
        if to is None and not is_deploy:
            raise TransactionBuildError("call target is required", address=self.sender)

        gas = await self.estimate_gas(to, data, is_deploy=is_deploy)
        if nonce is None:
            nonce = await self.get_nonce()
        gas_price = await self.get_gas_price()

        return EVMTransactionRequest(
            sender=self.sender,
            to=None if is_deploy else to,
            nonce=nonce,
            value=ZERO_VALUE,
            gas=gas,
            gas_price=gas_price,
            data=data,
            chain_id=self.chain_id,
        )

    def sign(self, request: EVMTransactionRequest) -> SignedEVMTransaction:
        """
        Sign an envelope with the identity's key (EIP-155).

        Raises:
            SigningError: If signing fails or the envelope targets another chain.
        """
        if request.sender.lower() != self.sender.lower():
            raise SigningError(
                "envelope sender does not match the signer",
                address=self.sender,
                sender=request.sender,
            )
        signed = self.identity.sign_transaction(request.to_tx_dict())
        return SignedEVMTransaction(
            raw_transaction=to_hex_str(signed.raw_transaction),
            tx_hash=to_hex_str(signed.hash),
            request=request,
        )

    async def submit(self, signed: SignedEVMTransaction) -> str:
        """
        Send a signed envelope with ``eth_sendRawTransaction``.

        Returns:
            str: Transaction hash.

        Raises:
            SubmissionError: If the node refuses the call.
        """
        try:
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_bytes)
        except Exception as e:
            raise SubmissionError(
                f"failed to submit transaction: {e}",
                address=self.sender,
                nonce=signed.request.nonce,
                tx_hash=signed.tx_hash,
                chain_id=self.chain_id,
            ) from e

        tx_hash_hex = to_hex_str(tx_hash)
        self.logger.info(
            "Submitted %s from %s (nonce %d, gas %d)",
            tx_hash_hex, self.sender, signed.request.nonce, signed.request.gas,
        )
        return tx_hash_hex

    async def send(
        self,
        to: Optional[str],
        data: str,
        *,
        is_deploy: bool = False,
        sign_only: bool = False,
        serialize: bool = False,
    ) -> SignedEVMTransaction:
        """
        Build, sign and (unless ``sign_only``) submit.

        Args:
            to: Target contract; ``None`` with ``is_deploy`` for deployments.
            data: Call data or deployment data.
            is_deploy: Deployment envelope.
            sign_only: Return the signed envelope without submitting it.
            serialize: Hold this signer's nonce lock from nonce fetch to
                submission so concurrent sends never reuse a nonce.

        Returns:
            SignedEVMTransaction: ``submitted`` is True when it was sent.
        """
        if sign_only or not serialize:
            signed = self.sign(await self.build(to, data, is_deploy=is_deploy))
            if sign_only:
                return signed
            tx_hash = await self.submit(signed)
            return signed.model_copy(update={"tx_hash": tx_hash, "submitted": True})

        async with self.nonce_manager.reserve(self.sender, self.get_nonce) as nonce:
            signed = self.sign(await self.build(to, data, is_deploy=is_deploy, nonce=nonce))
            tx_hash = await self.submit(signed)
        return signed.model_copy(update={"tx_hash": tx_hash, "submitted": True})

    async def deploy(
        self,
        bytecode: str,
        abi: Sequence[Dict[str, Any]],
        args: Sequence[Any],
        *,
        sign_only: bool = False,
        serialize: bool = False,
    ) -> SignedEVMTransaction:
        """
        Deploy a contract: bytecode plus encoded constructor arguments.

        Raises:
            PackingError: If the constructor arguments do not match the ABI.
        """
        data = encode_deploy_data(bytecode, abi, args)
        return await self.send(None, data, is_deploy=True, sign_only=sign_only, serialize=serialize)

    async def _fetch_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except Exception as e:
            raise ChainCommunicationError(
                f"cannot fetch receipt: {e}",
                tx_hash=tx_hash,
                endpoint="eth_getTransactionReceipt",
            ) from e

    async def check_transaction_receipt(self, tx_hash: str) -> Optional[EVMTransactionConfirmation]:
        """
        One receipt lookup.

        Returns:
            Optional[EVMTransactionConfirmation]: ``None`` while the transaction
            is not included, otherwise its result (success or failure).
        """
        if not tx_hash:
            raise ValidationError("transaction hash must not be empty", field="tx_hash")
        receipt = await self._fetch_receipt(tx_hash)
        if receipt is None:
            return None
        return EVMTransactionConfirmation.from_receipt(receipt)

    async def wait_for_transaction(
        self,
        tx_hash: str,
        poller: Optional[ConfirmationPoller] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> EVMTransactionConfirmation:
        """
        Poll for the receipt of ``tx_hash``.

        Returns:
            EVMTransactionConfirmation: ``SUCCESS`` result.

        Raises:
            ValidationError: If ``tx_hash`` is empty.
            LogicalTxFailure: If the receipt status is 0; carries the receipt data.
            ConfirmationTimeoutError: If no receipt appears within the window.
            ConfirmationCancelledError: If ``cancel_event`` was set.
        """
        if not tx_hash:
            raise ValidationError("transaction hash must not be empty", field="tx_hash")
        poller = poller or ConfirmationPoller(logger=self.logger)

        async def fetch() -> Observation:
            receipt = await self._fetch_receipt(tx_hash)
            if receipt is None:
                return Observation.pending()
            state = PollState.CONFIRMED if receipt.get("status") == 1 else PollState.FAILED
            return Observation(state, receipt)

        result = await poller.wait(fetch, tx_hash=tx_hash, cancel_event=cancel_event)

        if result.state is PollState.TIMED_OUT:
            raise ConfirmationTimeoutError(
                "transaction not confirmed within the polling window",
                tx_hash=tx_hash,
                address=self.sender,
                timeout=poller.timeout,
            )

        confirmation = EVMTransactionConfirmation.from_receipt(
            result.receipt, execution_time=result.elapsed
        )
        if result.state is PollState.FAILED:
            self.logger.warning("Transaction %s reverted (gas used %s)", tx_hash, confirmation.gas_used)
            raise LogicalTxFailure(
                "transaction reverted on-chain",
                confirmation=confirmation,
                address=self.sender,
                chain_id=self.chain_id,
            )
        return confirmation
