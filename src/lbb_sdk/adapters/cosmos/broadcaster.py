"""
Message-chain transaction pipeline.

``broadcast_tx`` runs the full pipeline for one multi-message transaction:

    1. reject an empty message list
    2. reject a signer without a chain-native address
    3. resolve account number and sequence from the chain
    4. optionally simulate and replace the gas limit with ``ceil(used * adjustment)``
    5. stop here in simulate-only mode
    6. build ``TxBody``, ``AuthInfo`` and the ``SIGN_MODE_DIRECT`` sign document
    7. sign it with the chain-native key
    8. encode the signed ``TxRaw`` protobuf
    9. submit, and treat a non-zero CheckTx code as a logical failure

``broadcast_tx_and_wait`` adds the confirmation poller on top.
Nothing here retries.
"""

import asyncio
import hashlib
import logging
from typing import Optional, Sequence

from cosmpy.protos.cosmos.crypto.secp256k1.keys_pb2 import PubKey
from cosmpy.protos.cosmos.tx.signing.v1beta1.signing_pb2 import SignMode
from cosmpy.protos.cosmos.tx.v1beta1.tx_pb2 import (
    AuthInfo,
    ModeInfo,
    SignDoc,
    SignerInfo,
    TxBody,
    TxRaw,
)
from google.protobuf.message import EncodeError

from ...accounts.identity import IdentityCapability
from ...engine.exceptions import (
    ChainCommunicationError,
    ConfirmationTimeoutError,
    EncodingError,
    GasEstimationError,
    KeyStoreError,
    LogicalTxFailure,
    NoMessagesError,
    OfflineSimulationUnavailableError,
    SigningError,
    SimulationError,
    SubmissionError,
    TransactionBuildError,
    TxRejectedError,
    UninitializedSignerError,
    ValidationError,
)
from ...engine.poller import ConfirmationPoller, Observation, PollState
from ...schemas.bases import TransactionStatus
from .factory import TxFactory, adjust_gas
from .node import CosmosNodeClient
from .schemas import CosmosTransactionConfirmation, Msg, pack_msg

logger = logging.getLogger(__name__)


def build_sign_doc(
    chain_id: str,
    factory: TxFactory,
    msgs: Sequence[Msg],
    public_key: bytes,
) -> SignDoc:
    """
    Assemble the ``SIGN_MODE_DIRECT`` sign document for a prepared factory.

    Args:
        chain_id: Message-chain id the signature commits to (``fivenet``).
        factory: Prepared factory supplying fee, memo, sequence and account number.
        msgs: Protobuf messages, packed into the body in order.
        public_key: Compressed secp256k1 key of the signer.

    Raises:
        TransactionBuildError: If the factory is not prepared or a message cannot be packed.
    """
    if not factory.is_prepared:
        raise TransactionBuildError("factory has no account number or sequence")
    try:
        body = TxBody(
            messages=[pack_msg(msg) for msg in msgs],
            memo=factory.memo,
            timeout_height=factory.timeout_height,
        )
        signer_info = SignerInfo(
            mode_info=ModeInfo(single=ModeInfo.Single(mode=SignMode.SIGN_MODE_DIRECT)),
            sequence=factory.sequence,
        )
        signer_info.public_key.Pack(PubKey(key=public_key), type_url_prefix="/")
        auth_info = AuthInfo(signer_infos=[signer_info], fee=factory.compute_fee().to_proto())
        return SignDoc(
            body_bytes=body.SerializeToString(),
            auth_info_bytes=auth_info.SerializeToString(),
            chain_id=chain_id,
            account_number=factory.account_number,
        )
    except (EncodeError, TypeError, ValueError) as e:
        raise TransactionBuildError(f"cannot build transaction: {e}", chain_id=chain_id) from e


def sign_tx(identity: IdentityCapability, sign_doc: SignDoc) -> TxRaw:
    """
    Sign a sign document with the identity's chain-native key.

    The signature is secp256k1 over ``sha256(SignDoc bytes)``, low-s, 64-byte ``r||s``.

    Raises:
        SigningError: If the key store cannot sign.
    """
    try:
        signature = identity.sign_chain_bytes(sign_doc.SerializeToString())
    except (KeyStoreError, SigningError) as e:
        raise SigningError(
            f"cannot sign transaction: {e.message}", address=identity.chain_address
        ) from e

    return TxRaw(
        body_bytes=sign_doc.body_bytes,
        auth_info_bytes=sign_doc.auth_info_bytes,
        signatures=[signature],
    )


def encode_tx(tx: TxRaw) -> bytes:
    """
    Wire bytes of a signed transaction.

    Raises:
        EncodingError: If the transaction cannot be serialized.
    """
    try:
        return tx.SerializeToString()
    except EncodeError as e:
        raise EncodingError(f"cannot encode transaction: {e}") from e


def compute_tx_hash(tx_bytes: bytes) -> str:
    """Upper-case hex ``sha256`` of the wire bytes, as the node reports it."""
    return hashlib.sha256(tx_bytes).hexdigest().upper()


def _signed_bytes(identity: IdentityCapability, factory: TxFactory, msgs: Sequence[Msg]) -> bytes:
    chain_id = identity.client.cosmos_chain_id
    try:
        public_key = identity.chain_public_key
    except (KeyStoreError, SigningError) as e:
        raise SigningError(
            f"cannot load signer key: {e.message}", address=identity.chain_address
        ) from e
    return encode_tx(sign_tx(identity, build_sign_doc(chain_id, factory, msgs, public_key)))


async def _simulate_gas(
    identity: IdentityCapability,
    node: CosmosNodeClient,
    factory: TxFactory,
    msgs: Sequence[Msg],
) -> int:
    tx_bytes = _signed_bytes(identity, factory, msgs)
    try:
        simulated = await node.simulate(tx_bytes)
    except (SimulationError, ChainCommunicationError) as e:
        raise GasEstimationError(
            f"gas estimation failed: {e.message}",
            address=identity.chain_address,
            chain_id=identity.client.cosmos_chain_id,
        ) from e
    return adjust_gas(simulated.gas_used, factory.gas_adjustment)


async def broadcast_tx(
    identity: IdentityCapability,
    factory: TxFactory,
    msgs: Sequence[Msg],
) -> CosmosTransactionConfirmation:
    """
    Build, sign and submit one message-chain transaction.

    Args:
        identity: Dual-chain identity signing the transaction.
        factory: Broadcast settings.
        msgs: Messages, executed atomically in one transaction.

    Returns:
        CosmosTransactionConfirmation: ``PENDING`` with the hash once the
        node accepted the transaction, or ``SIMULATED`` in simulate-only mode.

    Raises:
        NoMessagesError: If ``msgs`` is empty.
        UninitializedSignerError: If the identity has no chain-native address.
        FactoryPrepareError: If account state cannot be resolved.
        OfflineSimulationUnavailableError: If simulation is asked for offline.
        GasEstimationError: If simulation fails; nothing is submitted.
        TransactionBuildError: If the sign document cannot be built.
        SigningError: If signing fails.
        EncodingError: If the signed transaction cannot be encoded.
        SubmissionError: If the submit call itself fails.
        TxRejectedError: If the node answers with a non-zero code.
    """
    if not msgs:
        raise NoMessagesError()
    if not identity.chain_address:
        raise UninitializedSignerError(label=identity.label, address=identity.evm_address)

    client = identity.client
    node = client.node
    address = identity.chain_address

    factory = await factory.prepare(node, address, offline=client.offline)

    if factory.simulate or factory.simulate_only:
        if client.offline:
            raise OfflineSimulationUnavailableError(
                "simulation is not available in offline mode", address=address
            )
        gas = await _simulate_gas(identity, node, factory, msgs)
        logger.debug("Simulated gas for %s: %d", address, gas)
        factory = factory.with_gas(gas)

    if factory.simulate_only:
        return CosmosTransactionConfirmation(
            status=TransactionStatus.SIMULATED,
            gas_limit=factory.gas,
        )

    tx_bytes = _signed_bytes(identity, factory, msgs)

    try:
        response = await node.broadcast(tx_bytes, factory.broadcast_mode)
    except ChainCommunicationError as e:
        raise SubmissionError(
            f"broadcast failed: {e.message}", address=address, endpoint=e.context.get("endpoint")
        ) from e

    if not response.is_accepted():
        rejected = CosmosTransactionConfirmation(
            status=TransactionStatus.REJECTED,
            tx_hash=response.tx_hash,
            code=response.code,
            codespace=response.codespace,
            error_message=response.raw_log,
            gas_limit=factory.gas,
        )
        logger.warning(
            "Transaction %s rejected with code %d: %s",
            response.tx_hash, response.code, response.raw_log,
        )
        raise TxRejectedError("transaction rejected by the node", confirmation=rejected)

    logger.info(
        "Submitted %s from %s (sequence %s, gas %d)",
        response.tx_hash, address, factory.sequence, factory.gas,
    )
    return CosmosTransactionConfirmation(
        status=TransactionStatus.PENDING,
        tx_hash=response.tx_hash,
        gas_limit=factory.gas,
    )


async def wait_for_tx(
    node: CosmosNodeClient,
    tx_hash: str,
    poller: Optional[ConfirmationPoller] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> CosmosTransactionConfirmation:
    """
    Poll the node until ``tx_hash`` is included or the window closes.

    Returns:
        CosmosTransactionConfirmation: ``SUCCESS`` with height and gas used.

    Raises:
        ValidationError: If ``tx_hash`` is empty.
        LogicalTxFailure: If the transaction executed with a non-zero code.
        ConfirmationTimeoutError: If it was not seen within the timeout.
        ConfirmationCancelledError: If ``cancel_event`` was set.
    """
    if not tx_hash:
        raise ValidationError("transaction hash must not be empty", field="tx_hash")
    poller = poller or ConfirmationPoller()

    async def fetch() -> Observation:
        tx_response = await node.get_tx(tx_hash)
        if tx_response is None:
            return Observation.pending()
        state = PollState.CONFIRMED if int(tx_response.get("code") or 0) == 0 else PollState.FAILED
        return Observation(state, tx_response)

    result = await poller.wait(fetch, tx_hash=tx_hash, cancel_event=cancel_event)

    if result.state is PollState.TIMED_OUT:
        raise ConfirmationTimeoutError(
            "transaction not confirmed within the polling window",
            tx_hash=tx_hash,
            timeout=poller.timeout,
        )

    confirmation = CosmosTransactionConfirmation.from_tx_response(
        result.receipt, execution_time=result.elapsed
    )
    if result.state is PollState.FAILED:
        raise LogicalTxFailure("transaction failed on-chain", confirmation=confirmation)
    return confirmation


async def broadcast_tx_and_wait(
    identity: IdentityCapability,
    factory: TxFactory,
    msgs: Sequence[Msg],
    poller: Optional[ConfirmationPoller] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> CosmosTransactionConfirmation:
    """
    :func:`broadcast_tx` followed by :func:`wait_for_tx`.

    A simulate-only run returns the ``SIMULATED`` result without polling.
    """
    submitted = await broadcast_tx(identity, factory, msgs)
    if submitted.status is TransactionStatus.SIMULATED:
        return submitted
    return await wait_for_tx(
        identity.client.node, submitted.tx_hash, poller, cancel_event=cancel_event
    )
