from .schemas import (
    Coin,
    Fee,
    Msg,
    msg_send,
    pack_msg,
    type_url,
    parse_coins,
    AccountInfo,
    SimulateResponse,
    BroadcastResponse,
    CosmosTransactionConfirmation,
)
from .node import (
    CosmosNodeClient,
    CosmosRestClient,
    BROADCAST_MODE_SYNC,
    BROADCAST_MODE_ASYNC,
)
from .factory import TxFactory, adjust_gas
from .broadcaster import (
    build_sign_doc,
    sign_tx,
    encode_tx,
    compute_tx_hash,
    broadcast_tx,
    broadcast_tx_and_wait,
    wait_for_tx,
)
from .bank import (
    get_balance,
    get_balance_by_denom,
    get_evm_balance,
    send_balance,
    send_balance_and_wait,
)
from .protos import MsgCreateNFTSchema, MsgCreateMetadata
from .metadata import (
    build_schema_msg,
    build_metadata_msg,
    deploy_certificate_schema,
    deploy_certificate_schema_and_wait,
    create_certificate_metadata,
    create_certificate_metadata_and_wait,
    get_certificate_schema,
    get_certificate_metadata,
)

__all__ = [
    "Coin",
    "Fee",
    "Msg",
    "msg_send",
    "pack_msg",
    "type_url",
    "parse_coins",
    "AccountInfo",
    "SimulateResponse",
    "BroadcastResponse",
    "CosmosTransactionConfirmation",
    "CosmosNodeClient",
    "CosmosRestClient",
    "BROADCAST_MODE_SYNC",
    "BROADCAST_MODE_ASYNC",
    "TxFactory",
    "adjust_gas",
    "build_sign_doc",
    "sign_tx",
    "encode_tx",
    "compute_tx_hash",
    "broadcast_tx",
    "broadcast_tx_and_wait",
    "wait_for_tx",
    "get_balance",
    "get_balance_by_denom",
    "get_evm_balance",
    "send_balance",
    "send_balance_and_wait",
    "MsgCreateNFTSchema",
    "MsgCreateMetadata",
    "build_schema_msg",
    "build_metadata_msg",
    "deploy_certificate_schema",
    "deploy_certificate_schema_and_wait",
    "create_certificate_metadata",
    "create_certificate_metadata_and_wait",
    "get_certificate_schema",
    "get_certificate_metadata",
]
