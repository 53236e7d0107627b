from .unions import (
    PermitTypes,
    TransactionConfirmationTypes,
    parse_permit,
    parse_confirmation,
)
from .cosmos import (
    TxFactory,
    CosmosNodeClient,
    CosmosRestClient,
    CosmosTransactionConfirmation,
    broadcast_tx,
    broadcast_tx_and_wait,
    wait_for_tx,
)
from .evm import (
    EVMTransactionBuilder,
    EVMTransactionConfirmation,
    SignedPermit,
    SignedPermitForAll,
    PermitExecutor,
    CertificateClient,
    sign_permit,
    sign_permit_for_all,
    create_permit,
    create_permit_for_all,
    verify_permit,
)

__all__ = [
    "PermitTypes",
    "TransactionConfirmationTypes",
    "parse_permit",
    "parse_confirmation",
    "TxFactory",
    "CosmosNodeClient",
    "CosmosRestClient",
    "CosmosTransactionConfirmation",
    "broadcast_tx",
    "broadcast_tx_and_wait",
    "wait_for_tx",
    "EVMTransactionBuilder",
    "EVMTransactionConfirmation",
    "SignedPermit",
    "SignedPermitForAll",
    "PermitExecutor",
    "CertificateClient",
    "sign_permit",
    "sign_permit_for_all",
    "create_permit",
    "create_permit_for_all",
    "verify_permit",
]
