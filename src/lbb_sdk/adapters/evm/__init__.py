from .constants import (
    DEPLOY_GAS_BUFFER_PERCENT,
    PERMIT_DOMAIN_VERSION,
    deploy_gas_limit,
)
from .standards import (
    EIP712Domain,
    PermitMessage,
    PermitTypedData,
    PermitForAllMessage,
    PermitForAllTypedData,
)
from .schemas import (
    PermitSignature,
    SignedPermit,
    SignedPermitForAll,
    EVMTransactionRequest,
    SignedEVMTransaction,
    EVMTransactionConfirmation,
    PermitVerificationResult,
)
from .encoding import encode_function_call, encode_deploy_data
from .builder import EVMTransactionBuilder
from .permits import (
    build_permit_typed_data,
    build_permit_for_all_typed_data,
    permit_digest,
    sign_permit_digest,
    sign_permit,
    sign_permit_for_all,
    get_permit_nonce,
    create_permit,
    create_permit_for_all,
)
from .verifies import (
    recover_digest_signer,
    recover_permit_signer,
    verify_permit_signature,
    verify_permit,
)
from .executors import PermitExecutor
from .certificates import CertificateClient

__all__ = [
    "DEPLOY_GAS_BUFFER_PERCENT",
    "PERMIT_DOMAIN_VERSION",
    "deploy_gas_limit",
    "EIP712Domain",
    "PermitMessage",
    "PermitTypedData",
    "PermitForAllMessage",
    "PermitForAllTypedData",
    "PermitSignature",
    "SignedPermit",
    "SignedPermitForAll",
    "EVMTransactionRequest",
    "SignedEVMTransaction",
    "EVMTransactionConfirmation",
    "PermitVerificationResult",
    "encode_function_call",
    "encode_deploy_data",
    "EVMTransactionBuilder",
    "build_permit_typed_data",
    "build_permit_for_all_typed_data",
    "permit_digest",
    "sign_permit_digest",
    "sign_permit",
    "sign_permit_for_all",
    "get_permit_nonce",
    "create_permit",
    "create_permit_for_all",
    "recover_digest_signer",
    "recover_permit_signer",
    "verify_permit_signature",
    "verify_permit",
    "PermitExecutor",
    "CertificateClient",
]
