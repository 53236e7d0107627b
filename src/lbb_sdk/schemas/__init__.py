from .bases import (
    CanonicalModel,
    BaseSignature,
    VerificationStatus,
    BaseVerificationResult,
    TransactionStatus,
    BaseTransactionConfirmation,
    canonical_json,
)

__all__ = [
    "CanonicalModel",
    "BaseSignature",
    "VerificationStatus",
    "BaseVerificationResult",
    "TransactionStatus",
    "BaseTransactionConfirmation",
    "canonical_json",
]
