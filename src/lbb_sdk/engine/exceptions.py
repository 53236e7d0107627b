"""
Exception and Error Definitions Module

Defines the exception hierarchy for key derivation, transaction construction,
submission and confirmation on both chains. All exceptions inherit from
``LbbError`` so callers can catch everything the SDK raises in one place.

Every error carries a ``context`` dictionary (transaction hash, address,
chain id, raw log, ...) with enough information for the caller to decide on
a retry. Nothing in the SDK retries on its own.

Exception Hierarchy:
    LbbError (root)
    ├── ValidationError
    │   ├── InvalidSeedError
    │   ├── InvalidDerivationPathError
    │   ├── UnknownChainError
    │   ├── NoMessagesError
    │   ├── UninitializedSignerError
    │   └── PermitScopeError
    ├── DerivationError
    ├── KeyStoreError
    ├── ConfigurationError
    ├── ChainCommunicationError
    │   ├── FactoryPrepareError
    │   └── NonceFetchError
    ├── SimulationError
    │   ├── OfflineSimulationUnavailableError
    │   └── GasEstimationError
    ├── TransactionBuildError
    │   ├── PackingError
    │   └── EncodingError
    ├── SigningError
    ├── SubmissionError
    ├── LogicalTxFailure
    │   └── TxRejectedError
    ├── ConfirmationTimeoutError
    └── ConfirmationCancelledError
"""

from typing import Any, Dict, Optional


class LbbError(Exception):
    """
    Root exception class for all SDK exceptions.

    Args:
        message: Human-readable description.
        **context: Diagnostic values (``tx_hash``, ``address``, ``chain_id``,
            ``raw_log`` ...). ``None`` values are dropped.

    Example:
        try:
            await broadcast_tx(identity, factory, msgs)
        except LbbError as e:
            print(e.context.get("tx_hash"))
    """

    def __init__(self, message: str = "", **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class ValidationError(LbbError):
    """
    Raised when an input has the wrong shape.

    This includes scenarios such as:
    - Empty account label or missing client
    - Malformed mnemonic or derivation path
    - Malformed address

    Attributes:
        field: Name of the failing input
    """

    def __init__(self, message: str = "", field: Optional[str] = None, **context: Any):
        super().__init__(message, field=field, **context)
        self.field = field


class InvalidSeedError(ValidationError):
    """
    Raised when a recovery phrase fails the BIP-39 wordlist or checksum check.
    """

    def __init__(self, message: str = "invalid mnemonic", field: Optional[str] = "secret_seed", **context: Any):
        super().__init__(message, field=field, **context)


class InvalidDerivationPathError(ValidationError):
    """
    Raised when an HD derivation path string cannot be parsed.
    """

    def __init__(self, message: str = "", field: Optional[str] = "path", **context: Any):
        super().__init__(message, field=field, **context)


class UnknownChainError(ValidationError):
    """
    Raised when a chain name is missing from the chain-name to chain-id table.
    """

    def __init__(self, message: str = "", field: Optional[str] = "chain_name", **context: Any):
        super().__init__(message, field=field, **context)


class NoMessagesError(ValidationError):
    """
    Raised when a message-chain transaction is broadcast without messages.
    """

    def __init__(self, message: str = "no messages to broadcast", field: Optional[str] = "msgs", **context: Any):
        super().__init__(message, field=field, **context)


class UninitializedSignerError(ValidationError):
    """
    Raised when the signer has no chain-native address.

    Identities built from a raw private key are EVM-only and never sign
    message-chain transactions.
    """

    def __init__(self, message: str = "signer has no chain-native address", field: Optional[str] = "chain_address", **context: Any):
        super().__init__(message, field=field, **context)


class PermitScopeError(ValidationError):
    """
    Raised when a permit execution asks for something the owner did not sign.

    The signed permit message is the only source of truth for owner,
    counterparty, subject and deadline.
    """
    pass


class DerivationError(LbbError):
    """
    Raised when key derivation fails after input validation passed.

    This includes scenarios such as:
    - Derived scalar outside the secp256k1 range
    - Child key derivation failure
    """
    pass


class KeyStoreError(LbbError):
    """
    Raised by the local key store.

    This includes scenarios such as:
    - A label already bound to a different address
    - Signing with an unknown label
    """
    pass


class ConfigurationError(LbbError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Unknown network name in the environment
    - Missing RPC endpoint
    """
    pass


class ChainCommunicationError(LbbError):
    """
    Raised when an RPC or REST call to a chain node fails at the transport level.

    Attributes:
        endpoint: Endpoint or RPC method that failed
    """
    pass


class FactoryPrepareError(ChainCommunicationError):
    """
    Raised when account number or sequence cannot be resolved from the chain.
    """
    pass


class NonceFetchError(ChainCommunicationError):
    """
    Raised when the pending EVM nonce cannot be fetched.
    """
    pass


class SimulationError(LbbError):
    """
    Base exception for simulation failures. Aborts the whole operation.
    """
    pass


class OfflineSimulationUnavailableError(SimulationError):
    """
    Raised when simulation is requested from a client running in offline mode.
    """
    pass


class GasEstimationError(SimulationError):
    """
    Raised when the node cannot estimate gas for a transaction.
    """
    pass


class TransactionBuildError(LbbError):
    """
    Raised when an unsigned transaction cannot be assembled.
    """
    pass


class PackingError(TransactionBuildError):
    """
    Raised when function arguments do not match the ABI.
    """
    pass


class EncodingError(TransactionBuildError):
    """
    Raised when a signed transaction cannot be encoded to wire bytes.
    """
    pass


class SigningError(LbbError):
    """
    Raised when signing a transaction, digest or sign document fails.
    """
    pass


class SubmissionError(LbbError):
    """
    Raised when the node refuses the submit call itself (transport level).

    A transaction that was accepted and later failed raises
    :class:`LogicalTxFailure` instead.
    """
    pass


class LogicalTxFailure(LbbError):
    """
    Raised when a transaction reached the chain but executed with a non-zero
    code or a failed receipt status.

    Attributes:
        confirmation: The transaction result, so callers can inspect gas usage
    """

    def __init__(self, message: str = "", confirmation: Any = None, **context: Any):
        if confirmation is not None:
            context.setdefault("tx_hash", getattr(confirmation, "tx_hash", None))
            context.setdefault("code", getattr(confirmation, "code", None))
            context.setdefault("raw_log", getattr(confirmation, "error_message", None))
        super().__init__(message, **context)
        self.confirmation = confirmation


class TxRejectedError(LogicalTxFailure):
    """
    Raised when the synchronous broadcast response carries a non-zero code.
    """
    pass


class ConfirmationTimeoutError(LbbError, TimeoutError):
    """
    Raised when no final status is observed within the polling window.

    The transaction may still be included later; this is not a failure.
    """
    pass


class ConfirmationCancelledError(LbbError):
    """
    Raised when a confirmation wait is stopped through its cancel token.
    """
    pass
