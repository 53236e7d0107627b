from .exceptions import (
    LbbError,
    ValidationError,
    InvalidSeedError,
    InvalidDerivationPathError,
    UnknownChainError,
    NoMessagesError,
    UninitializedSignerError,
    PermitScopeError,
    DerivationError,
    KeyStoreError,
    ConfigurationError,
    ChainCommunicationError,
    FactoryPrepareError,
    NonceFetchError,
    SimulationError,
    OfflineSimulationUnavailableError,
    GasEstimationError,
    TransactionBuildError,
    PackingError,
    EncodingError,
    SigningError,
    SubmissionError,
    LogicalTxFailure,
    TxRejectedError,
    ConfirmationTimeoutError,
    ConfirmationCancelledError,
)
from .poller import (
    ConfirmationPoller,
    Observation,
    PollResult,
    PollState,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
)
from .nonces import NonceManager

__all__ = [
    "LbbError",
    "ValidationError",
    "InvalidSeedError",
    "InvalidDerivationPathError",
    "UnknownChainError",
    "NoMessagesError",
    "UninitializedSignerError",
    "PermitScopeError",
    "DerivationError",
    "KeyStoreError",
    "ConfigurationError",
    "ChainCommunicationError",
    "FactoryPrepareError",
    "NonceFetchError",
    "SimulationError",
    "OfflineSimulationUnavailableError",
    "GasEstimationError",
    "TransactionBuildError",
    "PackingError",
    "EncodingError",
    "SigningError",
    "SubmissionError",
    "LogicalTxFailure",
    "TxRejectedError",
    "ConfirmationTimeoutError",
    "ConfirmationCancelledError",
    "ConfirmationPoller",
    "Observation",
    "PollResult",
    "PollState",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_POLL_TIMEOUT",
    "NonceManager",
]
