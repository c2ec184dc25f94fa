"""
PlatformQ FHE Vote

Client-side orchestration for confidential weighted proposals: encrypted
weights are submitted to an EVM ledger and later revealed with an on-chain
checked decryption proof.
"""

from .types import (
    SessionState,
    TransactionPhase,
    ErrorCode,
    VotingError,
    PreconditionUnmetError,
    RemoteCallFailedError,
    SignerUnavailableError,
    TransactionRevertedError,
    UserCancelledError,
    AlreadyVerifiedError,
    RecordValidationError,
    classify_error
)

from .models import (
    Proposal,
    ProposalRecord,
    EncryptedInput,
    DecryptionProof,
    DecryptionResult,
    TransactionResult,
    VoteStats,
    StatusEvent,
    CreateProposalForm
)

from .interfaces import (
    IWalletProvider,
    IEncryptionEngine,
    ITransactionHandle,
    ILedgerReadContract,
    ILedgerWriteContract
)

from .config import Settings, get_settings
from .logging_config import setup_structured_logging
from .status import StatusChannel
from .history import OperationHistory
from .stats import compute_stats, effective_weight, weight_percentage
from .store import VoteStore
from .session import SessionGate
from .ledger import LedgerReader, LedgerWriter
from .orchestrator import VoteWorkflowOrchestrator, verify_decryption
from .client import VotingClient

__all__ = [
    # Types
    "SessionState",
    "TransactionPhase",
    "ErrorCode",
    "VotingError",
    "PreconditionUnmetError",
    "RemoteCallFailedError",
    "SignerUnavailableError",
    "TransactionRevertedError",
    "UserCancelledError",
    "AlreadyVerifiedError",
    "RecordValidationError",
    "classify_error",

    # Models
    "Proposal",
    "ProposalRecord",
    "EncryptedInput",
    "DecryptionProof",
    "DecryptionResult",
    "TransactionResult",
    "VoteStats",
    "StatusEvent",
    "CreateProposalForm",

    # Interfaces
    "IWalletProvider",
    "IEncryptionEngine",
    "ITransactionHandle",
    "ILedgerReadContract",
    "ILedgerWriteContract",

    # Config & logging
    "Settings",
    "get_settings",
    "setup_structured_logging",

    # Components
    "StatusChannel",
    "OperationHistory",
    "compute_stats",
    "effective_weight",
    "weight_percentage",
    "VoteStore",
    "SessionGate",
    "LedgerReader",
    "LedgerWriter",
    "VoteWorkflowOrchestrator",
    "verify_decryption",
    "VotingClient"
]

__version__ = "1.0.0"
