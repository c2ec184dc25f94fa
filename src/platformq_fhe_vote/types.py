"""
Core types, enums and exceptions for confidential weighted voting.
"""

from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Session gate states"""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"  # Wallet connected, encryption engine not ready
    CONNECTING_ENCRYPTION = "connecting_encryption"
    READY = "ready"


class TransactionPhase(Enum):
    """Phases of the shared transaction status slot"""
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionPhase.PENDING


class ErrorCode:
    """Machine-readable error codes"""
    PRECONDITION_UNMET = "PRECONDITION_UNMET"
    REMOTE_CALL_FAILED = "REMOTE_CALL_FAILED"
    SIGNER_UNAVAILABLE = "SIGNER_UNAVAILABLE"
    TRANSACTION_REVERTED = "TRANSACTION_REVERTED"
    USER_CANCELLED = "USER_CANCELLED"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    INVALID_RECORD = "INVALID_RECORD"


class VotingError(Exception):
    """Base exception for voting operations"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class PreconditionUnmetError(VotingError):
    """Operation rejected before any remote call"""
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PRECONDITION_UNMET)


class RemoteCallFailedError(VotingError):
    """Encryption engine or ledger call failed"""
    def __init__(self, message: str, service: str = "ledger",
                 error_code: str = ErrorCode.REMOTE_CALL_FAILED):
        self.service = service
        super().__init__(message, error_code)


class SignerUnavailableError(RemoteCallFailedError):
    """No signer available for ledger writes"""
    def __init__(self, message: str = "Failed to get contract with signer"):
        super().__init__(message, "ledger", ErrorCode.SIGNER_UNAVAILABLE)


class TransactionRevertedError(RemoteCallFailedError):
    """Transaction was mined but reverted"""
    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} reverted", "ledger",
                         ErrorCode.TRANSACTION_REVERTED)


class UserCancelledError(VotingError):
    """User dismissed the signing prompt"""
    def __init__(self, message: str = "Transaction rejected by user"):
        super().__init__(message, ErrorCode.USER_CANCELLED)


class AlreadyVerifiedError(VotingError):
    """Proposal was verified concurrently by another party"""
    def __init__(self, external_id: str):
        self.external_id = external_id
        super().__init__(f"Data already verified for {external_id}",
                         ErrorCode.ALREADY_VERIFIED)


class RecordValidationError(VotingError):
    """Ledger returned a malformed proposal record"""
    def __init__(self, external_id: str, reason: str):
        self.external_id = external_id
        super().__init__(f"Invalid record for {external_id}: {reason}",
                         ErrorCode.INVALID_RECORD)


USER_REJECTION_MARKERS = (
    "user rejected",
    "user denied",
    "rejected by user",
    "action_rejected",
)

ALREADY_VERIFIED_MARKERS = (
    "data already verified",
    "already verified",
)


def _message_of(exc: BaseException) -> str:
    return str(getattr(exc, "message", None) or exc or "")


def is_user_rejection(exc: BaseException) -> bool:
    """True when the failure text says the signing prompt was dismissed"""
    if isinstance(exc, UserCancelledError):
        return True
    text = _message_of(exc).lower()
    return any(marker in text for marker in USER_REJECTION_MARKERS)


def is_already_verified(exc: BaseException) -> bool:
    """True when the failure text says the target is already verified"""
    if isinstance(exc, AlreadyVerifiedError):
        return True
    text = _message_of(exc).lower()
    return any(marker in text for marker in ALREADY_VERIFIED_MARKERS)


def classify_error(exc: BaseException) -> VotingError:
    """Map an arbitrary exception onto the voting error taxonomy"""
    if is_user_rejection(exc):
        return exc if isinstance(exc, UserCancelledError) else UserCancelledError()
    if isinstance(exc, VotingError):
        return exc
    return RemoteCallFailedError(_message_of(exc) or "Unknown error")
