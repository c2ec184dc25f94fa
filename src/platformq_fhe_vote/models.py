"""
Data models for proposals, encryption artifacts and derived state.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass, field, replace
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .types import TransactionPhase


class ProposalRecord(BaseModel):
    """Raw proposal record as returned by the ledger's getBusinessData"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    creator: str
    timestamp: int = Field(ge=0)
    public_value1: int = Field(0, alias="publicValue1", ge=0)
    public_value2: int = Field(0, alias="publicValue2", ge=0)
    is_verified: bool = Field(False, alias="isVerified")
    decrypted_value: int = Field(0, alias="decryptedValue", ge=0)


@dataclass(frozen=True)
class Proposal:
    """A single votable item keyed by its ledger external id"""
    external_id: str
    title: str
    description: str
    creator: str
    created_at: int
    public_weight: int
    secondary_public_value: int = 0
    is_verified: bool = False
    verified_weight: Optional[int] = None

    @classmethod
    def from_record(cls, external_id: str, record: ProposalRecord) -> "Proposal":
        return cls(
            external_id=external_id,
            title=record.name,
            description=record.description,
            creator=record.creator,
            created_at=record.timestamp,
            public_weight=record.public_value1,
            secondary_public_value=record.public_value2,
            is_verified=record.is_verified,
            verified_weight=record.decrypted_value if record.is_verified else None,
        )

    def keep_verification_of(self, previous: Optional["Proposal"]) -> "Proposal":
        """Carry a previously observed verification forward; it never reverts"""
        if previous is None or self.is_verified or not previous.is_verified:
            return self
        return replace(self, is_verified=True, verified_weight=previous.verified_weight)


@dataclass(frozen=True)
class EncryptedInput:
    """Encrypted weight plus the proof the ledger checks on acceptance"""
    encrypted_payload: bytes
    correctness_proof: bytes


@dataclass(frozen=True)
class DecryptionProof:
    """Output of the off-chain decryption phase"""
    clear_values: Dict[str, int]
    abi_encoded_clear_values: bytes
    decryption_proof: bytes


@dataclass(frozen=True)
class DecryptionResult:
    """Output of a completed decrypt-and-verify round trip"""
    clear_values: Dict[str, int]
    transaction_hash: Optional[str] = None


@dataclass(frozen=True)
class TransactionResult:
    """Finalized ledger transaction"""
    transaction_hash: str
    block_number: int
    gas_used: int = 0
    succeeded: bool = True
    logs: tuple = ()


@dataclass(frozen=True)
class VoteStats:
    """Aggregate statistics over the current proposal set"""
    total_votes: int = 0
    verified_votes: int = 0
    avg_weight: float = 0.0
    recent_activity: int = 0


@dataclass(frozen=True)
class StatusEvent:
    """One entry of the transaction status stream"""
    sequence: int
    phase: TransactionPhase
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "status": self.phase.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class CreateProposalForm:
    """Editable state of the proposal creation form"""
    title: str = ""
    description: str = ""
    weight: str = ""
    is_open: bool = False

    @property
    def can_submit(self) -> bool:
        return bool(self.title.strip()) and bool(self.weight.strip())

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def reset(self) -> None:
        self.title = ""
        self.description = ""
        self.weight = ""
