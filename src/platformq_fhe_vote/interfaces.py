"""
Interfaces (protocols) for the external collaborators of the voting core.
Using Python's Protocol for structural subtyping.
"""

from typing import Protocol, Dict, Any, Optional, List, Callable, Awaitable
from abc import abstractmethod

from .models import EncryptedInput, DecryptionProof, TransactionResult


class IWalletProvider(Protocol):
    """Interface for the wallet/session provider"""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether a wallet is currently connected"""
        ...

    @property
    @abstractmethod
    def account(self) -> Optional[str]:
        """Connected account address"""
        ...

    @abstractmethod
    def subscribe(self, callback: Callable[[bool, Optional[str]], Any]) -> Callable[[], None]:
        """Subscribe to connection changes; returns an unsubscribe callable"""
        ...


class IEncryptionEngine(Protocol):
    """Interface for the homomorphic encryption engine"""

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """Whether initialize() has completed"""
        ...

    @abstractmethod
    async def initialize(self) -> None:
        """Load engine key material; idempotent"""
        ...

    @abstractmethod
    async def encrypt(self, contract_address: str, caller_address: str,
                      value: int) -> EncryptedInput:
        """Encrypt a plaintext integer bound to a contract and caller"""
        ...

    @abstractmethod
    async def request_decryption(self, handles: List[str],
                                 contract_address: str) -> DecryptionProof:
        """Decrypt handles off-chain and return clear values with a proof"""
        ...


class ITransactionHandle(Protocol):
    """Interface for a submitted ledger transaction"""

    @property
    @abstractmethod
    def transaction_hash(self) -> str:
        ...

    @abstractmethod
    async def await_finality(self) -> TransactionResult:
        """Wait until the transaction is irreversibly recorded"""
        ...


class ILedgerReadContract(Protocol):
    """Interface for read-only ledger calls"""

    @property
    @abstractmethod
    def address(self) -> str:
        """Deployed contract address"""
        ...

    @abstractmethod
    async def get_all_proposal_ids(self) -> List[str]:
        ...

    @abstractmethod
    async def get_proposal_data(self, external_id: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def get_encrypted_value_handle(self, external_id: str) -> str:
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Liveness probe with no side effects"""
        ...


class ILedgerWriteContract(Protocol):
    """Interface for mutating ledger calls"""

    @abstractmethod
    async def create_proposal(self, external_id: str, title: str,
                              encrypted_payload: bytes, proof: bytes,
                              plaintext_weight: int, secondary_value: int,
                              description: str) -> ITransactionHandle:
        ...

    @abstractmethod
    async def submit_verified_decryption(self, external_id: str,
                                         clear_values_encoded: bytes,
                                         proof: bytes) -> ITransactionHandle:
        ...


# Supplies write access on demand; returns None when no signer is available
SignerProvider = Callable[[], Awaitable[Optional[ILedgerWriteContract]]]

# Submission callback for the composite decrypt-and-verify form
SubmitVerification = Callable[[bytes, bytes], Awaitable[ITransactionHandle]]
