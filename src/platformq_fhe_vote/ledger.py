"""
Ledger reader and writer used by the workflow orchestrator.
"""

import asyncio
import logging
from typing import List

from pydantic import ValidationError

from .interfaces import ILedgerReadContract, ILedgerWriteContract, ITransactionHandle, SignerProvider
from .models import Proposal, ProposalRecord, EncryptedInput, TransactionResult
from .status import StatusChannel
from .store import VoteStore
from .types import (
    VotingError, RecordValidationError, RemoteCallFailedError, SignerUnavailableError,
    TransactionRevertedError
)

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load data"


class LedgerReader:
    """Loads proposals from the ledger into the store"""

    def __init__(self, contract: ILedgerReadContract, store: VoteStore, status: StatusChannel):
        self._contract = contract
        self._store = store
        self._status = status
        self._lock = asyncio.Lock()

    @property
    def contract_address(self) -> str:
        return self._contract.address

    @property
    def is_refreshing(self) -> bool:
        return self._lock.locked()

    async def refresh(self, announce: bool = False) -> bool:
        """
        Reload every proposal. Overlapping calls run one after another.

        A failing per-item fetch is logged and skipped; failing to list the
        ids reports one error status and leaves the current set untouched.
        """
        async with self._lock:
            self._store.set_refreshing(True)
            try:
                try:
                    external_ids = await self._contract.get_all_proposal_ids()
                except Exception as e:
                    logger.error(f"Failed to load proposal ids: {e}")
                    self._status.error(LOAD_FAILED_MESSAGE)
                    return False

                proposals: List[Proposal] = []
                for external_id in external_ids:
                    try:
                        proposals.append(await self.fetch_proposal(external_id))
                    except Exception as e:
                        logger.error(f"Error loading proposal {external_id}: {e}")

                stats = self._store.replace_proposals(proposals)
                self._store.add_history(f"Refreshed vote data, found {len(proposals)} votes")
                logger.info(f"Loaded {len(proposals)} of {len(external_ids)} proposals",
                            extra={"total_votes": stats.total_votes,
                                   "verified_votes": stats.verified_votes})
                if announce:
                    self._status.success(f"Loaded {len(proposals)} votes")
                return True
            finally:
                self._store.set_refreshing(False)

    async def fetch_proposal(self, external_id: str) -> Proposal:
        """Read one proposal straight from the ledger, bypassing the store"""
        raw = await self._contract.get_proposal_data(external_id)
        try:
            record = ProposalRecord.model_validate(raw)
        except ValidationError as e:
            raise RecordValidationError(external_id, str(e)) from e
        return Proposal.from_record(external_id, record)

    async def get_encrypted_handle(self, external_id: str) -> str:
        return await self._contract.get_encrypted_value_handle(external_id)

    async def is_available(self) -> bool:
        return bool(await self._contract.is_available())


class LedgerWriter:
    """Submits mutating transactions and waits for their finality"""

    def __init__(self, signer_provider: SignerProvider):
        self._signer_provider = signer_provider

    async def acquire(self) -> ILedgerWriteContract:
        """Obtain write access; fails when no signer is available"""
        contract = await self._signer_provider()
        if contract is None:
            raise SignerUnavailableError()
        return contract

    async def create_proposal(self, contract: ILedgerWriteContract, external_id: str,
                              title: str, encrypted: EncryptedInput, plaintext_weight: int,
                              secondary_value: int = 0, description: str = "") -> ITransactionHandle:
        tx = await contract.create_proposal(
            external_id,
            title,
            encrypted.encrypted_payload,
            encrypted.correctness_proof,
            plaintext_weight,
            secondary_value,
            description,
        )
        logger.info(f"Submitted proposal {external_id} in tx {tx.transaction_hash}")
        return tx

    async def submit_verified_decryption(self, contract: ILedgerWriteContract, external_id: str,
                                         clear_values_encoded: bytes, proof: bytes) -> ITransactionHandle:
        tx = await contract.submit_verified_decryption(external_id, clear_values_encoded, proof)
        logger.info(f"Submitted decryption of {external_id} in tx {tx.transaction_hash}")
        return tx

    async def await_finality(self, tx: ITransactionHandle) -> TransactionResult:
        result = await tx.await_finality()
        if not result.succeeded:
            raise TransactionRevertedError(result.transaction_hash)
        logger.info(f"Transaction {result.transaction_hash} final in block {result.block_number}")
        return result


async def wrap_remote(coro, service: str):
    """Await a remote call, tagging unexpected failures with the service name"""
    try:
        return await coro
    except VotingError:
        raise
    except Exception as e:
        raise RemoteCallFailedError(str(e) or type(e).__name__, service) from e
