"""
Vote workflow orchestrator.

Drives the encrypt -> submit -> confirm sequence for new proposals and the
fetch -> decrypt -> verify -> reconcile sequence for existing ones. Every
failure is absorbed here and reported as one status event; no workflow entry
point raises.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from .interfaces import IEncryptionEngine, SubmitVerification
from .ledger import LedgerReader, LedgerWriter, wrap_remote
from .models import DecryptionProof, DecryptionResult
from .session import SessionGate
from .status import StatusChannel
from .store import VoteStore
from .types import (
    PreconditionUnmetError, RemoteCallFailedError, UserCancelledError,
    classify_error, is_already_verified
)

logger = logging.getLogger(__name__)

EXTERNAL_ID_PREFIX = "vote-"
SECONDARY_VALUE = 0

USER_REJECTED_MESSAGE = "Transaction rejected by user"


def parse_weight(weight) -> int:
    """Parse a non-negative integer weight from form input"""
    if weight is None or (isinstance(weight, str) and not weight.strip()):
        raise PreconditionUnmetError("Weight is required")
    if isinstance(weight, bool):
        raise PreconditionUnmetError("Weight must be a non-negative integer")
    try:
        value = int(weight.strip()) if isinstance(weight, str) else int(weight)
    except (TypeError, ValueError):
        raise PreconditionUnmetError("Weight must be a non-negative integer")
    if value < 0:
        raise PreconditionUnmetError("Weight must be a non-negative integer")
    return value


def clear_value_for(proof: DecryptionProof, handle: str) -> int:
    """Pick the clear value decrypted for ``handle`` out of a result bundle"""
    if handle in proof.clear_values:
        return int(proof.clear_values[handle])
    wanted = handle.lower()
    for key, value in proof.clear_values.items():
        if key.lower() == wanted:
            return int(value)
    raise RemoteCallFailedError(f"Decryption result has no value for handle {handle}", "encryption")


async def verify_decryption(engine: IEncryptionEngine, handles: List[str],
                            contract_address: str,
                            submit: SubmitVerification) -> DecryptionResult:
    """
    Composite decrypt-and-verify: request the decryption proof for ``handles``,
    hand the encoded clear values and proof to ``submit`` and wait for the
    resulting transaction to be final.
    """
    proof = await engine.request_decryption(handles, contract_address)
    tx = await submit(proof.abi_encoded_clear_values, proof.decryption_proof)
    result = await tx.await_finality()
    return DecryptionResult(clear_values=dict(proof.clear_values),
                            transaction_hash=result.transaction_hash)


class VoteWorkflowOrchestrator:
    """Sequences user-triggered voting workflows against the engine and ledger"""

    def __init__(self, gate: SessionGate, reader: LedgerReader, writer: LedgerWriter,
                 engine: IEncryptionEngine, store: VoteStore, status: StatusChannel,
                 clock: Callable[[], float] = time.time):
        self._gate = gate
        self._reader = reader
        self._writer = writer
        self._engine = engine
        self._store = store
        self._status = status
        self._clock = clock

        self._last_id_millis = 0
        self._decrypt_locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

        gate.on_ready(self._on_session_ready)

    async def _on_session_ready(self) -> None:
        await self._reader.refresh()

    def generate_external_id(self) -> str:
        """``vote-<millis>``, strictly increasing within this session"""
        millis = int(self._clock() * 1000)
        if millis <= self._last_id_millis:
            millis = self._last_id_millis + 1
        self._last_id_millis = millis
        return f"{EXTERNAL_ID_PREFIX}{millis}"

    async def refresh(self) -> bool:
        """User-triggered reload of the proposal set"""
        try:
            self._gate.require_connected()
        except PreconditionUnmetError as e:
            self._status.error(e.message)
            return False
        return await self._reader.refresh(announce=True)

    async def create_proposal(self, title: Optional[str] = None,
                              description: Optional[str] = None,
                              weight=None) -> bool:
        """
        Encrypt a weight and record a new proposal on the ledger.

        Called without arguments it submits the current create-form values.
        Returns True once the creation transaction is final and the proposal
        set was reloaded.
        """
        form = self._store.form
        if title is None and description is None and weight is None:
            title, description, weight = form.title, form.description, form.weight

        try:
            account = self._gate.require_ready()
            if not title or not title.strip():
                raise PreconditionUnmetError("Title is required")
            weight_value = parse_weight(weight)
        except PreconditionUnmetError as e:
            self._status.error(e.message)
            return False

        self._store.set_creating(True)
        self._status.pending("Creating vote with FHE encryption...")
        try:
            contract = await self._writer.acquire()
            external_id = self.generate_external_id()

            encrypted = await wrap_remote(
                self._engine.encrypt(self._reader.contract_address, account, weight_value),
                "encryption",
            )

            tx = await self._writer.create_proposal(
                contract, external_id, title, encrypted, weight_value,
                SECONDARY_VALUE, description or "",
            )

            self._status.pending("Waiting for transaction confirmation...")
            await self._writer.await_finality(tx)

            self._status.success("Vote created successfully!")
            self._store.add_history(f"Created new vote: {title}")

            await self._reader.refresh()
            form.close()
            form.reset()
            self._store.notify()
            return True

        except Exception as e:
            error = classify_error(e)
            if isinstance(error, UserCancelledError):
                message = USER_REJECTED_MESSAGE
            else:
                message = f"Submission failed: {error.message or 'Unknown error'}"
            logger.error(f"Proposal creation failed: {e}", extra={"error_code": error.error_code})
            self._status.error(message)
            return False
        finally:
            self._store.set_creating(False)

    async def decrypt_and_verify(self, external_id: str) -> Optional[int]:
        """
        Reveal a proposal's weight and record the proof-checked value on the ledger.

        Returns the clear weight, the stored weight when the proposal is
        already verified, or None when the workflow fails or another party
        verified it concurrently.
        """
        try:
            self._gate.require_ready()
        except PreconditionUnmetError as e:
            self._status.error(e.message)
            return None

        lock, waiters = self._decrypt_locks.get(external_id, (asyncio.Lock(), 0))
        self._decrypt_locks[external_id] = (lock, waiters + 1)
        try:
            async with lock:
                self._store.set_decrypting(external_id, True)
                try:
                    return await self._decrypt_and_verify(external_id)
                finally:
                    self._store.set_decrypting(external_id, False)
        finally:
            lock, waiters = self._decrypt_locks[external_id]
            if waiters == 1:
                del self._decrypt_locks[external_id]
            else:
                self._decrypt_locks[external_id] = (lock, waiters - 1)

    async def _decrypt_and_verify(self, external_id: str) -> Optional[int]:
        try:
            proposal = await self._reader.fetch_proposal(external_id)
            if proposal.is_verified:
                self._status.success("Data already verified on-chain")
                return proposal.verified_weight or 0

            contract = await self._writer.acquire()
            handle = await self._reader.get_encrypted_handle(external_id)
            contract_address = self._reader.contract_address

            self._status.pending("Verifying decryption on-chain...")
            proof = await wrap_remote(
                self._engine.request_decryption([handle], contract_address),
                "encryption",
            )
            tx = await self._writer.submit_verified_decryption(
                contract, external_id, proof.abi_encoded_clear_values, proof.decryption_proof,
            )
            await self._writer.await_finality(tx)

            clear_value = clear_value_for(proof, handle)
            self._store.remember_revealed(external_id, clear_value)

            await self._reader.refresh()
            self._store.add_history(f"Decrypted vote data: {clear_value}")
            self._status.success("Data decrypted and verified successfully!")
            return clear_value

        except Exception as e:
            if is_already_verified(e):
                logger.info(f"Proposal {external_id} was verified concurrently")
                self._status.success("Data is already verified on-chain")
                await self._reader.refresh()
                return None

            error = classify_error(e)
            if isinstance(error, UserCancelledError):
                message = USER_REJECTED_MESSAGE
            else:
                message = f"Decryption failed: {error.message or 'Unknown error'}"
            logger.error(f"Decryption of {external_id} failed: {e}", extra={"error_code": error.error_code})
            self._status.error(message)
            return None

    async def check_availability(self) -> bool:
        """Probe the contract and report the outcome"""
        try:
            await self._reader.is_available()
        except Exception as e:
            logger.error(f"Availability check failed: {e}")
            self._status.error("Contract call failed")
            return False

        self._status.success("Contract is available and responsive!")
        self._store.add_history("Checked contract availability: Available")
        return True
