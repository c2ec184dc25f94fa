"""
Shared fixtures: in-memory ledger, encryption engine and wallet doubles.
"""

import asyncio
import time
from typing import Dict, Any, List, Optional, Callable

import pytest
import pytest_asyncio
from eth_account import Account

from platformq_fhe_vote import (
    Settings, VotingClient, EncryptedInput, DecryptionProof, TransactionResult
)
from platformq_fhe_vote.adapters import LocalWallet

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
TEST_PRIVATE_KEY = "0x" + "11" * 32


def make_record(name: str, weight: int = 10, timestamp: Optional[int] = None,
                creator: str = "0x0000000000000000000000000000000000000001",
                verified: bool = False, decrypted: int = 0,
                description: str = "") -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "publicValue1": weight,
        "publicValue2": 0,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
        "creator": creator,
        "isVerified": verified,
        "decryptedValue": decrypted,
    }


class FakeTransaction:
    """Transaction whose effect lands on the ledger when it becomes final"""

    def __init__(self, tx_hash: str, on_final: Callable[[], None], block_number: int,
                 succeeded: bool = True):
        self._tx_hash = tx_hash
        self._on_final = on_final
        self._block_number = block_number
        self._succeeded = succeeded
        self.finalized = False

    @property
    def transaction_hash(self) -> str:
        return self._tx_hash

    async def await_finality(self) -> TransactionResult:
        await asyncio.sleep(0)
        if self._succeeded and not self.finalized:
            self._on_final()
        self.finalized = True
        return TransactionResult(
            transaction_hash=self._tx_hash,
            block_number=self._block_number,
            succeeded=self._succeeded,
        )


class FakeLedger:
    """In-memory voting contract implementing the read and write surfaces"""

    def __init__(self, address: str = CONTRACT_ADDRESS):
        self.address = address
        self.records: Dict[str, Dict[str, Any]] = {}
        self.handles: Dict[str, str] = {}
        self.bad_ids: set = set()
        self.fail_listing: Optional[Exception] = None
        self.fail_writes: Optional[Exception] = None
        self.revert_writes = False
        self.available = True
        self.has_signer = True
        self.sender = "0x0000000000000000000000000000000000000abc"

        self.create_calls: List[Dict[str, Any]] = []
        self.verify_calls: List[Dict[str, Any]] = []
        self.list_calls = 0
        self.read_delay = 0.0
        self._block = 100

    def add(self, external_id: str, record: Dict[str, Any]) -> None:
        self.records[external_id] = record
        self.handles[external_id] = "0x" + format(len(self.handles) + 1, "064x")

    @property
    def write_calls(self) -> int:
        return len(self.create_calls) + len(self.verify_calls)

    async def signer(self):
        return self if self.has_signer else None

    async def disconnect(self) -> None:
        pass

    async def get_all_proposal_ids(self) -> List[str]:
        self.list_calls += 1
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.fail_listing is not None:
            raise self.fail_listing
        return list(self.records)

    async def get_proposal_data(self, external_id: str) -> Dict[str, Any]:
        await asyncio.sleep(0)
        if external_id in self.bad_ids:
            raise RuntimeError(f"execution reverted: cannot decode {external_id}")
        if external_id not in self.records:
            raise RuntimeError("Business data does not exist")
        return dict(self.records[external_id])

    async def get_encrypted_value_handle(self, external_id: str) -> str:
        return self.handles[external_id]

    async def is_available(self) -> bool:
        if not self.available:
            raise ConnectionError("node unreachable")
        return True

    def _next_tx(self, on_final) -> FakeTransaction:
        self._block += 1
        return FakeTransaction(f"0x{self._block:064x}", on_final, self._block,
                               succeeded=not self.revert_writes)

    async def create_proposal(self, external_id, title, encrypted_payload, proof,
                              plaintext_weight, secondary_value, description):
        if self.fail_writes is not None:
            raise self.fail_writes
        self.create_calls.append({
            "external_id": external_id,
            "title": title,
            "encrypted_payload": encrypted_payload,
            "proof": proof,
            "plaintext_weight": plaintext_weight,
            "secondary_value": secondary_value,
            "description": description,
        })

        def apply():
            self.add(external_id, make_record(title, plaintext_weight, creator=self.sender,
                                              description=description))
        return self._next_tx(apply)

    async def submit_verified_decryption(self, external_id, clear_values_encoded, proof):
        if self.fail_writes is not None:
            raise self.fail_writes
        if self.records[external_id]["isVerified"]:
            raise RuntimeError("execution reverted: Data already verified")
        self.verify_calls.append({
            "external_id": external_id,
            "clear_values_encoded": clear_values_encoded,
            "proof": proof,
        })

        def apply():
            record = self.records[external_id]
            record["isVerified"] = True
            record["decryptedValue"] = int.from_bytes(clear_values_encoded, "big")
        return self._next_tx(apply)


class FakeEngine:
    """Encryption engine double; clear values come from the ledger's public mirror"""

    def __init__(self, ledger: FakeLedger):
        self.ledger = ledger
        self.initialized = False
        self.init_calls = 0
        self.init_error: Optional[Exception] = None
        self.init_delay = 0.0
        self.encrypt_error: Optional[Exception] = None
        self.encrypt_calls: List[tuple] = []
        self.decrypt_calls: List[tuple] = []
        self.before_decrypt: Optional[Callable[[str], None]] = None

    @property
    def is_initialized(self) -> bool:
        return self.initialized

    async def initialize(self) -> None:
        self.init_calls += 1
        if self.init_delay:
            await asyncio.sleep(self.init_delay)
        if self.init_error is not None:
            raise self.init_error
        self.initialized = True

    async def encrypt(self, contract_address, caller_address, value) -> EncryptedInput:
        await asyncio.sleep(0)
        if self.encrypt_error is not None:
            raise self.encrypt_error
        self.encrypt_calls.append((contract_address, caller_address, value))
        return EncryptedInput(encrypted_payload=value.to_bytes(32, "big"),
                              correctness_proof=b"input-proof")

    async def request_decryption(self, handles, contract_address) -> DecryptionProof:
        await asyncio.sleep(0)
        self.decrypt_calls.append((list(handles), contract_address))
        by_handle = {h: eid for eid, h in self.ledger.handles.items()}
        clear_values = {}
        for handle in handles:
            external_id = by_handle[handle]
            if self.before_decrypt is not None:
                self.before_decrypt(external_id)
            clear_values[handle] = self.ledger.records[external_id]["publicValue1"]
        first = clear_values[handles[0]]
        return DecryptionProof(
            clear_values=clear_values,
            abi_encoded_clear_values=first.to_bytes(32, "big"),
            decryption_proof=b"kms-signatures",
        )


@pytest.fixture
def settings():
    return Settings(
        contract_address=CONTRACT_ADDRESS,
        success_clear_delay=0.05,
        error_clear_delay=0.05,
    )


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def engine(ledger):
    return FakeEngine(ledger)


@pytest.fixture
def wallet():
    return LocalWallet(Account.from_key(TEST_PRIVATE_KEY))


@pytest_asyncio.fixture
async def client(wallet, engine, ledger, settings):
    """Client wired to the doubles, wallet not yet connected"""
    voting = VotingClient(wallet, engine, ledger, ledger.signer, settings)
    voting.start()
    yield voting
    await voting.close()


@pytest_asyncio.fixture
async def ready_client(client, wallet):
    """Client with the wallet connected and the engine initialized"""
    wallet.connect()
    await client.gate.wait_idle()
    assert client.gate.is_ready
    return client


class StatusRecorder:
    """Collects every status event published on a channel"""

    def __init__(self, channel):
        self.events = []
        channel.subscribe(self._record)

    def _record(self, event):
        if event is not None:
            self.events.append(event)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.events]

    @property
    def last(self):
        return self.events[-1] if self.events else None


@pytest.fixture
def recorder(client):
    return StatusRecorder(client.status)
