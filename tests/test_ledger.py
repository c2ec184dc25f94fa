"""
Tests for the ledger reader and writer
"""

import asyncio

import pytest

from platformq_fhe_vote import (
    LedgerReader, LedgerWriter, StatusChannel, VoteStore, TransactionPhase,
    RecordValidationError, SignerUnavailableError, TransactionRevertedError, EncryptedInput
)
from platformq_fhe_vote.ledger import LOAD_FAILED_MESSAGE

from conftest import make_record


@pytest.fixture
def store():
    return VoteStore()


@pytest.fixture
def status():
    return StatusChannel(0.01, 0.01)


@pytest.fixture
def reader(ledger, store, status):
    return LedgerReader(ledger, store, status)


@pytest.mark.asyncio
async def test_single_bad_record_does_not_abort_batch(reader, ledger, store, status):
    for i in range(5):
        ledger.add(f"vote-{i}", make_record(f"Proposal {i}", weight=i))
    ledger.bad_ids.add("vote-2")

    assert await reader.refresh(announce=True) is True

    assert [p.external_id for p in store.proposals] == ["vote-0", "vote-1", "vote-3", "vote-4"]
    assert store.stats.total_votes == 4
    assert status.current.phase is TransactionPhase.SUCCESS
    assert store.history.entries[0].endswith("Refreshed vote data, found 4 votes")


@pytest.mark.asyncio
async def test_malformed_record_is_skipped(reader, ledger, store):
    ledger.add("vote-1", make_record("Good"))
    broken = make_record("Broken")
    del broken["creator"]
    ledger.add("vote-2", broken)

    await reader.refresh()

    assert [p.external_id for p in store.proposals] == ["vote-1"]
    with pytest.raises(RecordValidationError):
        await reader.fetch_proposal("vote-2")


@pytest.mark.asyncio
async def test_id_listing_failure_keeps_previous_state(reader, ledger, store, status):
    ledger.add("vote-1", make_record("Existing", weight=8))
    await reader.refresh()
    history_before = store.history.entries

    ledger.add("vote-2", make_record("New"))
    ledger.fail_listing = ConnectionError("node unreachable")

    assert await reader.refresh() is False
    assert [p.external_id for p in store.proposals] == ["vote-1"]
    assert store.stats.total_votes == 1
    assert store.history.entries == history_before
    assert status.current.phase is TransactionPhase.ERROR
    assert status.current.message == LOAD_FAILED_MESSAGE
    assert store.is_refreshing is False


@pytest.mark.asyncio
async def test_overlapping_refreshes_are_serialized(reader, ledger, store):
    ledger.add("vote-1", make_record("One"))
    ledger.read_delay = 0.01
    active = []
    peak = []

    original = ledger.get_all_proposal_ids

    async def tracking():
        active.append(1)
        peak.append(len(active))
        try:
            return await original()
        finally:
            active.pop()

    ledger.get_all_proposal_ids = tracking

    results = await asyncio.gather(reader.refresh(), reader.refresh(), reader.refresh())

    assert results == [True, True, True]
    assert max(peak) == 1
    assert ledger.list_calls == 3


@pytest.mark.asyncio
async def test_verified_state_is_monotonic(reader, ledger, store):
    ledger.add("vote-1", make_record("One", weight=5, verified=True, decrypted=5))
    await reader.refresh()
    assert store.get("vote-1").is_verified

    ledger.records["vote-1"]["isVerified"] = False
    await reader.refresh()

    proposal = store.get("vote-1")
    assert proposal.is_verified is True
    assert proposal.verified_weight == 5


@pytest.mark.asyncio
async def test_record_fields_map_onto_proposal(reader, ledger):
    ledger.add("vote-1700000000000", make_record("Pool Renovation", weight=42, timestamp=1700000000,
                                                 description="Resurface the pool"))

    proposal = await reader.fetch_proposal("vote-1700000000000")

    assert proposal.title == "Pool Renovation"
    assert proposal.description == "Resurface the pool"
    assert proposal.public_weight == 42
    assert proposal.created_at == 1700000000
    assert proposal.is_verified is False
    assert proposal.verified_weight is None


@pytest.mark.asyncio
async def test_writer_requires_signer(ledger):
    ledger.has_signer = False
    writer = LedgerWriter(ledger.signer)

    with pytest.raises(SignerUnavailableError):
        await writer.acquire()


@pytest.mark.asyncio
async def test_writer_raises_on_reverted_transaction(ledger):
    ledger.revert_writes = True
    writer = LedgerWriter(ledger.signer)
    contract = await writer.acquire()

    tx = await writer.create_proposal(contract, "vote-1", "Title",
                                      EncryptedInput(b"\x00" * 32, b"proof"), 3)

    with pytest.raises(TransactionRevertedError):
        await writer.await_finality(tx)
    assert "vote-1" not in ledger.records


@pytest.mark.asyncio
async def test_verified_state_survives_refresh_that_dropped_the_proposal(reader, ledger, store):
    ledger.add("vote-1", make_record("One", weight=5, verified=True, decrypted=5))
    await reader.refresh()

    ledger.bad_ids.add("vote-1")
    await reader.refresh()
    assert store.get("vote-1") is None

    ledger.bad_ids.clear()
    ledger.records["vote-1"]["isVerified"] = False
    await reader.refresh()

    proposal = store.get("vote-1")
    assert proposal.is_verified is True
    assert proposal.verified_weight == 5
