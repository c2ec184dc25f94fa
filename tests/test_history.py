"""
Tests for the bounded operation history
"""

from datetime import datetime

import pytest

from platformq_fhe_vote import OperationHistory


def test_history_is_newest_first_and_bounded():
    history = OperationHistory()
    for i in range(15):
        history.add(f"operation {i}")

    entries = history.entries
    assert len(entries) == 10
    assert entries[0].endswith("operation 14")
    assert entries[-1].endswith("operation 5")


def test_entries_carry_wall_clock_prefix():
    history = OperationHistory(clock=lambda: datetime(2024, 5, 1, 9, 3, 7))
    entry = history.add("Created new vote: Pool Renovation")

    assert entry == "09:03:07: Created new vote: Pool Renovation"
    assert list(history) == [entry]


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        OperationHistory(capacity=0)
