"""
Tests for the fhevotectl command line
"""

from unittest.mock import patch

from click.testing import CliRunner

from platformq_fhe_vote.cli import cli

from conftest import FakeLedger, make_record


def run(*args, ledger=None):
    ledger = ledger or FakeLedger()
    with patch("platformq_fhe_vote.cli.EVMVotingContract") as contract_cls:
        contract_cls.from_settings.return_value = ledger
        return CliRunner().invoke(cli, list(args))


def seeded_ledger():
    ledger = FakeLedger()
    ledger.add("vote-1", make_record("Pool Renovation", weight=30))
    ledger.add("vote-2", make_record("Garden Fence", weight=10, verified=True, decrypted=12))
    return ledger


def test_available():
    result = run("available")

    assert result.exit_code == 0
    assert "Contract is available and responsive!" in result.output


def test_available_reports_failure():
    ledger = FakeLedger()
    ledger.available = False
    result = run("available", ledger=ledger)

    assert result.exit_code != 0
    assert "Contract call failed" in result.output


def test_list_shows_display_weights():
    result = run("list", ledger=seeded_ledger())

    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert lines[0] == "vote-1\tPool Renovation\t30\tencrypted"
    assert lines[1] == "vote-2\tGarden Fence\t12\tverified"


def test_stats():
    result = run("stats", ledger=seeded_ledger())

    assert result.exit_code == 0
    assert "Total votes: 2" in result.output
    assert "Verified: 1/2" in result.output
    assert "Average weight: 20.0" in result.output


def test_list_fails_when_ids_cannot_be_loaded():
    ledger = FakeLedger()
    ledger.fail_listing = ConnectionError("down")
    result = run("list", ledger=ledger)

    assert result.exit_code != 0
    assert "Failed to load data" in result.output
