import asyncio
import logging

import click

from .adapters.evm import EVMVotingContract
from .config import get_settings
from .ledger import LedgerReader
from .logging_config import setup_structured_logging
from .stats import effective_weight
from .status import StatusChannel
from .store import VoteStore
from .types import VotingError


def _build_reader(rpc_url, contract_address):
    overrides = {}
    if rpc_url:
        overrides["rpc_url"] = rpc_url
    if contract_address:
        overrides["contract_address"] = contract_address
    settings = get_settings().model_copy(update=overrides)
    contract = EVMVotingContract.from_settings(settings)
    store = VoteStore(history_capacity=settings.history_capacity,
                      recent_window=settings.recent_window_seconds)
    status = StatusChannel(settings.success_clear_delay, settings.error_clear_delay)
    return contract, LedgerReader(contract, store, status), store, status


async def _load(rpc_url, contract_address):
    """Build a reader and run one refresh; returns the populated store"""
    contract, reader, store, status = _build_reader(rpc_url, contract_address)
    try:
        loaded = await reader.refresh()
    finally:
        await status.aclose()
        await contract.disconnect()
    if not loaded:
        raise click.ClickException(status.current.message if status.current else "Failed to load data")
    return store


def _run_load(obj):
    try:
        return asyncio.run(_load(obj["rpc_url"], obj["contract_address"]))
    except VotingError as e:
        raise click.ClickException(e.message)


# --- CLI Commands ---
@click.group()
@click.option("--rpc-url", default=None, help="Ledger node RPC URL (defaults to FHE_VOTE_RPC_URL).")
@click.option("--contract", "contract_address", default=None, help="Voting contract address.")
@click.option("--verbose", is_flag=True, help="Emit JSON logs.")
@click.pass_context
def cli(ctx, rpc_url, contract_address, verbose):
    """Inspect confidential weighted proposals on the ledger."""
    if verbose:
        setup_structured_logging("DEBUG")
    else:
        logging.basicConfig(level=logging.WARNING)
    ctx.obj = {"rpc_url": rpc_url, "contract_address": contract_address}


@cli.command()
@click.pass_obj
def available(obj):
    """Checks that the voting contract responds."""
    async def probe():
        contract, reader, _, status = _build_reader(obj["rpc_url"], obj["contract_address"])
        try:
            return await reader.is_available()
        finally:
            await status.aclose()
            await contract.disconnect()

    try:
        result = asyncio.run(probe())
    except Exception as e:
        raise click.ClickException(f"Contract call failed: {e}")
    click.echo("Contract is available and responsive!" if result else "Contract reports unavailable")


@cli.command(name="list")
@click.pass_obj
def list_proposals(obj):
    """Lists all proposals with their display weight."""
    store = _run_load(obj)
    for proposal in store.proposals:
        state = "verified" if proposal.is_verified else "encrypted"
        click.echo(f"{proposal.external_id}\t{proposal.title}\t{effective_weight(proposal)}\t{state}")


@cli.command()
@click.pass_obj
def stats(obj):
    """Prints aggregate statistics."""
    store = _run_load(obj)
    summary = store.stats
    click.echo(f"Total votes: {summary.total_votes}")
    click.echo(f"Verified: {summary.verified_votes}/{summary.total_votes}")
    click.echo(f"Average weight: {summary.avg_weight:.1f}")
    click.echo(f"Created this week: {summary.recent_activity}")
