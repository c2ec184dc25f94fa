"""
Wiring of the voting components into one client object.
"""

import logging
from typing import Optional

from .adapters.evm import EVMVotingContract
from .config import Settings, get_settings
from .interfaces import (
    IWalletProvider, IEncryptionEngine, ILedgerReadContract, SignerProvider
)
from .ledger import LedgerReader, LedgerWriter
from .orchestrator import VoteWorkflowOrchestrator
from .session import SessionGate
from .status import StatusChannel
from .store import VoteStore

logger = logging.getLogger(__name__)


class VotingClient:
    """
    Session gate, ledger reader/writer and orchestrator sharing one store
    and one status channel.

    Usage:
        client = VotingClient.create(wallet, engine)
        client.start()
        await client.gate.wait_idle()
        await client.orchestrator.create_proposal("Pool Renovation", "", "42")
    """

    def __init__(self, wallet: IWalletProvider, engine: IEncryptionEngine,
                 read_contract: ILedgerReadContract, signer_provider: SignerProvider,
                 settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.settings = settings
        self.status = StatusChannel(
            success_clear_delay=settings.success_clear_delay,
            error_clear_delay=settings.error_clear_delay,
        )
        self.store = VoteStore(
            history_capacity=settings.history_capacity,
            recent_window=settings.recent_window_seconds,
        )
        self.gate = SessionGate(wallet, engine, self.status)
        self.reader = LedgerReader(read_contract, self.store, self.status)
        self.writer = LedgerWriter(signer_provider)
        self.orchestrator = VoteWorkflowOrchestrator(
            self.gate, self.reader, self.writer, engine, self.store, self.status
        )

    @classmethod
    def create(cls, wallet: IWalletProvider, engine: IEncryptionEngine,
               settings: Optional[Settings] = None) -> "VotingClient":
        """Build a client against the EVM contract named in settings"""
        settings = settings or get_settings()
        contract = EVMVotingContract.from_settings(settings)
        return cls(wallet, engine, contract, contract.signer, settings)

    def start(self):
        """Start following wallet connection changes"""
        logger.info("Starting voting client")
        return self.gate.attach()

    async def close(self) -> None:
        self.gate.detach()
        await self.status.aclose()
