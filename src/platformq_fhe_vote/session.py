"""
Session gate: wallet connection and encryption engine readiness.
"""

import asyncio
import logging
from typing import Optional, Callable, Awaitable, List, Any, Set, Tuple

from .interfaces import IWalletProvider, IEncryptionEngine
from .status import StatusChannel
from .types import SessionState, PreconditionUnmetError

logger = logging.getLogger(__name__)

CONNECT_WALLET_MESSAGE = "Please connect wallet first"
ENGINE_NOT_READY_MESSAGE = "Encryption engine is not ready"
ENGINE_INIT_FAILED_MESSAGE = "Encryption engine initialization failed"

ReadyListener = Callable[[], Awaitable[Any]]


class SessionGate:
    """
    DISCONNECTED -> CONNECTING_ENCRYPTION -> READY.

    A failed engine initialization leaves the gate in CONNECTED, from which
    the next connection event or an explicit retry() starts again.
    """

    def __init__(self, wallet: IWalletProvider, engine: IEncryptionEngine,
                 status: StatusChannel):
        self._wallet = wallet
        self._engine = engine
        self._status = status

        self._state = SessionState.DISCONNECTED
        self._account: Optional[str] = None
        self._epoch = 0
        self._ready_listeners: List[ReadyListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: Set[asyncio.Task] = set()
        self._deferred: List[Tuple[bool, Optional[str]]] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def account(self) -> Optional[str]:
        return self._account

    @property
    def is_connected(self) -> bool:
        return self._state is not SessionState.DISCONNECTED

    @property
    def is_ready(self) -> bool:
        return self._state is SessionState.READY

    def on_ready(self, listener: ReadyListener) -> None:
        self._ready_listeners.append(listener)

    def attach(self) -> None:
        """Subscribe to the wallet and pick up an already-open connection"""
        self._unsubscribe = self._wallet.subscribe(self._on_wallet_event)
        if self._wallet.is_connected:
            self._on_wallet_event(True, self._wallet.account)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_idle(self) -> None:
        """
        Wait for the connection handling scheduled by wallet events, including
        events raised while no event loop was running.
        """
        if self._deferred:
            self._schedule_drain(asyncio.get_running_loop())
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _on_wallet_event(self, connected: bool, account: Optional[str]) -> None:
        self._deferred.append((connected, account))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; connection change deferred to wait_idle()")
            return
        self._schedule_drain(loop)

    def _schedule_drain(self, loop: asyncio.AbstractEventLoop) -> None:
        if any(not task.done() for task in self._pending):
            return
        task = loop.create_task(self._drain_events())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _drain_events(self) -> None:
        # Events are applied one at a time, in the order the wallet raised them
        while self._deferred:
            connected, account = self._deferred.pop(0)
            await self.handle_connection_change(connected, account)

    async def handle_connection_change(self, connected: bool, account: Optional[str]) -> bool:
        """Apply a wallet connection change; returns True if the gate is READY afterwards"""
        if not connected or not account:
            if self._state is not SessionState.DISCONNECTED:
                logger.info("Wallet disconnected")
            self._epoch += 1
            self._account = None
            self._state = SessionState.DISCONNECTED
            return False

        if self._account is not None and account != self._account:
            # Account switch: readiness was bound to the previous account
            self._epoch += 1
            self._state = SessionState.CONNECTED
        self._account = account

        if self._state in (SessionState.CONNECTING_ENCRYPTION, SessionState.READY):
            return self._state is SessionState.READY

        self._epoch += 1
        return await self._initialize_engine(self._epoch)

    async def retry(self) -> bool:
        """Re-attempt engine initialization after a failure"""
        if self._state is not SessionState.CONNECTED:
            return self.is_ready
        self._epoch += 1
        return await self._initialize_engine(self._epoch)

    async def _initialize_engine(self, epoch: int) -> bool:
        self._state = SessionState.CONNECTING_ENCRYPTION
        try:
            if not self._engine.is_initialized:
                await self._engine.initialize()
        except Exception as e:
            logger.error(f"Encryption engine initialization failed: {e}")
            if epoch == self._epoch:
                self._state = SessionState.CONNECTED
                self._status.error(ENGINE_INIT_FAILED_MESSAGE)
            return False

        if epoch != self._epoch:
            # Disconnected or switched account while initializing
            return False

        self._state = SessionState.READY
        logger.info(f"Session ready for {self._account}")
        for listener in list(self._ready_listeners):
            try:
                await listener()
            except Exception as e:
                logger.error(f"Ready listener failed: {e}")
        return True

    def require_connected(self) -> str:
        if self._state is SessionState.DISCONNECTED or not self._account:
            raise PreconditionUnmetError(CONNECT_WALLET_MESSAGE)
        return self._account

    def require_ready(self) -> str:
        account = self.require_connected()
        if self._state is not SessionState.READY:
            raise PreconditionUnmetError(ENGINE_NOT_READY_MESSAGE)
        return account
