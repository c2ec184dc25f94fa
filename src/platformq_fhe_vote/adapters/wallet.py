"""
Wallet provider backed by a local account.
"""

import logging
from typing import Optional, Callable, Any, List

from eth_account import Account
from eth_account.signers.local import LocalAccount

logger = logging.getLogger(__name__)

ConnectionListener = Callable[[bool, Optional[str]], Any]


class LocalWallet:
    """Connection state for a key held by this process; no browser wallet involved"""

    def __init__(self, account: Optional[LocalAccount] = None):
        self._account = account
        self._connected = False
        self._listeners: List[ConnectionListener] = []

    @classmethod
    def from_key(cls, private_key: str) -> "LocalWallet":
        return cls(Account.from_key(private_key))

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def account(self) -> Optional[str]:
        if not self._connected or self._account is None:
            return None
        return self._account.address

    def subscribe(self, callback: ConnectionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def connect(self) -> None:
        if self._account is None:
            raise ValueError("No account configured for this wallet")
        if self._connected:
            return
        self._connected = True
        logger.info(f"Wallet connected: {self._account.address}")
        self._notify()

    def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.info("Wallet disconnected")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._connected, self.account)
