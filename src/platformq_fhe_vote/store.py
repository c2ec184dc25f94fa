"""
Explicit client state with change subscriptions.
"""

import logging
import time
from typing import Dict, List, Optional, Callable, Any, Iterable, Set

from .history import OperationHistory
from .models import Proposal, VoteStats, CreateProposalForm
from .stats import compute_stats, effective_weight, RECENT_WINDOW_SECONDS

logger = logging.getLogger(__name__)

StoreListener = Callable[["VoteStore"], Any]


class VoteStore:
    """
    Session-scoped state: proposals, statistics, history, form and flags.
    Nothing here is persisted; a restart rebuilds everything from the ledger.
    """

    def __init__(self, history_capacity: int = 10,
                 recent_window: int = RECENT_WINDOW_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.history = OperationHistory(history_capacity)
        self.form = CreateProposalForm()
        self.recent_window = recent_window
        self._clock = clock

        self._proposals: Dict[str, Proposal] = {}
        self._stats = VoteStats()
        self._revealed: Dict[str, int] = {}
        self._verified: Dict[str, Proposal] = {}
        self._decrypting: Set[str] = set()
        self.is_refreshing = False
        self.is_creating = False
        self._listeners: List[StoreListener] = []

    @property
    def proposals(self) -> List[Proposal]:
        return list(self._proposals.values())

    @property
    def stats(self) -> VoteStats:
        return self._stats

    @property
    def revealed_weights(self) -> Dict[str, int]:
        return dict(self._revealed)

    def get(self, external_id: str) -> Optional[Proposal]:
        return self._proposals.get(external_id)

    def display_weight(self, external_id: str) -> Optional[int]:
        proposal = self._proposals.get(external_id)
        if proposal is None:
            return None
        return effective_weight(proposal, self._revealed)

    def is_decrypting(self, external_id: str) -> bool:
        return external_id in self._decrypting

    def replace_proposals(self, proposals: Iterable[Proposal]) -> VoteStats:
        """
        Install a freshly loaded proposal set and recompute statistics.

        Verification seen once for an external id is kept for the rest of the
        session, even across refreshes that failed to load that proposal.
        """
        merged: Dict[str, Proposal] = {}
        for proposal in proposals:
            external_id = proposal.external_id
            if proposal.is_verified:
                self._verified[external_id] = proposal
            elif external_id in self._verified:
                logger.warning(f"Ledger reported {external_id} unverified after verification; keeping verified state")
                proposal = proposal.keep_verification_of(self._verified[external_id])
            merged[external_id] = proposal

        self._proposals = merged
        self._stats = compute_stats(merged.values(), now=self._clock(),
                                    recent_window=self.recent_window)
        self.notify()
        return self._stats

    def remember_revealed(self, external_id: str, value: int) -> None:
        self._revealed[external_id] = value
        self.notify()

    def set_refreshing(self, value: bool) -> None:
        self.is_refreshing = value
        self.notify()

    def set_creating(self, value: bool) -> None:
        self.is_creating = value
        self.notify()

    def set_decrypting(self, external_id: str, value: bool) -> None:
        if value:
            self._decrypting.add(external_id)
        else:
            self._decrypting.discard(external_id)
        self.notify()

    def add_history(self, operation: str) -> str:
        entry = self.history.add(operation)
        self.notify()
        return entry

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Store listener failed: {e}")
