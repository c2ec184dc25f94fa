"""
Aggregate statistics and weight display helpers.
"""

import time
from typing import Iterable, Mapping, Optional

from .models import Proposal, VoteStats

RECENT_WINDOW_SECONDS = 60 * 60 * 24 * 7


def compute_stats(proposals: Iterable[Proposal], now: Optional[float] = None,
                  recent_window: int = RECENT_WINDOW_SECONDS) -> VoteStats:
    """Recompute statistics from the full proposal set.

    Pure in its inputs: the same set and the same ``now`` always give the
    same result, regardless of ordering.
    """
    items = list(proposals)
    if now is None:
        now = time.time()

    total = len(items)
    verified = sum(1 for p in items if p.is_verified)
    avg_weight = sum(p.public_weight for p in items) / total if total else 0.0
    recent = sum(1 for p in items if now - p.created_at < recent_window)

    return VoteStats(
        total_votes=total,
        verified_votes=verified,
        avg_weight=avg_weight,
        recent_activity=recent,
    )


def effective_weight(proposal: Proposal, revealed: Optional[Mapping[str, int]] = None) -> int:
    """Weight to display: verified value, then a locally revealed one, then the public mirror"""
    if proposal.is_verified and proposal.verified_weight is not None:
        return proposal.verified_weight
    if revealed and proposal.external_id in revealed:
        return revealed[proposal.external_id]
    return proposal.public_weight or 0


def weight_percentage(weight: int, max_weight: int = 100) -> float:
    if max_weight <= 0:
        raise ValueError("max_weight must be positive")
    return min(100.0, (weight / max_weight) * 100)
