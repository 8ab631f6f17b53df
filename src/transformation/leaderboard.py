"""
Top-N ranking of keyed totals.
"""
import logging
from dataclasses import dataclass
import pandas as pd

logger = logging.getLogger(__name__)

PODIUM_SIZE = 3


@dataclass(frozen=True)
class LeaderboardEntry:
    subject_id: str
    display_name: str
    value: float
    rank: int


def rank_top_n(totals, n, names=None):
    """
    Rank subjects by value, highest first, and keep the top `n`.

    Ties keep the order subjects appear in `totals`; zero values are ranked
    like any other.
    """
    if n is None or n <= 0 or not totals:
        return []

    names = names or {}
    df = pd.DataFrame({
        'subject_id': list(totals.keys()),
        'value': list(totals.values()),
    })
    # Stable sort so equal values stay in first-seen order
    df = df.sort_values('value', ascending=False, kind='stable').head(n)

    entries = [
        LeaderboardEntry(
            subject_id=subject_id,
            display_name=names.get(subject_id) or str(subject_id),
            value=value,
            rank=rank,
        )
        for rank, (subject_id, value) in enumerate(
            zip(df['subject_id'].tolist(), df['value'].tolist()), start=1
        )
    ]
    logger.debug(f"Ranked {len(entries)} of {len(totals)} subjects")
    return entries


def is_podium(rank):
    return 1 <= rank <= PODIUM_SIZE
