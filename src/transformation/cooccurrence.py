"""
Counting dishes ordered together.
"""
import logging
from itertools import combinations

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = ' & '


def pair_key(first, second, separator=PAIR_SEPARATOR):
    """Canonical key for an unordered pair of item names."""
    a, b = sorted((first, second))
    return f"{a}{separator}{b}"


def count_item_pairs(item_lists, separator=PAIR_SEPARATOR):
    """
    Count, for every unordered pair of item names, the orders containing both.

    Each entry of `item_lists` is one order's item names. Repeated names in
    an order count once; orders with fewer than two distinct names add nothing.
    """
    counts = {}
    for names in item_lists:
        distinct = sorted(set(names))
        for first, second in combinations(distinct, 2):
            key = pair_key(first, second, separator)
            counts[key] = counts.get(key, 0) + 1

    logger.info(f"Counted {len(counts)} distinct item pairs")
    return counts
