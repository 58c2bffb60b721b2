"""Recency scoring.

Recency maps an item's age in months onto a non-increasing 0-100 curve:

    age (months)   0-1   3    6    12   24   36   60+
    score          100   90   80   70   60   50   30

Scores are linear between the points. Future dates count as brand new and
items without a usable date get a neutral score.
"""

from datetime import datetime

import numpy as np

from models.content import ContentItem

NEUTRAL_RECENCY = 55
DAYS_PER_MONTH = 30.0

_MONTHS = [0.0, 1.0, 3.0, 6.0, 12.0, 24.0, 36.0, 60.0]
_SCORES = [100.0, 100.0, 90.0, 80.0, 70.0, 60.0, 50.0, 30.0]


def months_old(published: datetime, now: datetime) -> float:
    """Age in 30-day months, zero for future dates."""
    return max(0.0, (now - published).total_seconds() / (86400 * DAYS_PER_MONTH))


def score(item: ContentItem, now: datetime) -> int:
    """Score an item's freshness.

    Args:
        item: Item to score
        now: Reference time

    Returns:
        Recency in [30, 100], or NEUTRAL_RECENCY without a date
    """
    if item.date is None:
        return NEUTRAL_RECENCY
    # np.interp holds the last value beyond the final point
    value = float(np.interp(months_old(item.date, now), _MONTHS, _SCORES))
    return int(value + 0.5)
