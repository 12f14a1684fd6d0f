"""
Step tables shared by the scorers.

Each table is a list of (threshold, score) tuples evaluated top-down; the
first matching threshold wins. A threshold of None is a catch-all.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

StepTable = list[tuple[Optional[float], float]]


# Total followers across channels (inclusive lower bounds)
REACH_STEPS: StepTable = [
    (1_000_000, 100),
    (500_000, 90),
    (200_000, 80),
    (100_000, 70),
    (50_000, 60),
    (20_000, 50),
    (10_000, 40),
    (5_000, 30),
    (1_000, 20),
    (None, 10),    # Any positive reach below 1k
]

# Engagement rate in percent (inclusive lower bounds)
ENGAGEMENT_STEPS: StepTable = [
    (10, 100),
    (7, 90),
    (5, 80),
    (3, 60),
    (2, 40),
    (1, 20),
    (None, 10),
]

# Estimated cost per lead (inclusive upper bounds, cheaper is better)
COST_PER_LEAD_STEPS: StepTable = [
    (5, 100),
    (10, 90),
    (20, 75),
    (50, 50),
    (100, 30),
    (None, 10),
]


def _not_positive(value: float) -> bool:
    return math.isnan(value) or value <= 0


def score_at_least(value: float, steps: StepTable) -> float:
    """
    Score for "higher is better" tables.

    Zero, negative or NaN input scores 0; the catch-all only covers
    positive values below the lowest threshold.
    """
    if _not_positive(value):
        return 0
    for threshold, score in steps:
        if threshold is None or value >= threshold:
            return score
    return 0


def score_at_most(value: float, steps: StepTable) -> float:
    """
    Score for "lower is better" tables.

    Zero, negative or NaN input scores 0 so missing cost data is never
    rewarded.
    """
    if _not_positive(value):
        return 0
    for threshold, score in steps:
        if threshold is None or value <= threshold:
            return score
    return steps[-1][1]


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a spreadsheet does (0.5 goes up), not banker's rounding."""
    exponent = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    return float(rounded)
