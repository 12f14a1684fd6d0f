"""
Client health score.

Five 0-100 components weighted into an integer score, then classified
into a retention risk bucket.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, Optional

from backoffice.scoring.step_tables import round_half_up, score_at_least

HEALTH_WEIGHTS = {
    "recency": 0.30,
    "frequency": 0.25,
    "monetary": 0.20,
    "trend": 0.15,
    "engagement": 0.10,
}

# (min score, classification), evaluated top-down
HEALTH_CLASSIFICATION_STEPS = [
    (75, "healthy"),
    (50, "attention"),
    (25, "critical"),
    (None, "lost"),
]

# Days since last revenue (inclusive upper bounds)
RECENCY_STEPS = [(30, 100), (60, 75), (90, 50), (180, 25)]

# Average operations per month over six months
FREQUENCY_STEPS = [(4, 100), (2, 75), (1, 50), (0.5, 25)]

# Average monthly revenue relative to the median client
MONETARY_RATIO_STEPS = [(2, 100), (1, 75), (0.5, 50), (None, 25)]

# Month-over-month growth in percent (inclusive lower bounds)
TREND_STEPS = [(20, 100), (0, 75), (-20, 50), (-50, 25)]

# Interactions in the last 90 days
ENGAGEMENT_STEPS = [(6, 100), (4, 75), (2, 50), (1, 25)]

LOOKBACK_MONTHS = 6


@dataclass(frozen=True)
class HealthInputs:
    days_since_last_revenue: Optional[int] = None
    revenue_count_last_6_months: int = 0
    avg_monthly_revenue: float = 0
    median_revenue: float = 0
    current_month_revenue: float = 0
    previous_month_revenue: float = 0
    interactions_last_90_days: int = 0


@dataclass(frozen=True)
class HealthComponents:
    recency: float
    frequency: float
    monetary: float
    trend: float
    engagement: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HealthScore:
    score: int
    classification: str
    components: HealthComponents


def recency_score(days_since_last_revenue: Optional[int]) -> float:
    if days_since_last_revenue is None:
        return 0
    for max_days, score in RECENCY_STEPS:
        if days_since_last_revenue <= max_days:
            return score
    return 0


def frequency_score(revenue_count_last_6_months: int) -> float:
    avg_per_month = revenue_count_last_6_months / LOOKBACK_MONTHS
    for threshold, score in FREQUENCY_STEPS:
        if avg_per_month >= threshold:
            return score
    return 0


def monetary_score(avg_monthly_revenue: float, median_revenue: float) -> float:
    if median_revenue == 0:
        return 75 if avg_monthly_revenue > 0 else 0
    return score_at_least(avg_monthly_revenue / median_revenue, MONETARY_RATIO_STEPS)


def trend_score(current_month_revenue: float, previous_month_revenue: float) -> float:
    if previous_month_revenue == 0:
        if current_month_revenue == 0:
            return 50
        # Growth from zero is unbounded either way
        return 100 if current_month_revenue > 0 else 0
    if current_month_revenue == 0:
        return 0

    growth = (current_month_revenue - previous_month_revenue) / previous_month_revenue * 100
    for threshold, score in TREND_STEPS:
        if growth >= threshold:
            return score
    return 0


def engagement_score(interactions_last_90_days: int) -> float:
    for threshold, score in ENGAGEMENT_STEPS:
        if interactions_last_90_days >= threshold:
            return score
    return 0


def classify_health(score: float) -> str:
    for threshold, label in HEALTH_CLASSIFICATION_STEPS:
        if threshold is None or score >= threshold:
            return label
    return HEALTH_CLASSIFICATION_STEPS[-1][1]


def health_components(inputs: HealthInputs) -> HealthComponents:
    return HealthComponents(
        recency=recency_score(inputs.days_since_last_revenue),
        frequency=frequency_score(inputs.revenue_count_last_6_months),
        monetary=monetary_score(inputs.avg_monthly_revenue, inputs.median_revenue),
        trend=trend_score(inputs.current_month_revenue, inputs.previous_month_revenue),
        engagement=engagement_score(inputs.interactions_last_90_days),
    )


def calculate_health_score(inputs: HealthInputs) -> HealthScore:
    components = health_components(inputs)
    weighted = sum(
        getattr(components, name) * weight for name, weight in HEALTH_WEIGHTS.items()
    )
    score = int(round_half_up(weighted))
    return HealthScore(
        score=score,
        classification=classify_health(score),
        components=components,
    )


def median_monthly_revenue(six_month_totals: Iterable[float]) -> float:
    """
    Median of per-client monthly averages.

    For an even count the upper-middle value is used, not the mean of the
    two middle values.
    """
    averages = sorted(total / LOOKBACK_MONTHS for total in six_month_totals)
    if not averages:
        return 0
    return averages[len(averages) // 2]


def _month_key(day: date, months_back: int) -> tuple[int, int]:
    month_index = day.year * 12 + (day.month - 1) - months_back
    return month_index // 12, month_index % 12 + 1


def build_health_inputs(
    revenues: Iterable[tuple[date, float]],
    interaction_count: int,
    today: date,
    median_revenue: float,
) -> HealthInputs:
    """
    Derive raw signals from a client's revenues of the last six months.

    "Current" month is the last complete month and "previous" the one
    before it, so a partial month never drags the trend down.
    """
    revenues = [(day, float(amount or 0)) for day, amount in revenues]
    last_month = _month_key(today, 1)
    two_months_ago = _month_key(today, 2)

    last_revenue_day = max((day for day, _ in revenues), default=None)
    days_since = (today - last_revenue_day).days if last_revenue_day else None

    total = sum(amount for _, amount in revenues)
    current = sum(a for d, a in revenues if (d.year, d.month) == last_month)
    previous = sum(a for d, a in revenues if (d.year, d.month) == two_months_ago)

    return HealthInputs(
        days_since_last_revenue=days_since,
        revenue_count_last_6_months=len(revenues),
        avg_monthly_revenue=total / LOOKBACK_MONTHS,
        median_revenue=median_revenue,
        current_month_revenue=current,
        previous_month_revenue=previous,
        interactions_last_90_days=interaction_count,
    )
