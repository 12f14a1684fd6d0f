"""
Influencer qualification scoring.

Weighted sum of five independently normalized (0-100) sub-scores:

    reach            30%  total followers across channels
    engagement       25%  engagement rate (percent)
    category_fit     20%  overlap of niche tags with priority tiers
    quality          15%  proxy: engagement sub-score x 1.1, capped at 100
    cost_efficiency  10%  inverse of estimated cost per lead

The result is clamped to [0, 100] and rounded to 2 decimals. Sparse input
never raises: an absent signal contributes 0 to its sub-score.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from backoffice.scoring.step_tables import (
    COST_PER_LEAD_STEPS,
    ENGAGEMENT_STEPS,
    REACH_STEPS,
    round_half_up,
    score_at_least,
    score_at_most,
)

QUALIFICATION_WEIGHTS = {
    "reach": 0.30,
    "engagement": 0.25,
    "category_fit": 0.20,
    "quality": 0.15,
    "cost_efficiency": 0.10,
}

HIGH_VALUE_NICHES = frozenset({"day_trade", "swing_trade", "options"})
MEDIUM_VALUE_NICHES = frozenset({"crypto", "stocks", "forex"})

# Category fit scores by tier overlap
BOTH_TIERS_SCORE = 100
HIGH_TIER_SCORE = 80
MEDIUM_TIER_SCORE = 60
UNMATCHED_TAGS_SCORE = 30

QUALITY_PROXY_FACTOR = 1.1

REACH_FIELDS = (
    "instagram_followers",
    "youtube_subscribers",
    "twitter_followers",
    "tiktok_followers",
)


def _to_number(value: Any, field_name: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be numeric, got {value!r}") from None
    # NaN counts as absent
    return 0.0 if math.isnan(number) else number


def _to_tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(tag).strip() for tag in value if str(tag).strip())


@dataclass(frozen=True)
class ProspectAttributes:
    """Snapshot of the signals the qualification score is computed from."""
    instagram_followers: float = 0
    youtube_subscribers: float = 0
    twitter_followers: float = 0
    tiktok_followers: float = 0
    engagement_rate: float = 0
    niche: tuple[str, ...] = ()
    estimated_cpl: float = 0

    @classmethod
    def from_record(cls, record: Any) -> "ProspectAttributes":
        """
        Read attributes from a mapping or an ORM row.

        None and blank values are treated as absent. A value that is present
        but not numeric raises ValueError here, before scoring.
        """
        if isinstance(record, Mapping):
            get = record.get
        else:
            def get(name, default=None):
                return getattr(record, name, default)

        numbers = {
            name: _to_number(get(name), name)
            for name in (*REACH_FIELDS, "engagement_rate", "estimated_cpl")
        }
        return cls(niche=_to_tags(get("niche")), **numbers)

    @property
    def total_reach(self) -> float:
        return sum(getattr(self, name) or 0 for name in REACH_FIELDS)


@dataclass(frozen=True)
class QualificationBreakdown:
    """Sub-scores (0-100 each) and the weighted total."""
    reach: float
    engagement: float
    category_fit: float
    quality: float
    cost_efficiency: float
    total: float

    def as_dict(self) -> dict:
        return asdict(self)


def reach_score(total_followers: float) -> float:
    return score_at_least(total_followers or 0, REACH_STEPS)


def engagement_score(engagement_rate: float) -> float:
    return score_at_least(engagement_rate or 0, ENGAGEMENT_STEPS)


def category_fit_score(
    niches: Iterable[str],
    high_value: Iterable[str] = HIGH_VALUE_NICHES,
    medium_value: Iterable[str] = MEDIUM_VALUE_NICHES,
) -> float:
    tags = set(niches or ())
    has_high = bool(tags & set(high_value))
    has_medium = bool(tags & set(medium_value))

    if has_high and has_medium:
        return BOTH_TIERS_SCORE
    if has_high:
        return HIGH_TIER_SCORE
    if has_medium:
        return MEDIUM_TIER_SCORE
    if tags:
        return UNMATCHED_TAGS_SCORE
    return 0


def quality_proxy_score(engagement_sub_score: float) -> float:
    return min(engagement_sub_score * QUALITY_PROXY_FACTOR, 100)


def cost_efficiency_score(estimated_cpl: float) -> float:
    return score_at_most(estimated_cpl or 0, COST_PER_LEAD_STEPS)


def engagement_quality_proxy(attributes: ProspectAttributes, engagement_sub_score: float) -> float:
    """Default quality slot. Stands in until a manual content rating exists."""
    return quality_proxy_score(engagement_sub_score)


QualityFn = Callable[[ProspectAttributes, float], float]


class QualificationScorer:
    """
    Computes the qualification score for a prospect.

    The quality slot is a callable taking (attributes, engagement sub-score)
    and returning 0-100; swapping it leaves the weights untouched.

    Usage:
        scorer = QualificationScorer()
        score = scorer.score(ProspectAttributes.from_record(influencer))
    """

    def __init__(
        self,
        weights: Optional[Mapping[str, float]] = None,
        high_value_niches: Iterable[str] = HIGH_VALUE_NICHES,
        medium_value_niches: Iterable[str] = MEDIUM_VALUE_NICHES,
        quality_fn: Optional[QualityFn] = None,
    ):
        self.weights = dict(weights or QUALIFICATION_WEIGHTS)
        self.high_value_niches = frozenset(high_value_niches)
        self.medium_value_niches = frozenset(medium_value_niches)
        self.quality_fn = quality_fn or engagement_quality_proxy

    def breakdown(self, attributes: ProspectAttributes) -> QualificationBreakdown:
        reach = reach_score(attributes.total_reach)
        engagement = engagement_score(attributes.engagement_rate)
        category_fit = category_fit_score(
            attributes.niche, self.high_value_niches, self.medium_value_niches
        )
        quality = max(0, min(self.quality_fn(attributes, engagement), 100))
        cost_efficiency = cost_efficiency_score(attributes.estimated_cpl)

        total = (
            reach * self.weights["reach"]
            + engagement * self.weights["engagement"]
            + category_fit * self.weights["category_fit"]
            + quality * self.weights["quality"]
            + cost_efficiency * self.weights["cost_efficiency"]
        )
        total = round_half_up(max(0, min(total, 100)), 2)

        return QualificationBreakdown(
            reach=reach,
            engagement=engagement,
            category_fit=category_fit,
            quality=quality,
            cost_efficiency=cost_efficiency,
            total=total,
        )

    def score(self, attributes: ProspectAttributes) -> float:
        return self.breakdown(attributes).total


_default_scorer = QualificationScorer()


def calculate_qualification_score(attributes: ProspectAttributes) -> float:
    """Score with the default weights, niche tiers and quality proxy."""
    return _default_scorer.score(attributes)
