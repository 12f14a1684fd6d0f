#!/usr/bin/env python3
"""
Tests for influencer qualification scoring.
"""

import sys
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backoffice.scoring.qualification import (
    QUALIFICATION_WEIGHTS,
    ProspectAttributes,
    QualificationScorer,
    calculate_qualification_score,
    category_fit_score,
    cost_efficiency_score,
    engagement_score,
    quality_proxy_score,
    reach_score,
)
from backoffice.scoring.step_tables import (
    COST_PER_LEAD_STEPS,
    ENGAGEMENT_STEPS,
    REACH_STEPS,
    round_half_up,
)


# --- Step tables ---

@pytest.mark.parametrize(
    "followers, expected",
    [
        (0, 0),
        (1, 10),
        (999, 10),
        (1_000, 20),
        (4_999, 20),
        (5_000, 30),
        (10_000, 40),
        (20_000, 50),
        (50_000, 60),
        (100_000, 70),
        (200_000, 80),
        (500_000, 90),
        (999_999, 90),
        (1_000_000, 100),
        (50_000_000, 100),
    ],
)
def test_reach_step_table(followers, expected):
    assert reach_score(followers) == expected


def test_reach_thresholds_score_inclusive():
    for threshold, score in REACH_STEPS:
        if threshold is not None:
            assert reach_score(threshold) == score


@pytest.mark.parametrize(
    "rate, expected",
    [(0, 0), (None, 0), (0.5, 10), (1, 20), (2, 40), (3, 60), (4.9, 60), (5, 80), (7, 90), (8, 90), (10, 100), (35, 100)],
)
def test_engagement_step_table(rate, expected):
    assert engagement_score(rate) == expected


def test_engagement_thresholds_score_inclusive():
    for threshold, score in ENGAGEMENT_STEPS:
        if threshold is not None:
            assert engagement_score(threshold) == score


@pytest.mark.parametrize(
    "cpl, expected",
    [(None, 0), (0, 0), (-3, 0), (0.5, 100), (5, 100), (5.01, 90), (10, 90), (20, 75), (50, 50), (100, 30), (100.5, 10), (1000, 10)],
)
def test_cost_efficiency_step_table(cpl, expected):
    assert cost_efficiency_score(cpl) == expected


def test_cost_thresholds_score_inclusive():
    for threshold, score in COST_PER_LEAD_STEPS:
        if threshold is not None:
            assert cost_efficiency_score(threshold) == score


@pytest.mark.parametrize(
    "niches, expected",
    [
        ([], 0),
        (None, 0),
        (["day_trade", "crypto"], 100),
        (["options"], 80),
        (["swing_trade", "education"], 80),
        (["forex"], 60),
        (["stocks", "real_estate"], 60),
        (["education", "personal_finance"], 30),
    ],
)
def test_category_fit(niches, expected):
    assert category_fit_score(niches) == expected


def test_quality_proxy_is_capped():
    assert quality_proxy_score(0) == 0
    assert quality_proxy_score(60) == pytest.approx(66)
    assert quality_proxy_score(90) == pytest.approx(99)
    assert quality_proxy_score(100) == 100


# --- Full score ---

def test_reference_prospect_scores_90_35():
    attributes = ProspectAttributes(
        instagram_followers=600_000,
        engagement_rate=8,
        niche=("day_trade",),
        estimated_cpl=4,
    )
    breakdown = QualificationScorer().breakdown(attributes)

    assert breakdown.reach == 90
    assert breakdown.engagement == 90
    assert breakdown.category_fit == 80
    assert breakdown.quality == pytest.approx(99)
    assert breakdown.cost_efficiency == 100
    assert breakdown.total == 90.35
    assert calculate_qualification_score(attributes) == 90.35


def test_all_absent_scores_exactly_zero():
    assert calculate_qualification_score(ProspectAttributes()) == 0
    assert calculate_qualification_score(ProspectAttributes.from_record({})) == 0


def test_maximum_prospect_is_capped_at_100():
    attributes = ProspectAttributes(
        youtube_subscribers=2_000_000,
        engagement_rate=15,
        niche=("options", "crypto"),
        estimated_cpl=1,
    )
    assert calculate_qualification_score(attributes) == 100


def test_reach_sums_all_channels():
    attributes = ProspectAttributes(
        instagram_followers=400,
        youtube_subscribers=300,
        twitter_followers=200,
        tiktok_followers=100,
    )
    assert attributes.total_reach == 1_000
    assert QualificationScorer().breakdown(attributes).reach == 20


def test_reach_is_monotonic_per_channel():
    channels = ("instagram_followers", "youtube_subscribers", "twitter_followers", "tiktok_followers")
    base = {"instagram_followers": 3_000, "youtube_subscribers": 1_000, "twitter_followers": 0, "tiktok_followers": 500}
    scorer = QualificationScorer()

    for channel in channels:
        previous = -1
        for count in (0, 10, 999, 1_000, 7_500, 45_000, 180_000, 600_000, 2_000_000):
            attributes = ProspectAttributes(**{**base, channel: count})
            current = scorer.breakdown(attributes).reach
            assert current >= previous
            previous = current


@pytest.mark.parametrize(
    "attributes",
    [
        ProspectAttributes(),
        ProspectAttributes(instagram_followers=1),
        ProspectAttributes(engagement_rate=100, estimated_cpl=0.01),
        ProspectAttributes(niche=("unknown",), estimated_cpl=10_000),
        ProspectAttributes(tiktok_followers=10**9, engagement_rate=10**6, niche=("options", "forex"), estimated_cpl=1),
        ProspectAttributes(instagram_followers=-500, engagement_rate=-2, estimated_cpl=-1),
    ],
)
def test_score_within_bounds(attributes):
    score = calculate_qualification_score(attributes)
    assert 0 <= score <= 100
    assert score == round(score, 2)


def test_weights_sum_to_one():
    assert sum(QUALIFICATION_WEIGHTS.values()) == pytest.approx(1.0)


# --- Quality slot ---

def test_quality_slot_can_be_replaced():
    def manual_rating(attributes, engagement_sub_score):
        return 50

    attributes = ProspectAttributes(engagement_rate=8)
    default = QualificationScorer().breakdown(attributes)
    manual = QualificationScorer(quality_fn=manual_rating).breakdown(attributes)

    assert default.quality == pytest.approx(99)
    assert manual.quality == 50
    # Only the quality contribution changes
    assert manual.total == pytest.approx(default.total - (99 - 50) * 0.15, abs=0.01)


def test_quality_slot_output_is_clamped():
    scorer = QualificationScorer(quality_fn=lambda attributes, engagement: 250)
    assert scorer.breakdown(ProspectAttributes()).quality == 100


# --- Input handling ---

def test_from_record_reads_orm_like_rows():
    row = SimpleNamespace(
        instagram_followers=600_000,
        youtube_subscribers=None,
        twitter_followers=None,
        tiktok_followers=None,
        engagement_rate=Decimal("8.00"),
        niche=["day_trade"],
        estimated_cpl=Decimal("4.00"),
    )
    assert calculate_qualification_score(ProspectAttributes.from_record(row)) == 90.35


def test_from_record_treats_blanks_as_absent():
    attributes = ProspectAttributes.from_record(
        {"instagram_followers": "", "engagement_rate": None, "niche": "crypto, stocks"}
    )
    assert attributes.instagram_followers == 0
    assert attributes.engagement_rate == 0
    assert attributes.niche == ("crypto", "stocks")


def test_from_record_rejects_non_numeric_values():
    with pytest.raises(ValueError, match="engagement_rate"):
        ProspectAttributes.from_record({"engagement_rate": "high"})


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(90.35000000000001, 2) == 90.35


def test_nan_values_count_as_absent():
    attributes = ProspectAttributes.from_record(
        {"instagram_followers": "nan", "engagement_rate": "nan", "estimated_cpl": "nan"}
    )
    assert attributes.instagram_followers == 0
    assert attributes.estimated_cpl == 0
    assert calculate_qualification_score(attributes) == 0


def test_nan_scores_zero_in_step_tables():
    nan = float("nan")
    assert reach_score(nan) == 0
    assert engagement_score(nan) == 0
    assert cost_efficiency_score(nan) == 0
    assert calculate_qualification_score(ProspectAttributes(engagement_rate=nan, estimated_cpl=nan)) == 0
