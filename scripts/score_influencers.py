#!/usr/bin/env python3
"""
Recalculate qualification scores for influencer prospects.

Scores every influencer profile from its reach, engagement, niche and
cost-per-lead fields and optionally writes the result back to
influencer_profiles.qualification_score.

Usage:
    python scripts/score_influencers.py                 # Top 20 prospects
    python scripts/score_influencers.py --top 50        # Top 50
    python scripts/score_influencers.py --persist       # Save scores to DB
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.logging import logger
from backoffice.database import SessionLocal, init_db
from backoffice.models import InfluencerProfile
from backoffice.scoring.qualification import ProspectAttributes, QualificationScorer


def calculate_scores(db, persist=False):
    """
    Score all influencer profiles.

    Args:
        db: Database session
        persist: If True, update qualification_score on each row

    Returns:
        (scores, skipped) where scores is sorted by total descending
    """
    scorer = QualificationScorer()
    scores = []
    skipped = 0

    for influencer in db.query(InfluencerProfile).all():
        try:
            attributes = ProspectAttributes.from_record(influencer)
        except ValueError as e:
            logger.warning(f"Skipping {influencer.name}: {e}")
            skipped += 1
            continue

        breakdown = scorer.breakdown(attributes)
        if persist:
            influencer.qualification_score = Decimal(str(breakdown.total))

        scores.append({
            "id": influencer.id,
            "name": influencer.name,
            "stage": influencer.stage.value,
            "reach": attributes.total_reach,
            "breakdown": breakdown,
        })

    if persist:
        db.commit()
        logger.info(f"Persisted {len(scores)} qualification scores")

    scores.sort(key=lambda x: -x["breakdown"].total)
    return scores, skipped


def print_top_prospects(scores, top_n):
    print("\n" + "=" * 92)
    print(f"  TOP {top_n} INFLUENCER PROSPECTS BY QUALIFICATION SCORE")
    print("=" * 92)
    print(
        f"\n{'Rank':<5} {'Name':<30} {'Stage':<12} {'Score':>7} "
        f"{'Reach':>6} {'Eng':>5} {'Fit':>5} {'Qual':>6} {'Cost':>5}"
    )
    print("-" * 92)

    for i, s in enumerate(scores[:top_n], 1):
        b = s["breakdown"]
        print(
            f"{i:<5} {s['name'][:28]:<30} {s['stage']:<12} {b.total:>7.2f} "
            f"{b.reach:>6.0f} {b.engagement:>5.0f} {b.category_fit:>5.0f} "
            f"{b.quality:>6.1f} {b.cost_efficiency:>5.0f}"
        )


def main():
    parser = argparse.ArgumentParser(description="Calculate influencer qualification scores")
    parser.add_argument("--top", type=int, default=20, help="Show top N prospects (default 20)")
    parser.add_argument("--persist", action="store_true", help="Save qualification_score to DB")
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        scores, skipped = calculate_scores(db, persist=args.persist)
        print_top_prospects(scores, args.top)
        print(f"\nScored: {len(scores)}  Skipped: {skipped}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
