"""
Scoring Module

Weighted step-table heuristics:
- Influencer qualification score (0-100)
- Portfolio risk metrics for wealth allocations
- Client health score and retention classification
"""

from backoffice.scoring.qualification import (
    ProspectAttributes,
    QualificationBreakdown,
    QualificationScorer,
    calculate_qualification_score,
)
from backoffice.scoring.portfolio_risk import (
    Allocation,
    MarketAssumptions,
    PortfolioMetrics,
    benchmark_projections,
    classify_risk,
    portfolio_metrics,
    risk_score,
)
from backoffice.scoring.health import (
    HealthInputs,
    HealthScore,
    build_health_inputs,
    calculate_health_score,
)

__all__ = [
    "Allocation",
    "HealthInputs",
    "HealthScore",
    "MarketAssumptions",
    "PortfolioMetrics",
    "ProspectAttributes",
    "QualificationBreakdown",
    "QualificationScorer",
    "benchmark_projections",
    "build_health_inputs",
    "calculate_health_score",
    "calculate_qualification_score",
    "classify_risk",
    "portfolio_metrics",
    "risk_score",
]
