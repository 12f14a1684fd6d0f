"""
Portfolio risk metrics for the wealth allocation simulator.

Allocations are percentages per asset class. They are not required to
total 100; Allocation.total reports the sum for display.
"""

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from backoffice.scoring.step_tables import round_half_up

# Relative risk per asset class (1 = lowest, 9 = highest)
RISK_FACTORS = {
    "fixed_income": 1,
    "equities": 9,
    "real_estate_funds": 5,
    "multimarket": 6,
    "fx": 7,
    "insurance": 2,
    "consortium": 3,
}

# Annual volatility per asset class, percent
VOLATILITY = {
    "fixed_income": 2,
    "equities": 25,
    "real_estate_funds": 12,
    "multimarket": 8,
    "fx": 15,
    "insurance": 1,
    "consortium": 3,
}

# Historical worst drawdown per asset class, percent
DRAWDOWN = {
    "fixed_income": -2,
    "equities": -45,
    "real_estate_funds": -25,
    "multimarket": -15,
    "fx": -20,
    "insurance": 0,
    "consortium": -5,
}

# (max risk score, classification), evaluated top-down
RISK_CLASSIFICATION_STEPS = [
    (3, "conservative"),
    (5, "moderate"),
    (7, "bold"),
    (None, "aggressive"),
]


@dataclass(frozen=True)
class Allocation:
    fixed_income: float = 0
    equities: float = 0
    real_estate_funds: float = 0
    multimarket: float = 0
    fx: float = 0
    insurance: float = 0
    consortium: float = 0

    @property
    def total(self) -> float:
        return sum(self.weights().values())

    def weights(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) or 0 for f in fields(self)}


@dataclass(frozen=True)
class MarketAssumptions:
    """Annual rates in percent."""
    selic: float = 13.25
    equities: float = 12
    real_estate_funds: float = 15.25   # CDI + 2
    multimarket: float = 14.25         # CDI + 1
    fx: float = 5
    insurance: float = -1.5            # Estimated cost
    consortium: float = 6.5            # IPCA + 2
    ipca: float = 4.5
    savings: float = 7.5

    @classmethod
    def from_rates(cls, selic: float, ipca: float) -> "MarketAssumptions":
        """Assumptions with the CDI and IPCA-linked classes tracking the given rates."""
        return cls(
            selic=selic,
            real_estate_funds=selic + 2,
            multimarket=selic + 1,
            consortium=ipca + 2,
            ipca=ipca,
        )

    def rate_for(self, asset_class: str) -> float:
        # Fixed income earns the policy rate
        if asset_class == "fixed_income":
            return self.selic
        return getattr(self, asset_class)


@dataclass(frozen=True)
class ScenarioParams:
    selic_target: float = 13.25
    dollar_change: float = 0
    ibov_change: float = 0


@dataclass(frozen=True)
class PortfolioMetrics:
    annual_return: float
    risk_score: float
    risk_classification: str
    volatility: float
    max_drawdown: float
    projected_1y: float
    projected_3y: float
    projected_5y: float
    insurance_percent: float
    consortium_percent: float

    def as_dict(self) -> dict:
        return asdict(self)


DEFAULT_ALLOCATION = Allocation(
    fixed_income=40, equities=15, real_estate_funds=15, multimarket=10,
    fx=5, insurance=10, consortium=5,
)

PROFILE_PRESETS = {
    "conservative": Allocation(
        fixed_income=70, equities=0, real_estate_funds=10, multimarket=10,
        fx=0, insurance=5, consortium=5,
    ),
    "moderate": Allocation(
        fixed_income=45, equities=15, real_estate_funds=15, multimarket=10,
        fx=5, insurance=5, consortium=5,
    ),
    "bold": Allocation(
        fixed_income=25, equities=30, real_estate_funds=15, multimarket=15,
        fx=10, insurance=5, consortium=0,
    ),
}


def risk_score(allocation: Allocation) -> float:
    score = sum(
        (pct / 100) * RISK_FACTORS[asset_class]
        for asset_class, pct in allocation.weights().items()
    )
    return round_half_up(score, 1)


def classify_risk(score: float) -> str:
    for threshold, label in RISK_CLASSIFICATION_STEPS:
        if threshold is None or score <= threshold:
            return label
    return RISK_CLASSIFICATION_STEPS[-1][1]


def volatility(allocation: Allocation) -> float:
    """Square root of the summed squared weighted volatilities (no correlation)."""
    total = sum(
        ((pct / 100) * VOLATILITY[asset_class]) ** 2
        for asset_class, pct in allocation.weights().items()
    )
    return round_half_up(math.sqrt(total), 2)


def max_drawdown(allocation: Allocation) -> float:
    total = sum(
        (pct / 100) * DRAWDOWN[asset_class]
        for asset_class, pct in allocation.weights().items()
    )
    return round_half_up(total, 2)


def expected_annual_return(
    allocation: Allocation, assumptions: Optional[MarketAssumptions] = None
) -> float:
    assumptions = assumptions or MarketAssumptions()
    return sum(
        (pct / 100) * assumptions.rate_for(asset_class)
        for asset_class, pct in allocation.weights().items()
    )


def project_wealth(
    patrimony: float,
    monthly_contribution: float,
    annual_rate: float,
    years: int,
) -> list[float]:
    """
    Month-by-month balance with monthly compounding.

    Returns years * 12 + 1 values, the first being the starting patrimony.
    """
    monthly_rate = annual_rate / 100 / 12
    balances = [patrimony]
    current = patrimony
    for _ in range(years * 12):
        current = current * (1 + monthly_rate) + monthly_contribution
        balances.append(current)
    return balances


def scenario_rates(
    allocation: Allocation,
    assumptions: Optional[MarketAssumptions] = None,
    scenario: Optional[ScenarioParams] = None,
) -> dict[str, float]:
    """
    Annual return under optimistic, base, pessimistic and stress scenarios.

    Market moves are scaled by 1.3 / 1.0 / 0.5; the stress case cuts selic
    by 2 points and applies fixed losses to risk assets.
    """
    assumptions = assumptions or MarketAssumptions()
    scenario = scenario or ScenarioParams()
    selic_diff = scenario.selic_target - assumptions.selic

    def adjusted(multiplier: float) -> MarketAssumptions:
        selic = scenario.selic_target
        return replace(
            assumptions,
            selic=selic,
            real_estate_funds=selic + 2,
            multimarket=selic + 1,
            equities=(
                assumptions.equities
                + scenario.ibov_change * multiplier
                - selic_diff * 0.5 * multiplier
            ),
            fx=assumptions.fx + scenario.dollar_change * multiplier,
        )

    stress = replace(
        assumptions,
        selic=assumptions.selic - 2,
        equities=-15,
        real_estate_funds=-5,
        fx=-10,
        multimarket=-3,
        consortium=assumptions.ipca,
    )

    return {
        "optimistic": expected_annual_return(allocation, adjusted(1.3)),
        "base": expected_annual_return(allocation, adjusted(1.0)),
        "pessimistic": expected_annual_return(allocation, adjusted(0.5)),
        "stress": expected_annual_return(allocation, stress),
    }


def portfolio_metrics(
    allocation: Allocation,
    patrimony: float,
    monthly_contribution: float,
    assumptions: Optional[MarketAssumptions] = None,
) -> PortfolioMetrics:
    """Side-by-side comparison metrics for one allocation."""
    annual_return = expected_annual_return(allocation, assumptions)
    score = risk_score(allocation)

    def final_balance(years: int) -> float:
        return project_wealth(patrimony, monthly_contribution, annual_return, years)[-1]

    return PortfolioMetrics(
        annual_return=annual_return,
        risk_score=score,
        risk_classification=classify_risk(score),
        volatility=volatility(allocation),
        max_drawdown=max_drawdown(allocation),
        projected_1y=final_balance(1),
        projected_3y=final_balance(3),
        projected_5y=final_balance(5),
        insurance_percent=allocation.insurance,
        consortium_percent=allocation.consortium,
    )


def benchmark_projections(
    patrimony: float,
    monthly_contribution: float,
    years: int,
    assumptions: Optional[MarketAssumptions] = None,
) -> dict[str, list[float]]:
    """Savings account and CDI (selic) curves to compare a portfolio against."""
    assumptions = assumptions or MarketAssumptions()
    return {
        "savings": project_wealth(patrimony, monthly_contribution, assumptions.savings, years),
        "cdi": project_wealth(patrimony, monthly_contribution, assumptions.selic, years),
    }
