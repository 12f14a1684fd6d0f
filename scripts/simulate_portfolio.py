#!/usr/bin/env python3
"""
Wealth allocation simulator.

Prints risk score, classification, volatility, drawdown, expected return,
scenario returns and projected wealth for a preset or custom allocation.

Usage:
    python scripts/simulate_portfolio.py --preset moderate
    python scripts/simulate_portfolio.py --fixed-income 50 --equities 30 --fx 20
    python scripts/simulate_portfolio.py --preset bold --patrimony 500000 --monthly 2000 --years 20
"""

import argparse
import sys
from dataclasses import fields
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from backoffice.scoring.portfolio_risk import (
    DEFAULT_ALLOCATION,
    PROFILE_PRESETS,
    Allocation,
    MarketAssumptions,
    benchmark_projections,
    portfolio_metrics,
    project_wealth,
    ScenarioParams,
    scenario_rates,
)


def build_allocation(args) -> Allocation:
    base = PROFILE_PRESETS[args.preset] if args.preset else DEFAULT_ALLOCATION
    overrides = {
        f.name: getattr(args, f.name)
        for f in fields(Allocation)
        if getattr(args, f.name) is not None
    }
    if overrides and not args.preset:
        # Custom allocation: unspecified classes are 0
        return Allocation(**overrides)
    return Allocation(**{**base.weights(), **overrides})


def main():
    parser = argparse.ArgumentParser(description="Simulate a wealth allocation")
    parser.add_argument("--preset", choices=sorted(PROFILE_PRESETS), default=None)
    for f in fields(Allocation):
        parser.add_argument(f"--{f.name.replace('_', '-')}", dest=f.name, type=float, default=None)
    parser.add_argument("--patrimony", type=float, default=1_000_000)
    parser.add_argument("--monthly", type=float, default=5_000)
    parser.add_argument("--years", type=int, default=10, help="Extra projection horizon")
    args = parser.parse_args()

    allocation = build_allocation(args)
    assumptions = MarketAssumptions.from_rates(settings.SELIC_RATE, settings.IPCA_RATE)
    metrics = portfolio_metrics(allocation, args.patrimony, args.monthly, assumptions)
    rates = scenario_rates(
        allocation, assumptions, ScenarioParams(selic_target=settings.SELIC_RATE)
    )

    print("\n" + "=" * 60)
    print("  PORTFOLIO SIMULATION")
    print("=" * 60)
    for asset_class, pct in allocation.weights().items():
        print(f"  {asset_class:<20} {pct:>6.1f}%")
    if allocation.total != 100:
        print(f"  WARNING: allocation totals {allocation.total:.1f}%")

    print("-" * 60)
    print(f"  Risk score:       {metrics.risk_score:>6.1f}  ({metrics.risk_classification})")
    print(f"  Volatility:       {metrics.volatility:>6.2f}%")
    print(f"  Max drawdown:     {metrics.max_drawdown:>6.2f}%")
    print(f"  Expected return:  {metrics.annual_return:>6.2f}% a.a.")

    print("\n  Scenario returns:")
    for name, rate in rates.items():
        print(f"    {name:<12} {rate:>6.2f}%")

    print("\n  Projected wealth:")
    print(f"    1 year   {metrics.projected_1y:>16,.2f}")
    print(f"    3 years  {metrics.projected_3y:>16,.2f}")
    print(f"    5 years  {metrics.projected_5y:>16,.2f}")
    portfolio = project_wealth(args.patrimony, args.monthly, metrics.annual_return, args.years)[-1]
    if args.years not in (1, 3, 5):
        print(f"    {args.years} years {portfolio:>16,.2f}")

    benchmarks = benchmark_projections(args.patrimony, args.monthly, args.years, assumptions)
    print(f"\n  After {args.years} years vs benchmarks:")
    print(f"    {'portfolio':<12} {portfolio:>16,.2f}")
    for name, balances in benchmarks.items():
        print(f"    {name:<12} {balances[-1]:>16,.2f}  ({portfolio - balances[-1]:+,.2f})")


if __name__ == "__main__":
    main()
