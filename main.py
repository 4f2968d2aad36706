#!/usr/bin/env python3
"""Portfolio Analytics: risk, performance, rebalancing and income reports.

Usage:
    python main.py risk portfolio.yaml                        # risk score + recommendations
    python main.py risk portfolio.yaml --market-history       # with return metrics from yfinance
    python main.py performance portfolio.yaml --refresh       # latest prices first
    python main.py rebalance portfolio.yaml --strategy AGGRESSIVE
    python main.py rebalance portfolio.yaml --tax-aware
    python main.py income portfolio.yaml --yield 0.025
    python main.py instruments portfolio.yaml                 # per-instrument risk, stress tests
    python main.py schedule --frequency MONTHLY
"""

import argparse
import json
import sys
from datetime import datetime

from portfolio_analytics.analysis import (
    IncomeProjector,
    InstrumentRiskAssessor,
    PerformanceAnalyzer,
    Rebalancer,
    RiskEngine,
)
from portfolio_analytics.config import Defaults
from portfolio_analytics.data_sources import (
    MarketDataClient,
    build_returns_series,
    build_value_history,
    fetch_benchmark_returns,
    load_snapshot,
    refresh_prices,
)
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("main")


def _print(report: dict) -> None:
    report = {**report, "generated_at": datetime.now().isoformat(timespec="seconds")}
    print(json.dumps(report, indent=2, default=str))


def _snapshot(args):
    """Load the portfolio file and optionally refresh prices."""
    try:
        snapshot = load_snapshot(args.portfolio)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Cannot load portfolio %s: %s", args.portfolio, exc)
        sys.exit(1)
    market = MarketDataClient() if (args.refresh or getattr(args, "market_history", False)) else None
    if args.refresh:
        snapshot = refresh_prices(snapshot, market)
    return snapshot, market


# ============================================================
# COMMANDS
# ============================================================

def cmd_risk(args):
    """Risk score, metrics and recommendations."""
    snapshot, market = _snapshot(args)
    returns, benchmark = None, None
    if args.market_history:
        returns = build_returns_series(snapshot, market, period=args.period)
        benchmark = fetch_benchmark_returns(market, args.benchmark, period=args.period)
        if not returns:
            logger.warning("No price history for %s; return metrics will be zero", args.portfolio)
        if returns and benchmark:
            # pair the most recent observations of both series
            n = min(len(returns), len(benchmark))
            returns, benchmark = returns[-n:], benchmark[-n:]
    engine = RiskEngine(risk_free_rate=args.risk_free_rate)
    _print(engine.analyze_risk(snapshot, returns_series=returns, benchmark_returns=benchmark))


def cmd_performance(args):
    """Returns, attribution and insights."""
    snapshot, market = _snapshot(args)
    history, benchmark = None, None
    if args.market_history:
        history = build_value_history(snapshot, market, period=args.period)
        benchmark = fetch_benchmark_returns(market, args.benchmark, period=args.period)
    _print(PerformanceAnalyzer().analyze_performance(snapshot, history, benchmark))


def cmd_rebalance(args):
    """Drift and trade suggestions against a target allocation."""
    snapshot, _ = _snapshot(args)
    rebalancer = Rebalancer()
    target = snapshot.target_allocation if (snapshot.target_allocation and not args.strategy) \
        else rebalancer.generate_target_allocation(args.strategy or Defaults.REBALANCE_STRATEGY)
    if args.tax_aware:
        plan = rebalancer.calculate_tax_efficient_rebalancing(snapshot, target)
    else:
        plan = rebalancer.calculate_rebalancing(snapshot, target)
    _print(plan)


def cmd_income(args):
    """Dividend and coupon income projections."""
    snapshot, _ = _snapshot(args)
    _print(IncomeProjector().calculate_income_projections(snapshot, args.dividend_yield))


def cmd_instruments(args):
    """Per-instrument risk levels, factor breakdown and stress scenarios."""
    snapshot, _ = _snapshot(args)
    _print(InstrumentRiskAssessor().assess(snapshot))


def cmd_schedule(args):
    """Next periodic rebalance date."""
    _print(Rebalancer.generate_rebalancing_schedule(args.frequency))


def main():
    parser = argparse.ArgumentParser(
        description="Portfolio Analytics: risk, performance, rebalancing and income reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", help="Commands")

    def portfolio_parser(name, help_text, func):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("portfolio", help="Portfolio file (YAML or JSON)")
        p.add_argument("--refresh", action="store_true", help="Fetch latest prices before analysing")
        p.set_defaults(func=func)
        return p

    def history_args(p):
        p.add_argument("--market-history", action="store_true",
                       help="Build return/value series from market price history")
        p.add_argument("--period", default=Defaults.HISTORY_PERIOD, help="History period (default: %(default)s)")
        p.add_argument("--benchmark", default=Defaults.BENCHMARK, help="Benchmark ticker (default: %(default)s)")

    # risk
    p = portfolio_parser("risk", "Risk analysis", cmd_risk)
    history_args(p)
    p.add_argument("--risk-free-rate", type=float, default=Defaults.RISK_FREE_RATE)

    # performance
    p = portfolio_parser("performance", "Performance analysis", cmd_performance)
    history_args(p)

    # rebalance
    p = portfolio_parser("rebalance", "Rebalancing suggestions", cmd_rebalance)
    p.add_argument("--strategy", default="", type=str.upper,
                   help="CONSERVATIVE, MODERATE, AGGRESSIVE or BALANCED (default: portfolio target)")
    p.add_argument("--tax-aware", action="store_true", help="Prioritise tax-loss harvesting")

    # income
    p = portfolio_parser("income", "Income projections", cmd_income)
    p.add_argument("--yield", dest="dividend_yield", type=float, default=Defaults.DIVIDEND_YIELD,
                   help="Default stock dividend yield (default: %(default)s)")

    # instruments
    portfolio_parser("instruments", "Instrument-level risk", cmd_instruments)

    # schedule
    p = sub.add_parser("schedule", help="Rebalancing schedule")
    p.add_argument("--frequency", default=Defaults.REBALANCE_FREQUENCY, type=str.upper)
    p.set_defaults(func=cmd_schedule)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)
    args.func(args)


if __name__ == "__main__":
    main()
