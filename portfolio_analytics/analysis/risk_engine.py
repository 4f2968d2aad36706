"""Portfolio risk scoring - allocation, concentration, diversification, return-based metrics.

The engine never fabricates returns: metrics are computed over the series the
caller supplies (historical portfolio returns, or a proxy series such as a
benchmark), and are zero when neither is given.
"""

from __future__ import annotations

import math
from typing import Sequence

from portfolio_analytics.analysis import stat_math as sm
from portfolio_analytics.models import AssetType, PortfolioSnapshot
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("risk_engine")

LOW_RISK_CEILING = 30
HIGH_RISK_FLOOR = 60
DRAWDOWN_BASE_VALUE = 100_000.0
GOLD_ALERT_THRESHOLD = 30.0


def classify_risk(score: float) -> str:
    if score < LOW_RISK_CEILING:
        return "LOW"
    if score > HIGH_RISK_FLOOR:
        return "HIGH"
    return "MEDIUM"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class RiskEngine:
    """Turn a portfolio snapshot (+ optional returns) into a risk report."""

    def __init__(self, risk_free_rate: float = sm.DEFAULT_RISK_FREE_RATE) -> None:
        self.risk_free_rate = risk_free_rate

    # ------------------------------------------------------------------
    #  Main entry point
    # ------------------------------------------------------------------
    def analyze_risk(
        self,
        snapshot: PortfolioSnapshot,
        returns_series: Sequence[float] | None = None,
        proxy_returns: Sequence[float] | None = None,
        benchmark_returns: Sequence[float] | None = None,
    ) -> dict:
        """Full risk report for *snapshot*.

        Args:
            snapshot: Holdings with current prices.
            returns_series: Historical periodic portfolio returns (fractional).
            proxy_returns: Stand-in series used only when no history is given.
            benchmark_returns: Market returns aligned with the series in use;
                enables beta, alpha and information ratio.

        Returns:
            Dict with risk_score (0-100, rounded), risk_level, metrics,
            ordered recommendations and allocation alerts.
        """
        total_value = snapshot.total_value
        allocation = snapshot.allocation_by_type()

        concentration_type, concentration = self._concentration(allocation)
        num_assets = len(snapshot.holdings)
        num_types = len(allocation)
        diversification = min(100, num_assets * 10 + num_types * 20)

        equity_pct = allocation.get(AssetType.STOCK.value, 0.0)
        bond_pct = allocation.get(AssetType.BOND.value, 0.0)

        if total_value > 0:
            score = min(100.0, equity_pct * 0.5 + concentration * 0.3 + (100 - diversification) * 0.2)
        else:
            # nothing invested, nothing at risk
            score = 0.0
        level = classify_risk(score)

        history = sm.as_floats(returns_series)
        proxy = sm.as_floats(proxy_returns)
        benchmark = sm.as_floats(benchmark_returns)
        if history:
            returns, source = history, "historical"
        elif proxy:
            returns, source = proxy, "proxy"
        else:
            returns, source = [], "none"

        metrics = {
            "total_value": total_value,
            "allocation": allocation,
            "equity_percentage": equity_pct,
            "bond_percentage": bond_pct,
            "gold_percentage": allocation.get(AssetType.GOLD.value, 0.0),
            "cash_percentage": allocation.get(AssetType.CASH.value, 0.0),
            "concentration_risk": concentration,
            "concentrated_type": concentration_type,
            "diversification_score": diversification,
            "num_assets": num_assets,
            "num_asset_types": num_types,
            "returns_source": source,
        }
        metrics.update(self._return_metrics(returns))
        if benchmark:
            metrics.update(self._benchmark_metrics(returns, benchmark))

        logger.debug("Risk score %.2f (%s) for %d holdings, returns=%s",
                     score, level, num_assets, source)

        return {
            "risk_score": _round_half_up(score),
            "risk_level": level,
            "metrics": metrics,
            "recommendations": self.generate_recommendations(
                score, allocation, concentration, concentration_type, diversification),
            "alerts": self.generate_alerts(allocation),
        }

    @staticmethod
    def generate_alerts(allocation: dict[str, float]) -> list[dict]:
        """Allocation thresholds worth flagging on their own, separate from the score."""
        alerts: list[dict] = []
        gold_pct = allocation.get(AssetType.GOLD.value, 0.0)
        if gold_pct > GOLD_ALERT_THRESHOLD:
            alerts.append({
                "type": "WARNING",
                "category": "GOLD_ALLOCATION",
                "message": f"Gold allocation ({gold_pct:.2f}%) exceeds "
                           f"{GOLD_ALERT_THRESHOLD:.0f}% threshold",
            })
        return alerts

    # ------------------------------------------------------------------
    #  Recommendations
    # ------------------------------------------------------------------
    @staticmethod
    def generate_recommendations(
        score: float,
        allocation: dict[str, float],
        concentration: float,
        concentration_type: str | None,
        diversification: float,
    ) -> list[dict]:
        """Threshold rules, evaluated in a fixed order; every matching rule fires."""
        recs: list[dict] = []
        equity_pct = allocation.get(AssetType.STOCK.value, 0.0)
        bond_pct = allocation.get(AssetType.BOND.value, 0.0)

        if score > 70:
            recs.append({
                "type": "HIGH_RISK",
                "severity": "HIGH",
                "message": "Your portfolio has high risk. Consider reducing equity exposure "
                           "and adding bonds or stable assets.",
            })
        if concentration > 40:
            recs.append({
                "type": "CONCENTRATION",
                "severity": "HIGH",
                "message": f"High concentration risk detected in {concentration_type} "
                           f"({concentration:.1f}%). Diversify across more assets.",
            })
        if diversification < 40:
            recs.append({
                "type": "DIVERSIFICATION",
                "severity": "MEDIUM",
                "message": "Low diversification. Consider adding more asset types and individual holdings.",
            })
        if equity_pct > 80:
            recs.append({
                "type": "ASSET_ALLOCATION",
                "severity": "MEDIUM",
                "message": f"Equity allocation is {equity_pct:.1f}%. Consider adding bonds for stability.",
            })
        if equity_pct < 20 and bond_pct > 60:
            recs.append({
                "type": "ASSET_ALLOCATION",
                "severity": "LOW",
                "message": "Very conservative allocation. Consider adding some growth assets "
                           "if appropriate for your goals.",
            })
        return recs

    # ==================================================================
    #  Internal helpers
    # ==================================================================

    @staticmethod
    def _concentration(allocation: dict[str, float]) -> tuple[str | None, float]:
        if not allocation:
            return None, 0.0
        top = max(allocation, key=allocation.get)
        return top, allocation[top]

    def _return_metrics(self, returns: list[float]) -> dict:
        drawdown = sm.max_drawdown(sm.compound_values(returns, DRAWDOWN_BASE_VALUE))
        return {
            "sharpe_ratio": sm.sharpe_ratio(returns, self.risk_free_rate),
            "sortino_ratio": sm.sortino_ratio(returns),
            "volatility": sm.annualized_volatility(returns),
            "var_95": sm.value_at_risk(returns, 0.95) * 100,
            "cvar_95": sm.conditional_var(returns, 0.95) * 100,
            "max_drawdown": drawdown["max_drawdown"],
        }

    def _benchmark_metrics(self, returns: list[float], benchmark: list[float]) -> dict:
        if len(returns) != len(benchmark):
            logger.warning("Benchmark has %d points vs %d portfolio returns; beta defaults to 1.0",
                           len(benchmark), len(returns))
        b = sm.beta(returns, benchmark)
        portfolio_annual = sm.mean(returns) * sm.TRADING_DAYS
        market_annual = sm.mean(benchmark) * sm.TRADING_DAYS
        return {
            "beta": b,
            "alpha": sm.alpha(portfolio_annual, market_annual, b, self.risk_free_rate),
            "information_ratio": sm.information_ratio(returns, benchmark),
        }
