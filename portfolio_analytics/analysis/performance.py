"""Performance analysis - returns, per-holding and per-type breakdowns, attribution, insights."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from portfolio_analytics.analysis import stat_math as sm
from portfolio_analytics.models import PortfolioSnapshot, safe_div
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("performance")

TOP_N = 5


class PerformanceAnalyzer:
    """Analyse realised performance of a portfolio snapshot."""

    # ----- main entry point ------------------------------------------------

    def analyze_performance(
        self,
        snapshot: PortfolioSnapshot,
        historical_values: Sequence[float] | None = None,
        benchmark_returns: Sequence[float] | None = None,
    ) -> dict:
        """Full performance report.

        Args:
            snapshot: Holdings with current prices.
            historical_values: Chronological total portfolio values, used for
                the time-weighted return.
            benchmark_returns: Fractional benchmark returns; when given, the
                report carries a benchmark comparison.

        Returns:
            Dict with summary, asset_performance, type_performance,
            top/bottom performers, attribution, insights and
            benchmark_comparison (None without a benchmark).
        """
        total_cost = snapshot.total_cost
        current_value = snapshot.total_value
        absolute_return = current_value - total_cost
        percent_return = safe_div(absolute_return, total_cost) * 100

        assets = self.asset_performance(snapshot)
        winners = [a for a in assets if a["gain_pct"] > 0]
        losers = [a for a in assets if a["gain_pct"] < 0]

        summary = {
            "total_cost": total_cost,
            "current_value": current_value,
            "absolute_return": absolute_return,
            "percent_return": percent_return,
            "time_weighted_return": self.time_weighted_return(historical_values),
            "money_weighted_return": self.money_weighted_return(snapshot),
            "num_winners": len(winners),
            "num_losers": len(losers),
            "win_rate": safe_div(len(winners), len(snapshot.holdings)) * 100,
        }
        type_performance = self.type_performance(snapshot)
        attribution = self.calculate_attribution(snapshot)

        benchmark = None
        benchmark_series = sm.as_floats(benchmark_returns)
        if benchmark_series:
            benchmark = self.benchmark_comparison(percent_return, benchmark_series)

        logger.debug("Performance: %d holdings, return=%.2f%%, win rate=%.1f%%",
                     len(assets), percent_return, summary["win_rate"])

        return {
            "summary": summary,
            "asset_performance": assets,
            "type_performance": type_performance,
            "top_performers": assets[:TOP_N],
            "bottom_performers": assets[-TOP_N:][::-1],
            "attribution": attribution,
            "benchmark_comparison": benchmark,
            "insights": self.generate_insights(summary, type_performance, attribution),
        }

    # ----- returns -------------------------------------------------------------

    @staticmethod
    def time_weighted_return(historical_values: Sequence[float] | None) -> float:
        """Compounded period returns of a value series, in percent."""
        values = sm.as_floats(historical_values)
        if len(values) < 2:
            return 0.0
        returns = sm.period_returns(values)
        if not returns:
            return 0.0
        return (float(np.prod(1 + np.asarray(returns))) - 1) * 100

    @staticmethod
    def money_weighted_return(snapshot: PortfolioSnapshot) -> float:
        """Simplified money-weighted return: overall gain over total invested.

        Not an IRR; cash-flow timing is ignored.
        """
        return safe_div(snapshot.total_value - snapshot.total_cost, snapshot.total_cost) * 100

    # ----- breakdowns ----------------------------------------------------------

    @staticmethod
    def asset_performance(snapshot: PortfolioSnapshot) -> list[dict]:
        """Per-holding performance sorted by gain % (best first, stable)."""
        rows = [
            {
                "symbol": h.symbol,
                "asset_type": h.asset_type.value,
                "cost": h.cost_basis,
                "value": h.market_value,
                "gain": h.gain,
                "gain_pct": h.gain_pct,
                "quantity": h.quantity,
                "purchase_price": h.purchase_price,
                "current_price": h.current_price,
            }
            for h in snapshot.holdings
        ]
        rows.sort(key=lambda r: r["gain_pct"], reverse=True)
        return rows

    @staticmethod
    def type_performance(snapshot: PortfolioSnapshot) -> dict[str, dict]:
        perf: dict[str, dict] = {}
        for h in snapshot.holdings:
            row = perf.setdefault(h.asset_type.value, {"cost": 0.0, "value": 0.0, "count": 0})
            row["cost"] += h.cost_basis
            row["value"] += h.market_value
            row["count"] += 1
        for row in perf.values():
            row["gain"] = row["value"] - row["cost"]
            row["gain_pct"] = safe_div(row["gain"], row["cost"]) * 100
        return perf

    @staticmethod
    def calculate_attribution(snapshot: PortfolioSnapshot) -> list[dict]:
        """Contribution of each holding to the portfolio return, largest first."""
        total_value = snapshot.total_value
        if total_value == 0:
            return []
        rows = [
            {
                "symbol": h.symbol,
                "asset_type": h.asset_type.value,
                "weight": h.market_value / total_value * 100,
                "return": h.gain_pct,
                "contribution": h.gain / total_value * 100,
            }
            for h in snapshot.holdings
        ]
        rows.sort(key=lambda r: r["contribution"], reverse=True)
        return rows

    @staticmethod
    def benchmark_comparison(percent_return: float, benchmark_returns: Sequence[float]) -> dict:
        benchmark_return = sm.mean(benchmark_returns) * 100
        outperformance = percent_return - benchmark_return
        return {
            "benchmark_return": benchmark_return,
            "portfolio_return": percent_return,
            "outperformance": outperformance,
            "is_outperforming": outperformance > 0,
        }

    # ----- insights ------------------------------------------------------------

    @staticmethod
    def generate_insights(summary: dict, type_performance: dict, attribution: list[dict]) -> list[dict]:
        insights: list[dict] = []

        pct = summary["percent_return"]
        if pct > 10:
            insights.append({"type": "POSITIVE", "category": "OVERALL",
                             "message": f"Strong performance with {pct:.2f}% return."})
        elif pct < -5:
            insights.append({"type": "NEGATIVE", "category": "OVERALL",
                             "message": f"Portfolio is down {abs(pct):.2f}%. Consider reviewing your strategy."})

        win_rate = summary["win_rate"]
        if win_rate > 70:
            insights.append({"type": "POSITIVE", "category": "WIN_RATE",
                             "message": f"Excellent win rate of {win_rate:.1f}%. Most investments are profitable."})
        elif win_rate < 40:
            insights.append({"type": "WARNING", "category": "WIN_RATE",
                             "message": f"Low win rate of {win_rate:.1f}%. Consider reviewing losing positions."})

        for asset_type, data in type_performance.items():
            if data["gain_pct"] > 15:
                insights.append({"type": "POSITIVE", "category": "ASSET_TYPE",
                                 "message": f"{asset_type} investments performing well with "
                                            f"{data['gain_pct']:.2f}% return."})
            elif data["gain_pct"] < -10:
                insights.append({"type": "NEGATIVE", "category": "ASSET_TYPE",
                                 "message": f"{asset_type} investments underperforming with "
                                            f"{data['gain_pct']:.2f}% loss."})

        if attribution:
            top, bottom = attribution[0], attribution[-1]
            if top["contribution"] > 5:
                insights.append({"type": "INFO", "category": "ATTRIBUTION",
                                 "message": f"{top['symbol']} is the top contributor, adding "
                                            f"{top['contribution']:.2f}% to portfolio returns."})
            if bottom["contribution"] < -3:
                insights.append({"type": "WARNING", "category": "ATTRIBUTION",
                                 "message": f"{bottom['symbol']} is dragging down returns by "
                                            f"{abs(bottom['contribution']):.2f}%."})
        return insights
