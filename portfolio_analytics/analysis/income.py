"""Income projections for dividend and coupon paying holdings."""

from __future__ import annotations

from portfolio_analytics.models import AssetType, PortfolioSnapshot, safe_div
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("income")

BOND_YIELD = 0.04
DEFAULT_DIVIDEND_YIELD = 0.02


class IncomeProjector:
    """Project annual, quarterly and monthly income from yield assumptions."""

    def calculate_income_projections(
        self,
        snapshot: PortfolioSnapshot,
        default_dividend_yield: float = DEFAULT_DIVIDEND_YIELD,
    ) -> dict:
        """Income per STOCK and BOND holding plus portfolio totals.

        Bonds use a flat 4% yield, stocks *default_dividend_yield*; gold and
        cash produce no income.  ``yield_rate`` and ``average_yield`` are
        percentages.
        """
        projections = []
        for h in snapshot.holdings:
            if h.asset_type is AssetType.BOND:
                rate = BOND_YIELD
            elif h.asset_type is AssetType.STOCK:
                rate = default_dividend_yield
            else:
                continue
            annual = h.market_value * rate
            projections.append({
                "symbol": h.symbol,
                "asset_type": h.asset_type.value,
                "value": h.market_value,
                "yield_rate": rate * 100,
                "annual_income": annual,
                "monthly_income": annual / 12,
                "quarterly_income": annual / 4,
            })

        total_annual = sum(p["annual_income"] for p in projections)
        logger.debug("Income: %d paying holdings, %.2f per year", len(projections), total_annual)
        return {
            "projections": projections,
            "total_annual_income": total_annual,
            "total_monthly_income": total_annual / 12,
            "total_quarterly_income": total_annual / 4,
            "average_yield": safe_div(total_annual, snapshot.total_value) * 100,
        }
