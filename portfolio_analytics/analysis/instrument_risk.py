"""Instrument-level risk - per-holding risk levels, factor breakdown, stress scenarios.

Uses the type-specific payload of each holding (stock beta and market cap,
bond maturity and credit rating).  Holdings without a payload fall back to
neutral inputs.  Per-holding rows also surface the payload figures: dividend
income, coupon and yield to maturity, gold purity value and storage cost.
"""

from __future__ import annotations

from datetime import date

from portfolio_analytics.models import (
    AssetType, BondDetails, GoldDetails, Holding, PortfolioSnapshot, StockDetails, safe_div,
)
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("instrument_risk")

MARKET_CAP_RISK = {"LARGE": 0.3, "MID": 0.5, "SMALL": 0.8}
CREDIT_RATING_RISK = {
    "AAA": 0.1, "AA": 0.2, "A": 0.3, "BBB": 0.4, "BB": 0.6,
    "B": 0.7, "CCC": 0.8, "CC": 0.9, "C": 1.0,
}
NEUTRAL_RISK = 0.5
SECTOR_RISK = NEUTRAL_RISK      # no per-sector model
GOLD_RISK = 0.3
CASH_RISK = 0.0
MAX_MATURITY_YEARS = 30
HURDLE_RATE = 0.02

STRESS_SCENARIOS: dict[str, float] = {
    "MARKET_CRASH": -0.30,
    "MODERATE_DECLINE": -0.15,
    "INTEREST_RATE_HIKE": 0.02,
    "CURRENCY_SHOCK": -0.10,
}


def maturity_risk(details: BondDetails | None, as_of: date) -> float:
    """Years to maturity scaled to a 30-year maximum, in [0, 1]."""
    if details is None or details.maturity_date is None:
        return NEUTRAL_RISK
    return min(max(details.years_to_maturity(as_of), 0.0) / MAX_MATURITY_YEARS, 1.0)


def credit_rating_risk(details: BondDetails | None) -> float:
    if details is None:
        return NEUTRAL_RISK
    return CREDIT_RATING_RISK.get(details.credit_rating.upper(), NEUTRAL_RISK)


class InstrumentRiskAssessor:
    """Value-weighted risk from each instrument's own characteristics."""

    def __init__(self, as_of: date | None = None) -> None:
        self.as_of = as_of or date.today()

    def assess(self, snapshot: PortfolioSnapshot) -> dict:
        total_risk = self.total_risk(snapshot)
        logger.debug("Instrument risk %.3f over %d holdings (as of %s)",
                     total_risk, len(snapshot.holdings), self.as_of)
        return {
            "total_risk": total_risk,
            "risk_breakdown": self.risk_breakdown(snapshot),
            "diversification_score": self.diversification_score(snapshot),
            "risk_adjusted_return": self.risk_adjusted_return(snapshot, total_risk),
            "stress_test_results": self.stress_test(snapshot, total_risk),
            "holdings": [self._holding_row(h) for h in snapshot.holdings],
        }

    # ----- per holding ---------------------------------------------------------

    def holding_risk_level(self, holding: Holding) -> float:
        details = holding.details
        if holding.asset_type is AssetType.STOCK:
            stock = details if isinstance(details, StockDetails) else StockDetails()
            cap_risk = MARKET_CAP_RISK.get(stock.market_cap.upper(), NEUTRAL_RISK)
            return stock.beta * 0.4 + cap_risk * 0.3 + SECTOR_RISK * 0.3
        if holding.asset_type is AssetType.BOND:
            bond = details if isinstance(details, BondDetails) else None
            return maturity_risk(bond, self.as_of) * 0.5 + credit_rating_risk(bond) * 0.5
        if holding.asset_type is AssetType.GOLD:
            return GOLD_RISK
        return CASH_RISK

    def _holding_row(self, holding: Holding) -> dict:
        row = {
            "symbol": holding.symbol,
            "asset_type": holding.asset_type.value,
            "risk_level": self.holding_risk_level(holding),
        }
        details = holding.details
        value = holding.market_value
        if isinstance(details, StockDetails):
            row.update({
                "sector": details.sector,
                "market_cap": details.market_cap,
                "beta": details.beta,
                "pe_ratio": details.pe_ratio,
                "dividend_income": details.dividend_income(value),
            })
        elif isinstance(details, BondDetails):
            row.update({
                "credit_risk": details.credit_risk_label(),
                "annual_coupon": details.coupon_payment() * holding.quantity,
                "years_to_maturity": max(details.years_to_maturity(self.as_of), 0.0),
                "yield_to_maturity": details.yield_to_maturity(holding.purchase_price, self.as_of),
            })
        elif isinstance(details, GoldDetails):
            row.update({
                "purity": details.purity,
                "weight": details.weight,
                "purity_value": details.purity_value(value),
                "storage_cost": details.storage_cost(value),
            })
        return row

    # ----- portfolio level -----------------------------------------------------

    def total_risk(self, snapshot: PortfolioSnapshot) -> float:
        total_value = snapshot.total_value
        return sum(
            self.holding_risk_level(h) * safe_div(h.market_value, total_value)
            for h in snapshot.holdings
        )

    def risk_breakdown(self, snapshot: PortfolioSnapshot) -> dict[str, float]:
        holdings = snapshot.holdings
        bonds = [h.details if isinstance(h.details, BondDetails) else None
                 for h in holdings if h.asset_type is AssetType.BOND]

        market = [
            (h.details.beta if isinstance(h.details, StockDetails) else StockDetails().beta)
            if h.asset_type is AssetType.STOCK else NEUTRAL_RISK
            for h in holdings
        ]
        return {
            "MARKET_RISK": safe_div(sum(market), len(market)),
            "CREDIT_RISK": safe_div(sum(credit_rating_risk(b) for b in bonds), len(bonds)),
            "INTEREST_RATE_RISK": safe_div(sum(maturity_risk(b, self.as_of) for b in bonds), len(bonds)),
            "CONCENTRATION_RISK": 1 - self.diversification_score(snapshot) if holdings else 0.0,
        }

    @staticmethod
    def diversification_score(snapshot: PortfolioSnapshot) -> float:
        """1 - Herfindahl-Hirschman index of asset-type weights."""
        total_value = snapshot.total_value
        if total_value == 0:
            return 0.0
        hhi = sum((v / total_value) ** 2 for v in snapshot.value_by_type().values())
        return 1 - hhi

    def risk_adjusted_return(self, snapshot: PortfolioSnapshot, total_risk: float | None = None) -> float:
        risk = self.total_risk(snapshot) if total_risk is None else total_risk
        total_return = safe_div(snapshot.total_value - snapshot.total_cost, snapshot.total_value)
        return safe_div(total_return - HURDLE_RATE, risk)

    def stress_test(self, snapshot: PortfolioSnapshot, total_risk: float | None = None) -> dict[str, dict]:
        """Uniform shock of the whole portfolio under each scenario."""
        risk = self.total_risk(snapshot) if total_risk is None else total_risk
        total_value = snapshot.total_value
        results = {}
        for name, impact in STRESS_SCENARIOS.items():
            results[name] = {
                "value_impact": total_value * impact,
                "percentage_impact": impact * 100,
                "new_risk_level": risk * (1 + abs(impact)),
            }
        return results
