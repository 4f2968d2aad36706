"""Rebalancing - drift from target allocation, trade suggestions, tax-aware ordering."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Mapping

from portfolio_analytics.models import PortfolioSnapshot, safe_div
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("rebalancer")

SUGGESTION_DRIFT_THRESHOLD = 5.0      # percentage points
HIGH_PRIORITY_DRIFT = 10.0
REBALANCE_TOTAL_DRIFT = 10.0
TRANSACTION_FEE_RATE = 0.001          # 0.1 % of traded amount

STRATEGIES: dict[str, dict[str, float]] = {
    "CONSERVATIVE": {"STOCK": 30, "BOND": 50, "GOLD": 15, "CASH": 5},
    "MODERATE": {"STOCK": 60, "BOND": 30, "GOLD": 8, "CASH": 2},
    "AGGRESSIVE": {"STOCK": 80, "BOND": 15, "GOLD": 3, "CASH": 2},
    "BALANCED": {"STOCK": 50, "BOND": 40, "GOLD": 8, "CASH": 2},
}

SCHEDULES: dict[str, dict] = {
    "MONTHLY": {"days_interval": 30, "description": "Rebalance every month"},
    "QUARTERLY": {"days_interval": 90, "description": "Rebalance every quarter"},
    "SEMIANNUALLY": {"days_interval": 180, "description": "Rebalance twice per year"},
    "ANNUALLY": {"days_interval": 365, "description": "Rebalance once per year"},
}


class Rebalancer:
    """Compare a snapshot against a target allocation and propose trades."""

    # ----- 1. Drift and trade suggestions -------------------------------

    def calculate_rebalancing(
        self,
        snapshot: PortfolioSnapshot,
        target_allocation: Mapping[str, float],
    ) -> dict:
        """Trades needed to move *snapshot* toward *target_allocation*.

        Args:
            snapshot: Holdings with current prices.
            target_allocation: ``{asset_type_or_symbol: percent}``.

        Returns:
            Dict with needs_rebalancing, total_drift, current/target
            allocation, ordered suggestions and estimated_cost.
        """
        total_value = snapshot.total_value
        target = {str(k).upper(): float(v or 0) for k, v in (target_allocation or {}).items()}
        if total_value == 0:
            return {
                "needs_rebalancing": False,
                "total_drift": 0.0,
                "current_allocation": {},
                "target_allocation": target,
                "suggestions": [],
                "estimated_cost": 0.0,
            }

        current_allocation = snapshot.allocation_by_type()

        total_drift = 0.0
        suggestions: list[dict] = []
        for key, target_pct in target.items():
            current_pct = self._current_pct(snapshot, key, current_allocation, total_value)
            drift = current_pct - target_pct
            total_drift += abs(drift)

            if abs(drift) > SUGGESTION_DRIFT_THRESHOLD:
                target_value = target_pct / 100 * total_value
                current_value = current_pct / 100 * total_value
                difference = target_value - current_value
                suggestions.append({
                    "asset_type": key,
                    "current_pct": current_pct,
                    "target_pct": target_pct,
                    "drift": drift,
                    "action": "BUY" if difference > 0 else "SELL",
                    "amount": abs(difference),
                    "priority": "HIGH" if abs(drift) > HIGH_PRIORITY_DRIFT else "MEDIUM",
                })

        suggestions.sort(key=lambda s: (s["priority"] != "HIGH", -abs(s["drift"])))

        logger.debug("Rebalancing: total drift %.2f, %d suggestions", total_drift, len(suggestions))
        return {
            "needs_rebalancing": total_drift > REBALANCE_TOTAL_DRIFT,
            "total_drift": total_drift,
            "current_allocation": current_allocation,
            "target_allocation": target,
            "suggestions": suggestions,
            "estimated_cost": self.rebalancing_cost(suggestions),
        }

    @staticmethod
    def rebalancing_cost(suggestions: list[dict]) -> float:
        return sum(s["amount"] * TRANSACTION_FEE_RATE for s in suggestions)

    # ----- 2. Strategy presets ---------------------------------------------

    @staticmethod
    def generate_target_allocation(strategy: str = "MODERATE") -> dict[str, float]:
        """Preset allocation for a named strategy (unknown names -> MODERATE)."""
        preset = STRATEGIES.get(str(strategy).upper())
        if preset is None:
            logger.info("Unknown strategy %r, using MODERATE", strategy)
            preset = STRATEGIES["MODERATE"]
        return dict(preset)

    # ----- 3. Tax-aware rebalancing ---------------------------------------

    def calculate_tax_efficient_rebalancing(
        self,
        snapshot: PortfolioSnapshot,
        target_allocation: Mapping[str, float],
    ) -> dict:
        """Rebalancing plan that sells losing positions first.

        Each SELL suggestion carries the unrealized gain/loss of the positions
        it would sell (from their own cost basis) and the gain or loss that
        selling ``amount`` would realise pro rata.
        """
        plan = self.calculate_rebalancing(snapshot, target_allocation)
        if not plan["needs_rebalancing"]:
            return plan

        suggestions = []
        for s in plan["suggestions"]:
            if s["action"] != "SELL":
                suggestions.append(s)
                continue
            holdings = snapshot.holdings_for(s["asset_type"])
            cost = sum(h.cost_basis for h in holdings)
            value = sum(h.market_value for h in holdings)
            gain_pct = safe_div(value - cost, cost) * 100
            realized = s["amount"] * safe_div(value - cost, value)
            # break-even positions count as losses
            is_loss = gain_pct <= 0
            suggestions.append({
                **s,
                "estimated_gain_loss": gain_pct,
                "estimated_realized_gain": realized,
                "tax_impact": "TAX_LOSS" if is_loss else "TAXABLE_GAIN",
                "priority": "HIGH" if is_loss else s["priority"],
            })

        suggestions.sort(key=lambda s: (s.get("tax_impact") != "TAX_LOSS", -abs(s["drift"])))
        return {**plan, "suggestions": suggestions, "tax_optimized": True}

    # ----- 4. Schedule -----------------------------------------------------

    @staticmethod
    def generate_rebalancing_schedule(frequency: str = "QUARTERLY", as_of: datetime | None = None) -> dict:
        """Next rebalance date for a periodic schedule (unknown -> QUARTERLY)."""
        key = str(frequency).upper()
        if key not in SCHEDULES:
            key = "QUARTERLY"
        schedule = SCHEDULES[key]
        start = as_of or datetime.now()
        return {
            "frequency": key,
            **schedule,
            "next_rebalance_date": (start + timedelta(days=schedule["days_interval"])).isoformat(),
        }

    # ==================================================================
    #  Internal helpers
    # ==================================================================

    @staticmethod
    def _current_pct(
        snapshot: PortfolioSnapshot,
        key: str,
        allocation_by_type: dict[str, float],
        total_value: float,
    ) -> float:
        if key in allocation_by_type:
            return allocation_by_type[key]
        value = sum(h.market_value for h in snapshot.holdings_for(key))
        return safe_div(value, total_value) * 100
