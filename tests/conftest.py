"""Shared pytest fixtures for the Portfolio Analytics test suite.

Provides in-memory portfolio snapshots and synthetic return series with a
fixed random seed.  All fixtures are independent of external APIs.
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from portfolio_analytics.models import (
    AssetType,
    BondDetails,
    GoldDetails,
    Holding,
    PortfolioSnapshot,
    StockDetails,
)


def _make_holding(symbol="AAA", asset_type="STOCK", quantity=10, purchase_price=100.0,
                 current_price=None, details=None):
    return Holding(symbol, AssetType.parse(asset_type), quantity, purchase_price, current_price, details)


# ---------------------------------------------------------------------------
# 1. Snapshots
# ---------------------------------------------------------------------------

@pytest.fixture
def make_holding():
    """Factory: make_holding(symbol, asset_type, quantity, purchase_price, current_price, details)."""
    return _make_holding


@pytest.fixture
def empty_snapshot():
    return PortfolioSnapshot()


@pytest.fixture
def single_stock_snapshot():
    """One stock bought at 100, now at 150 (value 1500)."""
    return PortfolioSnapshot([_make_holding("AAPL", "STOCK", 10, 100.0, 150.0)])


@pytest.fixture
def balanced_snapshot():
    """Four asset types, 10 000 total: STOCK 6000, BOND 3000, GOLD 800, CASH 200."""
    return PortfolioSnapshot([
        _make_holding("AAPL", "STOCK", 20, 100.0, 150.0),        # 3000, +50%
        _make_holding("MSFT", "STOCK", 10, 350.0, 300.0),        # 3000, -14.3%
        _make_holding("IEF", "BOND", 30, 100.0, 100.0),          # 3000, 0%
        _make_holding("GLD", "GOLD", 4, 180.0, 200.0),           # 800, +11.1%
        _make_holding("USD", "CASH", 200, 1.0),                  # 200, 0%
    ])


@pytest.fixture
def detailed_snapshot():
    """Holdings carrying type-specific payloads."""
    return PortfolioSnapshot([
        _make_holding("AAPL", "STOCK", 10, 100.0, 120.0,
                     StockDetails(sector="Technology", market_cap="LARGE", beta=1.2)),
        _make_holding("UST30", "BOND", 10, 100.0, 90.0,
                     BondDetails(maturity_date=date(2040, 1, 1), coupon_rate=5.0,
                                 face_value=100.0, credit_rating="AAA", bond_type="GOVERNMENT")),
        _make_holding("GOLD1", "GOLD", 1, 2000.0, 2000.0, GoldDetails(purity="24K", weight=31.1)),
    ])


# ---------------------------------------------------------------------------
# 2. Return series
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_returns():
    """Daily returns, 252 observations, seeded at 42."""
    np.random.seed(42)
    return list(np.random.normal(0.0004, 0.015, 252))


@pytest.fixture
def sample_prices():
    """Close-price DataFrame for two tickers over 60 business days."""
    np.random.seed(7)
    dates = pd.bdate_range(start="2024-01-02", periods=60)
    a = 100.0 * np.exp(np.cumsum(np.random.normal(0.0005, 0.01, 60)))
    b = 50.0 * np.exp(np.cumsum(np.random.normal(0.0002, 0.02, 60)))
    return {
        "AAPL": pd.DataFrame({"Close": a}, index=dates),
        "GLD": pd.DataFrame({"Close": b}, index=dates),
    }
