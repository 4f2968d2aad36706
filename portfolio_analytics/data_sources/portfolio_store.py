"""Portfolio file store and snapshot assembly.

Reads a YAML/JSON portfolio file into a ``PortfolioSnapshot``, refreshes
prices from the market data client, and derives the return / value series
the analytics core consumes.  Upstream failures are resolved here so the
analytics always receive a valid snapshot.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import yaml

from portfolio_analytics.data_sources.market_data import MarketDataClient
from portfolio_analytics.models import AssetType, PortfolioSnapshot
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("portfolio_store")

# Holdings with no tradable market symbol
_UNPRICED_TYPES = {AssetType.CASH}


def load_snapshot(path: str | Path) -> PortfolioSnapshot:
    """Load a portfolio file (YAML or JSON) into a snapshot."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping with a 'holdings' list")
    snapshot = PortfolioSnapshot.from_dict(data)
    logger.info("Loaded %d holdings from %s", len(snapshot.holdings), path)
    return snapshot


def refresh_prices(snapshot: PortfolioSnapshot, market: MarketDataClient) -> PortfolioSnapshot:
    """New snapshot with latest market prices; failures keep the existing price."""
    prices: dict[str, float] = {}
    for h in snapshot.holdings:
        if h.asset_type in _UNPRICED_TYPES or h.symbol in prices:
            continue
        try:
            price = market.get_latest_price(h.symbol)
        except Exception as exc:
            logger.warning("Price refresh failed for %s: %s", h.symbol, exc)
            continue
        if price is None or price < 0:
            logger.warning("No usable price for %s, keeping %.4f", h.symbol, h.current_price)
            continue
        prices[h.symbol] = price
    return snapshot.with_prices(prices)


def _close_frame(snapshot: PortfolioSnapshot, market: MarketDataClient, period: str) -> pd.DataFrame:
    closes: dict[str, pd.Series] = {}
    for h in snapshot.holdings:
        if h.asset_type in _UNPRICED_TYPES or h.symbol in closes:
            continue
        try:
            df = market.get_price_history(h.symbol, period=period)
        except Exception as exc:
            logger.warning("History fetch failed for %s: %s", h.symbol, exc)
            continue
        if df is None or df.empty or "Close" not in df.columns:
            logger.warning("Empty price history for %s", h.symbol)
            continue
        closes[h.symbol] = df["Close"]
    if not closes:
        return pd.DataFrame()
    return pd.concat(closes, axis=1, join="inner").dropna()


def build_returns_series(
    snapshot: PortfolioSnapshot,
    market: MarketDataClient,
    period: str = "1y",
) -> list[float]:
    """Daily portfolio returns, weighting each priced holding by market value.

    Holdings without history are dropped and the remaining weights
    renormalised; cash is left out.
    """
    closes = _close_frame(snapshot, market, period)
    if closes.empty:
        return []

    values = {s: 0.0 for s in closes.columns}
    for h in snapshot.holdings:
        if h.symbol in values:
            values[h.symbol] += h.market_value
    weights = np.array([values[s] for s in closes.columns], dtype=float)
    if weights.sum() <= 0:
        return []
    weights = weights / weights.sum()

    returns = closes.pct_change().dropna()
    return [float(r) for r in (returns * weights).sum(axis=1)]


def build_value_history(
    snapshot: PortfolioSnapshot,
    market: MarketDataClient,
    period: str = "1y",
) -> list[float]:
    """Chronological total value of the current holdings over *period*.

    Unpriced holdings (and holdings without history) are carried at their
    current market value.
    """
    closes = _close_frame(snapshot, market, period)
    if closes.empty:
        return []

    quantities = pd.Series(0.0, index=closes.columns)
    static_value = 0.0
    for h in snapshot.holdings:
        if h.symbol in quantities.index:
            quantities[h.symbol] += h.quantity
        else:
            static_value += h.market_value
    return [float(v) for v in (closes * quantities).sum(axis=1) + static_value]


def fetch_benchmark_returns(market: MarketDataClient, ticker: str = "SPY", period: str = "1y") -> list[float]:
    df = market.get_price_history(ticker, period=period)
    if df is None or df.empty:
        logger.warning("No benchmark history for %s", ticker)
        return []
    return [float(r) for r in df["Close"].pct_change().dropna()]
