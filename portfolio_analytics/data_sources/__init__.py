"""Collaborators that assemble a portfolio snapshot: the portfolio file store and market data."""

from .market_data import MarketDataClient
from .portfolio_store import (
    build_returns_series,
    build_value_history,
    fetch_benchmark_returns,
    load_snapshot,
    refresh_prices,
)
