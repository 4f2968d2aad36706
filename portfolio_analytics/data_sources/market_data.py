"""Market data client - latest prices and price history for holdings.

Primary: yfinance | Fallback: TwelveData REST API
"""

import pandas as pd
import requests
import yfinance as yf

from portfolio_analytics.config import Keys
from portfolio_analytics.utils.cache import DataCache
from portfolio_analytics.utils.logger import setup_logger

logger = setup_logger("market_data")

# TwelveData period -> approximate trading days for outputsize
_PERIOD_TO_DAYS = {
    "5d": 5, "1mo": 22, "3mo": 63, "6mo": 126,
    "1y": 252, "2y": 504, "5y": 1260, "10y": 2520, "max": 5000,
}


def _fetch_twelvedata_history(ticker: str, period: str = "1y") -> pd.DataFrame:
    """Daily closes from TwelveData, used when yfinance returns nothing."""
    if not Keys.TWELVE_DATA:
        logger.debug("No TwelveData API key, skipping fallback")
        return pd.DataFrame()
    try:
        resp = requests.get(
            "https://api.twelvedata.com/time_series",
            params={
                "symbol": ticker,
                "interval": "1day",
                "outputsize": _PERIOD_TO_DAYS.get(period, 252),
                "apikey": Keys.TWELVE_DATA,
                "format": "JSON",
            },
            timeout=30,
        )
        data = resp.json()
        if data.get("status") == "error" or not data.get("values"):
            logger.warning("TwelveData returned no data for %s: %s", ticker, data.get("message", ""))
            return pd.DataFrame()

        df = pd.DataFrame(data["values"])
        df["datetime"] = pd.to_datetime(df["datetime"])
        df = df.set_index("datetime").sort_index().rename(columns={"close": "Close"})
        df["Close"] = pd.to_numeric(df["Close"], errors="coerce")
        return df[["Close"]].dropna()
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("TwelveData fetch failed for %s: %s", ticker, e)
        return pd.DataFrame()


class MarketDataClient:
    """Fetch latest and historical prices."""

    def __init__(self, history_cache: DataCache | None = None, quote_cache: DataCache | None = None):
        self.history_cache = history_cache or DataCache("price_historical")
        self.quote_cache = quote_cache or DataCache("quotes")

    def get_price_history(self, ticker: str, period: str = "1y") -> pd.DataFrame:
        """Daily price history (at least a ``Close`` column) for a ticker.

        Args:
            ticker: Market symbol (e.g. "AAPL", "GLD")
            period: Data period - 5d,1mo,3mo,6mo,1y,2y,5y,10y,max
        """
        cache_key = f"{ticker}_{period}"
        cached = self.history_cache.get_df(cache_key)
        if cached is not None:
            if "Close" in cached.columns and not cached.empty:
                logger.debug("Cache hit: %s", cache_key)
                return cached
            logger.warning("Cached history for %s has no closes, refetching", cache_key)
            self.history_cache.invalidate(cache_key)

        logger.info("Fetching price history: %s (period=%s)", ticker, period)
        try:
            df = yf.Ticker(ticker).history(period=period)
        except Exception as e:
            logger.warning("yfinance history failed for %s: %s", ticker, e)
            df = pd.DataFrame()

        if df is None or df.empty:
            df = _fetch_twelvedata_history(ticker, period)

        if not df.empty:
            self.history_cache.set_df(cache_key, df)
        return df

    def get_latest_price(self, ticker: str) -> float | None:
        """Most recent close, or None when no source has data."""
        cached = self.quote_cache.get(ticker)
        if cached is not None:
            if isinstance(cached, dict) and isinstance(cached.get("price"), (int, float)):
                return float(cached["price"])
            self.quote_cache.invalidate(ticker)

        df = self.get_price_history(ticker, period="5d")
        if df.empty or "Close" not in df.columns:
            logger.warning("No recent price for %s", ticker)
            return None
        price = float(df["Close"].dropna().iloc[-1])
        self.quote_cache.set(ticker, {"ticker": ticker, "price": price})
        return price

    def get_multiple(self, tickers: list[str], period: str = "1y") -> dict[str, pd.DataFrame]:
        """Fetch price history for multiple tickers."""
        return {t: self.get_price_history(t, period=period) for t in tickers}
