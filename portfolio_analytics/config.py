"""Central configuration loader for Portfolio Analytics."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Project root is the parent of the portfolio_analytics/ package
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def load_settings() -> dict:
    """Load settings from configs/settings.yaml (empty dict when absent)."""
    settings_path = PROJECT_ROOT / "configs" / "settings.yaml"
    if not settings_path.exists():
        return {}
    with open(settings_path) as f:
        return yaml.safe_load(f) or {}


SETTINGS = load_settings()


# --- Paths ---
class Paths:
    ROOT = PROJECT_ROOT
    DATA_CACHE = Path(os.getenv("PORTFOLIO_CACHE_DIR", PROJECT_ROOT / "data" / "cache"))
    CONFIGS = PROJECT_ROOT / "configs"


# --- Analytics defaults (CLI only; the analytics core takes explicit arguments) ---
_analytics = SETTINGS.get("analytics", {})
_market = SETTINGS.get("market_data", {})


class Defaults:
    LOG_LEVEL = os.getenv("PORTFOLIO_LOG_LEVEL", SETTINGS.get("app", {}).get("log_level", "INFO"))
    RISK_FREE_RATE = float(_analytics.get("risk_free_rate", 0.05))
    DIVIDEND_YIELD = float(_analytics.get("dividend_yield", 0.02))
    REBALANCE_STRATEGY = _analytics.get("rebalance_strategy", "MODERATE")
    REBALANCE_FREQUENCY = _analytics.get("rebalance_frequency", "QUARTERLY")
    HISTORY_PERIOD = _market.get("history_period", "1y")
    BENCHMARK = _market.get("benchmark", "SPY")


# --- API Keys ---
class Keys:
    TWELVE_DATA = os.getenv("TWELVE_DATA_API_KEY", "")
