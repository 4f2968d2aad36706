"""Statistical primitives over return and value series.

Every function takes a plain sequence of floats (fractional returns, e.g.
0.01 = 1%, or portfolio values) and is total: empty or degenerate input
yields 0 (or a neutral 1.0 for beta) instead of raising or returning NaN.
Variances use the population divisor n throughout.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

TRADING_DAYS = 252
DEFAULT_RISK_FREE_RATE = 0.05


def _as_array(xs: Sequence[float] | None) -> np.ndarray:
    if xs is None:
        return np.array([], dtype=float)
    return np.asarray(list(xs), dtype=float)


def as_floats(xs: Sequence[float] | None) -> list[float]:
    """Plain list of floats from a list, numpy array or pandas Series (None -> [])."""
    return [float(x) for x in _as_array(xs)]


def mean(xs: Sequence[float]) -> float:
    arr = _as_array(xs)
    if arr.size == 0:
        return 0.0
    return float(arr.mean())


def variance(xs: Sequence[float]) -> float:
    arr = _as_array(xs)
    if arr.size == 0:
        return 0.0
    return float(np.var(arr))


def std_dev(xs: Sequence[float]) -> float:
    return math.sqrt(variance(xs))


def _tail_index(n: int, confidence: float) -> int:
    return int(math.floor((1 - confidence) * n))


def value_at_risk(returns: Sequence[float], confidence: float = 0.95) -> float:
    """Historical VaR: magnitude of the return at the (1 - confidence) rank."""
    ordered = np.sort(_as_array(returns))
    index = _tail_index(ordered.size, confidence)
    if ordered.size == 0 or not 0 <= index < ordered.size:
        return 0.0
    return abs(float(ordered[index]))


def conditional_var(returns: Sequence[float], confidence: float = 0.95) -> float:
    """Expected shortfall: mean magnitude of the returns strictly below the VaR rank.

    Samples too small to have any observation below the rank give 0.
    """
    ordered = np.sort(_as_array(returns))
    tail = ordered[: max(_tail_index(ordered.size, confidence), 0)]
    if tail.size == 0:
        return 0.0
    return abs(float(tail.mean()))


def sharpe_ratio(returns: Sequence[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE) -> float:
    """Annualized Sharpe ratio assuming daily returns."""
    ann_return = mean(returns) * TRADING_DAYS
    ann_std = std_dev(returns) * math.sqrt(TRADING_DAYS)
    if ann_std == 0:
        return 0.0
    return (ann_return - risk_free_rate) / ann_std


def sortino_ratio(returns: Sequence[float], target: float = 0.0) -> float:
    """Sortino ratio (not annualized).

    The downside variance sums squared shortfalls below *target* but divides
    by the full sample size, not by the number of downside observations.
    """
    arr = _as_array(returns)
    if arr.size == 0:
        return 0.0
    downside = arr[arr < target]
    downside_dev = math.sqrt(float(np.sum((downside - target) ** 2)) / arr.size)
    if downside_dev == 0:
        return 0.0
    return (float(arr.mean()) - target) / downside_dev


def annualized_volatility(returns: Sequence[float]) -> float:
    """Standard deviation scaled to a year, in percent."""
    return std_dev(returns) * math.sqrt(TRADING_DAYS) * 100


def max_drawdown(values: Sequence[float]) -> dict:
    """Largest peak-to-trough decline of a value series.

    Returns max_drawdown (percent), the running peak at the worst point, the
    trough value and their indices.  Empty input -> all zeros.
    """
    arr = _as_array(values)
    result = {"max_drawdown": 0.0, "peak": 0.0, "trough": 0.0, "peak_index": 0, "trough_index": 0}
    if arr.size == 0:
        return result

    worst = 0.0
    peak = float(arr[0])
    peak_index = 0
    worst_peak, worst_peak_index, trough_index = peak, 0, 0
    for i, value in enumerate(arr):
        value = float(value)
        if value > peak:
            peak, peak_index = value, i
        drawdown = (peak - value) / peak if peak > 0 else 0.0
        if drawdown > worst:
            worst = drawdown
            worst_peak, worst_peak_index, trough_index = peak, peak_index, i

    result.update(
        max_drawdown=worst * 100,
        peak=worst_peak if worst > 0 else peak,
        trough=float(arr[trough_index]),
        peak_index=worst_peak_index if worst > 0 else peak_index,
        trough_index=trough_index,
    )
    return result


def covariance(xs: Sequence[float], ys: Sequence[float]) -> float:
    a, b = _as_array(xs), _as_array(ys)
    if a.size == 0 or a.size != b.size:
        return 0.0
    return float(np.mean((a - a.mean()) * (b - b.mean())))


def beta(portfolio_returns: Sequence[float], market_returns: Sequence[float]) -> float:
    """Covariance over market variance; 1.0 (neutral) when undefined."""
    p, m = _as_array(portfolio_returns), _as_array(market_returns)
    if p.size == 0 or p.size != m.size:
        return 1.0
    market_var = float(np.var(m))
    if market_var == 0:
        return 1.0
    return covariance(p, m) / market_var


def alpha(
    portfolio_return: float,
    market_return: float,
    beta_value: float,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> float:
    """Jensen's alpha: realised return minus the CAPM expected return."""
    expected = risk_free_rate + beta_value * (market_return - risk_free_rate)
    return portfolio_return - expected


def information_ratio(portfolio_returns: Sequence[float], benchmark_returns: Sequence[float]) -> float:
    p, b = _as_array(portfolio_returns), _as_array(benchmark_returns)
    if p.size == 0 or p.size != b.size:
        return 0.0
    active = p - b
    tracking_error = float(np.std(active))
    if tracking_error == 0:
        return 0.0
    return float(active.mean()) / tracking_error


def period_returns(values: Sequence[float]) -> list[float]:
    """Simple returns between consecutive values, skipping non-positive bases."""
    arr = _as_array(values)
    return [
        float((arr[i] - arr[i - 1]) / arr[i - 1])
        for i in range(1, arr.size)
        if arr[i - 1] > 0
    ]


def compound_values(returns: Sequence[float], start: float = 100_000.0) -> list[float]:
    """Value path obtained by compounding *returns* from *start*."""
    arr = _as_array(returns)
    if arr.size == 0:
        return []
    return [float(v) for v in start * np.cumprod(1 + arr)]
