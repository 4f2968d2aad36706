"""Tests for portfolio_analytics.analysis.stat_math -- moments, VaR/CVaR, ratios, drawdown, beta."""

import math

import numpy as np
import pandas as pd
import pytest

from portfolio_analytics.analysis import stat_math as sm


# ---------------------------------------------------------------------------
# Tests for mean / variance / std-dev
# ---------------------------------------------------------------------------

class TestMoments:

    def test_empty_inputs_are_zero(self):
        assert sm.mean([]) == 0.0
        assert sm.variance([]) == 0.0
        assert sm.std_dev([]) == 0.0

    def test_population_variance(self):
        # deviations from mean 2.5: 2.25, 0.25, 0.25, 2.25 -> 5 / 4
        assert sm.variance([1, 2, 3, 4]) == pytest.approx(1.25)
        assert sm.std_dev([1, 2, 3, 4]) == pytest.approx(math.sqrt(1.25))

    def test_mean(self):
        assert sm.mean([0.01, -0.02, 0.04]) == pytest.approx(0.01)


# ---------------------------------------------------------------------------
# Tests for VaR / CVaR
# ---------------------------------------------------------------------------

class TestValueAtRisk:

    def test_known_five_point_series(self):
        # index = floor(0.05 * 5) = 0 -> worst return
        returns = [-0.05, -0.03, -0.01, 0.02, 0.04]
        assert sm.value_at_risk(returns, 0.95) == pytest.approx(0.05)

    def test_unsorted_input_is_sorted(self):
        returns = [0.04, -0.01, 0.02, -0.05, -0.03]
        assert sm.value_at_risk(returns, 0.95) == pytest.approx(0.05)

    def test_index_moves_with_sample_size(self):
        returns = [-0.10, -0.08] + [0.01] * 38     # n=40 -> index 1 or 2
        index = int(math.floor((1 - 0.95) * 40))
        expected = abs(sorted(returns)[index])
        assert sm.value_at_risk(returns, 0.95) == pytest.approx(expected)

    def test_empty_returns_zero(self):
        assert sm.value_at_risk([], 0.95) == 0.0

    def test_reported_as_magnitude(self):
        assert sm.value_at_risk([-0.2, 0.1], 0.95) >= 0

    def test_full_confidence_is_worst_return(self):
        assert sm.value_at_risk([0.03, -0.07, 0.01], 1.0) == pytest.approx(0.07)

    def test_zero_confidence_index_past_end(self):
        # index = floor(1.0 * n) = n
        assert sm.value_at_risk([0.03, -0.07, 0.01], 0.0) == 0.0


class TestConditionalVaR:

    def test_small_sample_has_empty_tail(self):
        # index = floor(0.05 * 5) = 0 -> nothing strictly below the VaR rank
        returns = [-0.05, -0.03, -0.01, 0.02, 0.04]
        assert sm.conditional_var(returns, 0.95) == 0.0

    def test_tail_excludes_var_observation(self):
        returns = [-0.06, -0.04, -0.02] + [0.01] * 17   # n=20 -> index 1
        assert sm.conditional_var(returns, 0.95) == pytest.approx(0.06)

    def test_averages_returns_below_rank(self, sample_returns):
        index = int(math.floor((1 - 0.95) * len(sample_returns)))
        tail = sorted(sample_returns)[:index]
        assert len(tail) == 12
        assert sm.conditional_var(sample_returns) == pytest.approx(abs(np.mean(tail)))

    def test_cvar_at_least_var(self, sample_returns):
        assert sm.conditional_var(sample_returns) >= sm.value_at_risk(sample_returns) - 1e-12

    def test_full_confidence_has_empty_tail(self):
        assert sm.conditional_var([-0.05, 0.01, 0.02], 1.0) == 0.0

    def test_zero_confidence_averages_everything(self):
        returns = [-0.04, -0.02, 0.0, 0.02]
        assert sm.conditional_var(returns, 0.0) == pytest.approx(0.01)

    def test_empty_returns_zero(self):
        assert sm.conditional_var([]) == 0.0


# ---------------------------------------------------------------------------
# Tests for Sharpe / Sortino / volatility
# ---------------------------------------------------------------------------

class TestSharpeRatio:

    def test_empty_is_zero(self):
        assert sm.sharpe_ratio([], 0.05) == 0.0

    def test_constant_returns_zero_std(self):
        assert sm.sharpe_ratio([0.0] * 50) == 0.0

    def test_annualized_formula(self, sample_returns):
        arr = np.array(sample_returns)
        expected = (arr.mean() * 252 - 0.05) / (arr.std() * np.sqrt(252))
        assert sm.sharpe_ratio(sample_returns, 0.05) == pytest.approx(expected)


class TestSortinoRatio:

    def test_divides_by_full_sample_size(self):
        returns = [0.02, -0.01, 0.03, -0.03]
        downside_dev = math.sqrt((0.01 ** 2 + 0.03 ** 2) / 4)
        expected = np.mean(returns) / downside_dev
        assert sm.sortino_ratio(returns) == pytest.approx(expected)

    def test_no_downside_is_zero(self):
        assert sm.sortino_ratio([0.01, 0.02, 0.03]) == 0.0

    def test_custom_target(self):
        returns = [0.01, 0.02]
        # both below target 0.03: deviations 0.02, 0.01
        downside_dev = math.sqrt((0.02 ** 2 + 0.01 ** 2) / 2)
        assert sm.sortino_ratio(returns, 0.03) == pytest.approx((0.015 - 0.03) / downside_dev)

    def test_empty_is_zero(self):
        assert sm.sortino_ratio([]) == 0.0


class TestVolatility:

    def test_annualized_percent(self, sample_returns):
        expected = np.std(sample_returns) * np.sqrt(252) * 100
        assert sm.annualized_volatility(sample_returns) == pytest.approx(expected)

    def test_empty_is_zero(self):
        assert sm.annualized_volatility([]) == 0.0


# ---------------------------------------------------------------------------
# Tests for max drawdown
# ---------------------------------------------------------------------------

class TestMaxDrawdown:

    def test_empty_is_all_zeros(self):
        result = sm.max_drawdown([])
        assert result["max_drawdown"] == 0
        assert result["peak"] == 0
        assert result["trough"] == 0

    def test_known_series(self):
        result = sm.max_drawdown([100.0, 110.0, 90.0, 105.0])
        assert result["max_drawdown"] == pytest.approx((110 - 90) / 110 * 100)
        assert result["peak"] == 110.0
        assert result["trough"] == 90.0
        assert result["peak_index"] == 1
        assert result["trough_index"] == 2

    def test_monotonic_increasing_has_no_drawdown(self):
        result = sm.max_drawdown([100.0, 101.0, 102.0])
        assert result["max_drawdown"] == 0.0

    def test_later_deeper_drawdown_wins(self):
        result = sm.max_drawdown([100.0, 90.0, 120.0, 60.0, 80.0])
        assert result["max_drawdown"] == pytest.approx(50.0)
        assert result["peak"] == 120.0
        assert result["trough"] == 60.0

    def test_peak_precedes_trough_after_recovery(self):
        result = sm.max_drawdown([100.0, 50.0, 200.0])
        assert result["max_drawdown"] == pytest.approx(50.0)
        assert result["peak"] == 100.0
        assert result["peak_index"] == 0
        assert result["trough_index"] == 1

    def test_single_value(self):
        result = sm.max_drawdown([250.0])
        assert result["max_drawdown"] == 0.0
        assert result["peak"] == 250.0
        assert result["trough"] == 250.0
        assert result["peak_index"] == result["trough_index"] == 0

    def test_zero_values_do_not_divide_by_zero(self):
        result = sm.max_drawdown([0.0, 0.0])
        assert result["max_drawdown"] == 0.0


# ---------------------------------------------------------------------------
# Tests for beta / alpha / information ratio
# ---------------------------------------------------------------------------

class TestBeta:

    def test_identical_series_beta_one(self):
        np.random.seed(42)
        bench = list(np.random.normal(0, 0.01, 200))
        assert sm.beta(bench, bench) == pytest.approx(1.0)

    def test_double_beta(self):
        np.random.seed(42)
        bench = np.random.normal(0, 0.01, 200)
        assert sm.beta(list(bench * 2), list(bench)) == pytest.approx(2.0)

    def test_mismatched_lengths_neutral(self):
        assert sm.beta([0.01, 0.02], [0.01]) == 1.0

    def test_zero_market_variance_neutral(self):
        assert sm.beta([0.25, 0.5, 0.75], [0.5, 0.5, 0.5]) == 1.0

    def test_empty_neutral(self):
        assert sm.beta([], []) == 1.0


class TestAlpha:

    def test_capm_excess(self):
        # expected = 0.05 + 1.2 * (0.10 - 0.05) = 0.11
        assert sm.alpha(0.15, 0.10, 1.2, 0.05) == pytest.approx(0.04)

    def test_default_risk_free_rate(self):
        assert sm.alpha(0.05, 0.05, 1.0) == pytest.approx(0.0)


class TestInformationRatio:

    def test_mismatch_is_zero(self):
        assert sm.information_ratio([0.01], [0.01, 0.02]) == 0.0

    def test_constant_active_return_is_zero(self):
        assert sm.information_ratio([0.5, 0.75], [0.25, 0.5]) == 0.0

    def test_known_value(self):
        p, b = [0.02, 0.00, 0.03], [0.01, 0.01, 0.01]
        active = np.array(p) - np.array(b)
        assert sm.information_ratio(p, b) == pytest.approx(active.mean() / active.std())


# ---------------------------------------------------------------------------
# Tests for series helpers
# ---------------------------------------------------------------------------

class TestSeriesHelpers:

    def test_as_floats_accepts_arrays_and_series(self):
        assert sm.as_floats(np.array([0.5, 0.25])) == [0.5, 0.25]
        assert sm.as_floats(pd.Series([1, 2])) == [1.0, 2.0]
        assert sm.as_floats(None) == []

    def test_period_returns_skip_non_positive_base(self):
        assert sm.period_returns([100, 110, 0, 50]) == pytest.approx([0.1, -1.0])

    def test_compound_values(self):
        assert sm.compound_values([0.1, -0.5], start=100) == pytest.approx([110.0, 55.0])

    def test_compound_values_empty(self):
        assert sm.compound_values([]) == []
