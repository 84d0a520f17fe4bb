import numpy as np
import pandas as pd
import pytest

from bike_demand.correlation import compute_acf_pacf, significant_lags, suggest_orders
from conftest import make_ar1


class TestComputeACFPACF:

    def test_table_shape(self, ar1_series):
        table = compute_acf_pacf(ar1_series, nlags=20)

        assert list(table.columns) == ['acf', 'pacf', 'bound']
        assert len(table) == 21
        assert table['acf'].iloc[0] == pytest.approx(1.0)
        assert table['bound'].iloc[0] == pytest.approx(1.96 / np.sqrt(500), rel=1e-3)

    def test_ar1_lag_one(self, ar1_series):
        table = compute_acf_pacf(ar1_series, nlags=10)
        assert table['pacf'].iloc[1] == pytest.approx(0.7, abs=0.1)
        assert table['acf'].iloc[1] == pytest.approx(0.7, abs=0.1)

    def test_nlags_clipped_for_short_series(self):
        series = pd.Series(np.random.default_rng(0).normal(size=20))
        table = compute_acf_pacf(series, nlags=30)
        assert len(table) == 10

    def test_too_short(self):
        with pytest.raises(ValueError):
            compute_acf_pacf(pd.Series([1.0, 2.0, 3.0]))


class TestSignificantLags:

    def test_lag_zero_ignored(self):
        assert significant_lags([1.0, 0.5, 0.01, -0.3], bound=0.2) == [1, 3]

    def test_none_significant(self):
        assert significant_lags([1.0, 0.05, -0.05], bound=0.1) == []


class TestSuggestOrders:

    def test_persistent_ar1(self):
        series = make_ar1(phi=0.9, seed=5)

        result = suggest_orders(series, nlags=20, max_p=5, max_q=5)

        assert result['p'] >= 1
        assert result['q'] == 5
        assert 1 in result['pacf_lags']

    def test_caps(self):
        series = make_ar1(phi=0.9, seed=5)
        result = suggest_orders(series, nlags=20, max_p=0, max_q=2)
        assert result['p'] == 0
        assert result['q'] == 2
