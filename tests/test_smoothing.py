import numpy as np
import pandas as pd
import pytest

from bike_demand.smoothing import add_moving_averages, moving_average, moving_average_weights


@pytest.fixture
def linear():
    return pd.Series(np.arange(60, dtype=float),
                     index=pd.date_range('2011-01-01', periods=60, freq='D'))


class TestMovingAverageWeights:

    def test_odd_order_equal_weights(self):
        weights = moving_average_weights(7)
        assert len(weights) == 7
        assert np.allclose(weights, 1 / 7)

    def test_even_order_is_centred(self):
        weights = moving_average_weights(30)
        assert len(weights) == 31
        assert weights[0] == pytest.approx(0.5 / 30)
        assert weights[-1] == pytest.approx(0.5 / 30)
        assert weights.sum() == pytest.approx(1.0)

    def test_invalid_order(self):
        with pytest.raises(ValueError):
            moving_average_weights(0)


class TestMovingAverage:

    @pytest.mark.parametrize("order, edge", [(7, 3), (30, 15), (4, 2)])
    def test_edges_are_nan(self, linear, order, edge):
        smoothed = moving_average(linear, order)

        assert smoothed.iloc[:edge].isna().all()
        assert smoothed.iloc[-edge:].isna().all()
        assert smoothed.iloc[edge:-edge].notna().all()

    @pytest.mark.parametrize("order", [7, 30])
    def test_linear_series_unchanged_in_interior(self, linear, order):
        smoothed = moving_average(linear, order)
        interior = smoothed.dropna()
        assert np.allclose(interior, linear[interior.index])

    def test_keeps_index(self, linear):
        assert moving_average(linear, 7).index.equals(linear.index)

    def test_removes_weekly_cycle(self):
        t = np.arange(70)
        series = pd.Series(100 + 10 * np.sin(2 * np.pi * t / 7))
        smoothed = moving_average(series, 7).dropna()
        assert np.allclose(smoothed, 100)

    def test_trailing_mean(self, linear):
        trailing = moving_average(linear, 7, centre=False)
        pd.testing.assert_series_equal(trailing, linear.rolling(7).mean())

    def test_series_shorter_than_window(self):
        smoothed = moving_average(pd.Series([1.0, 2.0, 3.0]), 7)
        assert smoothed.isna().all()
        assert len(smoothed) == 3

    def test_add_moving_averages(self, linear):
        df = linear.to_frame('clean_cnt')

        annotated = add_moving_averages(df, weekly_order=7, monthly_order=30)

        assert annotated['cnt_ma'].notna().sum() == 54
        assert annotated['cnt_ma30'].notna().sum() == 30
