import numpy as np
import pandas as pd
import pytest

from bike_demand.decomposition import (
    add_deseasonalized_column,
    decompose_stl,
    deseasonalize,
    seasonally_adjust,
)


@pytest.fixture
def monthly_cycle():
    t = np.arange(300)
    rng = np.random.default_rng(11)
    values = 500 + 2 * t + 100 * np.sin(2 * np.pi * t / 30) + rng.normal(0, 5, 300)
    return pd.Series(values, index=pd.date_range('2011-01-01', periods=300, freq='D'))


class TestDecomposeSTL:

    def test_components_add_up(self, monthly_cycle):
        result = decompose_stl(monthly_cycle, period=30)

        total = result['trend'] + result['seasonal'] + result['resid']
        assert np.allclose(total, result['observed'])
        assert result['period'] == 30

    def test_components_keep_dates(self, monthly_cycle):
        result = decompose_stl(monthly_cycle, period=30)
        for key in ('trend', 'seasonal', 'resid'):
            assert result[key].index.equals(monthly_cycle.index)

    def test_seasonal_tracks_the_cycle(self, monthly_cycle):
        result = decompose_stl(monthly_cycle, period=30)

        t = np.arange(len(monthly_cycle))
        expected = 100 * np.sin(2 * np.pi * t / 30)
        assert np.corrcoef(result['seasonal'], expected)[0, 1] > 0.95

    def test_nan_edges_dropped(self, monthly_cycle):
        series = monthly_cycle.copy()
        series.iloc[:3] = np.nan
        series.iloc[-3:] = np.nan

        result = decompose_stl(series, period=30)

        assert len(result['trend']) == len(monthly_cycle) - 6
        assert not result['seasonal'].isna().any()

    def test_robust_non_periodic(self, monthly_cycle):
        result = decompose_stl(monthly_cycle, period=30, robust=True, periodic=False)
        assert len(result['seasonal']) == len(monthly_cycle)

    def test_too_short(self):
        series = pd.Series(np.arange(40, dtype=float))
        with pytest.raises(ValueError, match="two full periods"):
            decompose_stl(series, period=30)

    def test_invalid_period(self, monthly_cycle):
        with pytest.raises(ValueError):
            decompose_stl(monthly_cycle, period=1)


class TestDeseasonalize:

    def test_removes_cycle(self, monthly_cycle):
        adjusted = deseasonalize(monthly_cycle, period=30)

        residual_cycle = adjusted - (500 + 2 * np.arange(len(monthly_cycle)))
        assert residual_cycle.std() < 30
        assert adjusted.index.equals(monthly_cycle.index)

    def test_keeps_nan_positions(self, monthly_cycle):
        series = monthly_cycle.copy()
        series.iloc[:3] = np.nan

        adjusted = deseasonalize(series, period=30)

        assert adjusted.iloc[:3].isna().all()
        assert adjusted.iloc[3:].notna().all()

    def test_add_deseasonalized_column(self, monthly_cycle):
        df = monthly_cycle.to_frame('cnt_ma')

        annotated = add_deseasonalized_column(df, period=30)

        assert 'deseasonal_cnt' in annotated.columns
        assert annotated['deseasonal_cnt'].notna().all()

    def test_add_deseasonalized_column_reuses_decomposition(self, monthly_cycle):
        df = monthly_cycle.to_frame('cnt_ma')
        df.iloc[:3, 0] = np.nan
        decomposition = decompose_stl(df['cnt_ma'], period=30)

        annotated = add_deseasonalized_column(df, decomposition=decomposition)

        expected = seasonally_adjust(decomposition, index=df.index)
        pd.testing.assert_series_equal(annotated['deseasonal_cnt'], expected, check_names=False)
        assert annotated['deseasonal_cnt'].iloc[:3].isna().all()
