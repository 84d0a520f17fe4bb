import numpy as np
import pandas as pd
import pytest

from bike_demand.evaluation import (
    calculate_mape,
    calculate_metrics,
    evaluate_holdout,
    train_holdout_split,
)


class TestMetrics:

    def test_known_values(self):
        metrics = calculate_metrics([1, 2, 3, 4], [2, 2, 3, 2])

        assert metrics['mse'] == pytest.approx(1.25)
        assert metrics['rmse'] == pytest.approx(np.sqrt(1.25))
        assert metrics['mae'] == pytest.approx(0.75)
        assert metrics['mape'] == pytest.approx(37.5)

    def test_perfect_forecast(self):
        metrics = calculate_metrics(np.array([5.0, 6.0]), np.array([5.0, 6.0]))
        assert metrics == {'rmse': 0.0, 'mse': 0.0, 'mae': 0.0, 'mape': 0.0}

    def test_series_aligned_on_index(self):
        index = pd.date_range('2012-01-01', periods=3, freq='D')
        actual = pd.Series([10.0, 20.0, 30.0], index=index)
        predicted = pd.Series([30.0, 20.0], index=index[[2, 1]])

        metrics = calculate_metrics(actual, predicted)

        assert metrics['mae'] == 0.0

    def test_mape_skips_zero_actuals(self):
        assert calculate_mape([0.0, 10.0], [5.0, 11.0]) == pytest.approx(10.0)
        assert np.isnan(calculate_mape([0.0, 0.0], [1.0, 1.0]))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            calculate_metrics([1.0, 2.0], [1.0])

    def test_nothing_to_compare(self):
        with pytest.raises(ValueError):
            calculate_metrics([np.nan], [1.0])


class TestHoldout:

    def test_split_sizes(self, ar1_series):
        train, test = train_holdout_split(ar1_series, holdout=25)

        assert len(train) == 475
        assert len(test) == 25
        assert train.index[-1] < test.index[0]

    @pytest.mark.parametrize("holdout", [0, 500])
    def test_invalid_holdout(self, ar1_series, holdout):
        with pytest.raises(ValueError):
            train_holdout_split(ar1_series, holdout=holdout)

    def test_evaluate_holdout(self, ar1_series):
        result = evaluate_holdout(ar1_series, (1, 0, 0), holdout=25)

        assert result['forecast'].index.equals(result['test'].index)
        assert set(result['metrics']) == {'rmse', 'mse', 'mae', 'mape'}
        # A mean-reverting forecast is never far off a unit-variance AR(1)
        assert result['metrics']['rmse'] < 3.0
        assert len(result['train']) == 475
