"""
Holdout evaluation and forecast accuracy metrics
"""
import logging

import numpy as np
import pandas as pd
from sklearn.metrics import mean_squared_error, mean_absolute_error

from bike_demand.model import fit_arima, forecast

logger = logging.getLogger(__name__)


def calculate_mape(y_true, y_pred):
    """
    Calculate Mean Absolute Percentage Error, skipping zero actuals

    Parameters:
    -----------
    y_true : np.ndarray
        Actual values
    y_pred : np.ndarray
        Predicted values

    Returns:
    --------
    float : MAPE value (NaN if every actual is zero)
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    mask = y_true != 0
    if not mask.any():
        return float('nan')
    return float(np.mean(np.abs((y_true[mask] - y_pred[mask]) / y_true[mask])) * 100)


def calculate_metrics(actual, predicted):
    """
    Calculate evaluation metrics for time series forecasting.

    Pandas inputs are aligned on the actual index; pairs with a missing value
    on either side are dropped.

    Returns:
    --------
    dict : {'rmse', 'mse', 'mae', 'mape'}
    """
    if isinstance(actual, pd.Series) and isinstance(predicted, pd.Series):
        predicted = predicted.reindex(actual.index)

    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.shape != predicted.shape:
        raise ValueError(f"Shape mismatch: actual {actual.shape} vs predicted {predicted.shape}")

    valid_mask = ~np.isnan(actual) & ~np.isnan(predicted)
    actual_clean = actual[valid_mask]
    predicted_clean = predicted[valid_mask]
    if len(actual_clean) == 0:
        raise ValueError("No overlapping non-missing values to evaluate")

    mse = mean_squared_error(actual_clean, predicted_clean)
    return {
        'rmse': float(np.sqrt(mse)),
        'mse': float(mse),
        'mae': float(mean_absolute_error(actual_clean, predicted_clean)),
        'mape': calculate_mape(actual_clean, predicted_clean),
    }


def train_holdout_split(series, holdout=25):
    """
    Split chronologically, holding back the last ``holdout`` observations
    """
    values = series.dropna()
    holdout = int(holdout)
    if not 1 <= holdout < len(values):
        raise ValueError(
            f"holdout must be between 1 and {len(values) - 1}, got {holdout}"
        )
    return values.iloc[:-holdout], values.iloc[-holdout:]


def evaluate_holdout(series, order, holdout=25, seasonal_order=(0, 0, 0, 0), levels=(80, 95)):
    """
    Refit on all but the last ``holdout`` points and forecast them.

    Returns:
    --------
    dict : {
        'train', 'test': pd.Series,
        'forecast': forecast frame indexed like the test part,
        'metrics': dict with rmse, mse, mae, mape,
        'model': fitted model
    }
    """
    train, test = train_holdout_split(series, holdout)
    fitted_model = fit_arima(train, order, seasonal_order=seasonal_order)

    forecast_frame = forecast(fitted_model, steps=len(test), levels=levels)
    forecast_frame.index = test.index

    metrics = calculate_metrics(test, forecast_frame['forecast'])
    logger.info(
        f"Holdout ({len(test)} points) RMSE: {metrics['rmse']:.2f} | "
        f"MAE: {metrics['mae']:.2f} | MAPE: {metrics['mape']:.2f}%"
    )

    return {
        'train': train,
        'test': test,
        'forecast': forecast_frame,
        'metrics': metrics,
        'model': fitted_model,
    }
