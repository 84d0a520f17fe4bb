"""
ARIMA model fitting, order selection, forecasting and persistence
"""
import logging
import warnings
from pathlib import Path

import joblib
import numpy as np
import pandas as pd
from pmdarima import auto_arima
from statsmodels.tsa.arima.model import ARIMA
from tqdm import tqdm

logger = logging.getLogger(__name__)


def _prepare_series(series):
    """Drop NaN and restore a regular frequency on a DatetimeIndex if possible."""
    values = series.dropna().astype(float)
    index = values.index
    if isinstance(index, pd.DatetimeIndex) and index.freq is None and len(index) >= 3:
        freq = pd.infer_freq(index)
        if freq is not None:
            values = values.asfreq(freq)
    return values


def select_order_auto(series, d=None, seasonal=False, m=1, max_p=5, max_q=5,
                      information_criterion='aic', trace=False):
    """
    Stepwise search for the best ARIMA order with auto_arima.

    Parameters:
    -----------
    series : pd.Series
        Training series (NaN dropped)
    d : int, optional
        Differencing order; None lets auto_arima test for it
    seasonal : bool
        Also search seasonal (P, D, Q) terms
    m : int
        Seasonal period, used when seasonal=True
    max_p, max_q : int
        Upper bounds of the non-seasonal search
    information_criterion : str
        'aic', 'aicc', 'bic' or 'hqic'

    Returns:
    --------
    dict : {'order', 'seasonal_order', 'aic', 'bic', 'model'}
    """
    values = _prepare_series(series)
    if seasonal and m < 2:
        raise ValueError(f"Seasonal search needs a period m >= 2, got {m}")

    logger.info(
        f"Searching ARIMA order (d={'auto' if d is None else d}, "
        f"seasonal={seasonal}, m={m if seasonal else 1})..."
    )
    auto_model = auto_arima(
        values,
        start_p=0,
        start_q=0,
        max_p=max_p,
        max_q=max_q,
        d=d,
        seasonal=seasonal,
        m=m if seasonal else 1,
        trace=trace,
        stepwise=True,
        suppress_warnings=True,
        error_action='ignore',
        information_criterion=information_criterion,
    )

    order = tuple(int(v) for v in auto_model.order)
    seasonal_order = tuple(int(v) for v in auto_model.seasonal_order)
    logger.info(f"✓ Selected ARIMA{order} seasonal={seasonal_order} AIC={auto_model.aic():.2f}")

    return {
        'order': order,
        'seasonal_order': seasonal_order,
        'aic': float(auto_model.aic()),
        'bic': float(auto_model.bic()),
        'model': auto_model,
    }


def fit_arima(series, order, seasonal_order=(0, 0, 0, 0), trend=None):
    """
    Fit an ARIMA model by maximum likelihood.

    Parameters:
    -----------
    series : pd.Series
        Series to fit (NaN dropped)
    order : tuple
        (p, d, q)
    seasonal_order : tuple
        (P, D, Q, m)
    trend : str, optional
        Deterministic trend passed to statsmodels

    Returns:
    --------
    ARIMAResults : Fitted statsmodels results
    """
    order = tuple(int(v) for v in order)
    seasonal_order = tuple(int(v) for v in seasonal_order)
    if len(order) != 3 or min(order) < 0:
        raise ValueError(f"order must be three non-negative integers, got {order}")
    if len(seasonal_order) != 4 or min(seasonal_order) < 0:
        raise ValueError(f"seasonal_order must be four non-negative integers, got {seasonal_order}")

    values = _prepare_series(series)
    p, d, q = order
    P, D, Q, m = seasonal_order
    if P == D == Q == 0:
        seasonal_order = (0, 0, 0, 0)
        m = 0
    min_obs = p + d + q + (P + D + Q) * m + 2
    if len(values) < min_obs:
        raise ValueError(
            f"ARIMA{order} needs at least {min_obs} observations, got {len(values)}"
        )

    with warnings.catch_warnings():
        # Silences start-parameter and convergence warnings
        warnings.simplefilter('ignore')
        model = ARIMA(values, order=order, seasonal_order=seasonal_order, trend=trend)
        fitted_model = model.fit()

    logger.info(f"✓ Fitted ARIMA{order} on {len(values)} observations (AIC={fitted_model.aic:.2f})")
    return fitted_model


def get_model_aic(model):
    """Get AIC from model, handling both statsmodels and pmdarima."""
    if hasattr(model, 'aic') and callable(model.aic):
        # pmdarima model: aic is a method
        return model.aic()
    # statsmodels results: aic is a property
    return model.aic


def compare_orders(series, orders):
    """
    Fit each candidate order and rank the models by AIC.

    Candidates that fail to fit are kept in the table with NaN criteria and
    the error message.

    Returns:
    --------
    pd.DataFrame : columns 'order', 'aic', 'bic', 'llf', 'error', sorted by AIC
    """
    rows = []
    for order in tqdm(orders, desc="Fitting candidate orders"):
        order = tuple(order)
        try:
            fitted_model = fit_arima(series, order)
            rows.append({
                'order': order,
                'aic': fitted_model.aic,
                'bic': fitted_model.bic,
                'llf': fitted_model.llf,
                'error': None,
            })
        except (ValueError, np.linalg.LinAlgError) as e:
            logger.warning(f"⚠️ ARIMA{order} failed: {e}")
            rows.append({'order': order, 'aic': np.nan, 'bic': np.nan, 'llf': np.nan, 'error': str(e)})

    table = pd.DataFrame(rows, columns=['order', 'aic', 'bic', 'llf', 'error'])
    return table.sort_values('aic', na_position='last').reset_index(drop=True)


def forecast(fitted_model, steps=30, levels=(80, 95)):
    """
    Forecast ``steps`` periods ahead with prediction intervals.

    Parameters:
    -----------
    fitted_model : ARIMAResults
        Fitted statsmodels model
    steps : int
        Forecast horizon
    levels : iterable of int
        Confidence levels in percent

    Returns:
    --------
    pd.DataFrame : 'forecast' plus 'lower_{level}' and 'upper_{level}' columns
    """
    steps = int(steps)
    if steps < 1:
        raise ValueError(f"Forecast horizon must be >= 1, got {steps}")
    for level in levels:
        if not 0 < level < 100:
            raise ValueError(f"Confidence level must be in (0, 100), got {level}")

    prediction = fitted_model.get_forecast(steps=steps)
    frame = pd.DataFrame({'forecast': np.asarray(prediction.predicted_mean)},
                         index=prediction.predicted_mean.index)

    for level in levels:
        conf_int = np.asarray(prediction.conf_int(alpha=1 - level / 100))
        frame[f'lower_{level:g}'] = conf_int[:, 0]
        frame[f'upper_{level:g}'] = conf_int[:, 1]

    return frame


def save_model(fitted_model, filepath):
    """
    Save a fitted model with joblib
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(fitted_model, filepath)
    logger.info(f"✓ Model saved to: {filepath}")
    return filepath


def load_model(filepath):
    """
    Load a model saved with save_model
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Model file not found: {filepath}")
    return joblib.load(filepath)
