"""
Residual diagnostics for fitted ARIMA models
"""
import logging

import pandas as pd
from scipy.stats import jarque_bera, kurtosis, skew
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.stats.stattools import durbin_watson

from bike_demand.correlation import compute_acf_pacf, significant_lags

logger = logging.getLogger(__name__)


def _clean_residuals(residuals):
    values = pd.Series(residuals).dropna()
    if len(values) < 3:
        raise ValueError(f"Need at least 3 residuals for diagnostics, got {len(values)}")
    return values


def diagnostic_tests(residuals, lags=(10,), alpha=0.05):
    """
    Perform statistical tests on residuals.

    - Ljung-Box: residual autocorrelation (p > alpha means white noise)
    - Jarque-Bera: normality (p > alpha means normal)
    - Durbin-Watson: first-order autocorrelation (around 2 is good)
    """
    values = _clean_residuals(residuals)
    lags = sorted(int(lag) for lag in lags)
    lags = [lag for lag in lags if lag < len(values)] or [max(1, len(values) // 5)]

    lb_test = acorr_ljungbox(values, lags=lags, return_df=True)
    lb_pvalues = {int(lag): float(p) for lag, p in lb_test['lb_pvalue'].items()}
    lb_pvalue = lb_pvalues[lags[-1]]

    jb_stat, jb_pvalue = jarque_bera(values)
    dw_stat = durbin_watson(values)

    results = {
        'lb_pvalue': lb_pvalue,
        'lb_pvalues': lb_pvalues,
        'jb_pvalue': float(jb_pvalue),
        'dw_stat': float(dw_stat),
        'is_white_noise': bool(lb_pvalue > alpha),
        'is_normal': bool(jb_pvalue > alpha),
    }

    logger.info(
        f"Ljung-Box p={lb_pvalue:.4f} | Jarque-Bera p={jb_pvalue:.4f} | Durbin-Watson={dw_stat:.4f}"
    )
    return results


def residual_summary(residuals):
    """Descriptive statistics of the residuals."""
    values = _clean_residuals(residuals)
    return {
        'mean': float(values.mean()),
        'std': float(values.std()),
        'min': float(values.min()),
        'max': float(values.max()),
        'skew': float(skew(values)),
        'kurtosis': float(kurtosis(values)),
    }


def significant_residual_lags(residuals, nlags=45):
    """
    Residual ACF lags outside the white-noise bound.

    A well-specified model leaves few or none; a repeating spike (e.g. at lag
    7) points to structure the model has not captured.
    """
    table = compute_acf_pacf(_clean_residuals(residuals), nlags=nlags)
    return significant_lags(table['acf'].to_numpy(), table['bound'].iloc[0])


def burn_in_residuals(fitted_model):
    """
    Residuals with the first d observations removed.

    The leading residuals of a differenced ARIMA equal the raw level and
    would dominate every diagnostic.
    """
    residuals = pd.Series(fitted_model.resid)
    model = fitted_model.model
    k_diff = getattr(model, 'k_diff', 0) or 0
    k_seasonal_diff = getattr(model, 'k_seasonal_diff', 0) or 0
    seasonal_periods = getattr(model, 'seasonal_periods', 0) or 0
    return residuals.iloc[int(k_diff + k_seasonal_diff * seasonal_periods):]

