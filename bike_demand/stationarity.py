import logging

import numpy as np
from statsmodels.tsa.stattools import adfuller

logger = logging.getLogger(__name__)

MIN_ADF_OBSERVATIONS = 10


def default_adf_lag(n_obs):
    """Lag order trunc((n - 1) ** (1/3)) used by the classic ADF test."""
    return int(np.trunc((n_obs - 1) ** (1.0 / 3.0)))


def perform_adf_test(series, alpha=0.05, regression='ct', maxlag=None, autolag=None):
    """
    Perform Augmented Dickey-Fuller test for stationarity.

    The null hypothesis is a unit root (non-stationary series); the series is
    reported stationary when the p-value is below ``alpha``.

    Parameters:
    -----------
    series : pd.Series
        Time series to test (NaN dropped)
    alpha : float
        Significance level
    regression : str
        Deterministic terms: 'c', 'ct', 'ctt' or 'n'
    maxlag : int, optional
        Lag order. Defaults to trunc((n-1)^(1/3)).
    autolag : str, optional
        Let statsmodels pick the lag ('AIC', 'BIC', 't-stat') up to maxlag

    Returns:
    --------
    dict : Test results including p-value, ADF statistic, and critical values
    """
    values = series.dropna()
    n_obs = len(values)
    if n_obs < MIN_ADF_OBSERVATIONS:
        raise ValueError(
            f"ADF test needs at least {MIN_ADF_OBSERVATIONS} observations, got {n_obs}"
        )
    if maxlag is None:
        maxlag = default_adf_lag(n_obs)

    result = adfuller(values, maxlag=maxlag, regression=regression, autolag=autolag)

    is_stationary = bool(result[1] < alpha)
    logger.info(
        f"ADF Statistic: {result[0]:.6f} | p-value: {result[1]:.6f} | "
        f"lag: {result[2]} -> {'STATIONARY' if is_stationary else 'NON-STATIONARY'}"
    )

    return {
        'adf_statistic': float(result[0]),
        'p_value': float(result[1]),
        'used_lag': int(result[2]),
        'n_obs': int(result[3]),
        'critical_values': {key: float(value) for key, value in result[4].items()},
        'is_stationary': is_stationary,
    }


def difference_series(series, d=1):
    """
    Apply ``d`` successive first differences and drop the leading NaN
    """
    if d < 0:
        raise ValueError(f"Differencing order must be >= 0, got {d}")
    differenced = series.dropna()
    for _ in range(d):
        differenced = differenced.diff().dropna()
    return differenced.copy()


def find_differencing_order(series, max_d=2, alpha=0.05, regression='ct'):
    """
    Find the smallest d in 0..max_d for which the differenced series is stationary.

    Returns:
    --------
    dict : {
        'd': chosen differencing order,
        'tests': list of ADF result dicts, one per order tried
    }
    """
    tests = []
    for d in range(max_d + 1):
        result = perform_adf_test(difference_series(series, d), alpha=alpha, regression=regression)
        result['d'] = d
        tests.append(result)
        if result['is_stationary']:
            logger.info(f"✓ Differencing order d={d} achieves stationarity")
            return {'d': d, 'tests': tests}

    logger.warning(
        f"⚠️ Series still non-stationary after {max_d} difference(s); using d={max_d}"
    )
    return {'d': max_d, 'tests': tests}
