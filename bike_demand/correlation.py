"""
Autocorrelation analysis for ARIMA order selection
"""
import logging

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.tsa.stattools import acf, pacf

logger = logging.getLogger(__name__)


def compute_acf_pacf(series, nlags=30, alpha=0.05):
    """
    Compute ACF and PACF values with the white-noise significance bound.

    Parameters:
    -----------
    series : pd.Series
        Series to analyse (NaN dropped)
    nlags : int
        Number of lags; clipped so the PACF stays estimable
    alpha : float
        Significance level of the bound

    Returns:
    --------
    pd.DataFrame : Indexed by lag (0..nlags), columns 'acf', 'pacf', 'bound'
    """
    values = series.dropna().to_numpy(dtype=float)
    n_obs = len(values)
    if n_obs < 4:
        raise ValueError(f"Need at least 4 observations for ACF/PACF, got {n_obs}")

    max_lags = n_obs // 2 - 1
    if nlags > max_lags:
        logger.info(f"Clipping nlags from {nlags} to {max_lags} for {n_obs} observations")
        nlags = max_lags

    acf_values = acf(values, nlags=nlags, fft=True)
    pacf_values = pacf(values, nlags=nlags, method='ywm')
    bound = stats.norm.ppf(1 - alpha / 2) / np.sqrt(n_obs)

    return pd.DataFrame(
        {'acf': acf_values, 'pacf': pacf_values, 'bound': bound},
        index=pd.RangeIndex(nlags + 1, name='lag'),
    )


def significant_lags(values, bound):
    """Lags >= 1 whose absolute correlation exceeds the bound."""
    values = np.asarray(values)
    return [lag for lag in range(1, len(values)) if abs(values[lag]) > bound]


def _cutoff(values, bound):
    # Number of consecutive significant lags starting from lag 1
    order = 0
    for lag in range(1, len(values)):
        if abs(values[lag]) <= bound:
            break
        order = lag
    return order


def suggest_orders(series, nlags=30, max_p=5, max_q=5):
    """
    Suggest AR and MA orders from where the PACF and ACF cut off.

    p is the last of the consecutive significant PACF lags from lag 1,
    q the same for the ACF. A slowly decaying ACF hits ``max_q``, which
    usually means the series still needs differencing.

    Returns:
    --------
    dict : {'p', 'q', 'acf_lags', 'pacf_lags'}
    """
    table = compute_acf_pacf(series, nlags=nlags)
    bound = table['bound'].iloc[0]

    p = min(_cutoff(table['pacf'].to_numpy(), bound), max_p)
    q = min(_cutoff(table['acf'].to_numpy(), bound), max_q)

    return {
        'p': p,
        'q': q,
        'acf_lags': significant_lags(table['acf'], bound),
        'pacf_lags': significant_lags(table['pacf'], bound),
    }
