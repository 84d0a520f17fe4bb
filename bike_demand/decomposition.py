"""
Seasonal-Trend decomposition (STL) and seasonal adjustment
"""
import logging

import pandas as pd
from statsmodels.tsa.seasonal import STL

from config.settings import DERIVED_COLUMNS

logger = logging.getLogger(__name__)


def decompose_stl(series, period=30, robust=False, periodic=True):
    """
    Decompose a series into trend, seasonal and remainder with STL.

    Parameters:
    -----------
    series : pd.Series
        Series to decompose; NaN values (e.g. moving-average edges) are dropped
    period : int
        Length of one seasonal cycle in observations
    robust : bool
        Use the robust (outlier-resistant) STL fit
    periodic : bool
        Hold the seasonal pattern fixed across cycles. Implemented with a very
        wide seasonal smoother of degree 0.

    Returns:
    --------
    dict : {
        'observed', 'trend', 'seasonal', 'resid': pd.Series,
        'period': int
    }
    """
    observed = series.dropna()
    period = int(period)
    if period < 2:
        raise ValueError(f"STL period must be >= 2, got {period}")
    if len(observed) < 2 * period:
        raise ValueError(
            f"STL needs at least two full periods ({2 * period} observations), "
            f"got {len(observed)}"
        )

    # Drop the calendar frequency; the seasonal period is given explicitly
    values = pd.Series(observed.to_numpy(dtype=float), index=range(len(observed)))

    if periodic:
        stl = STL(values, period=period, seasonal=10 * len(values) + 1,
                  seasonal_deg=0, robust=robust)
    else:
        stl = STL(values, period=period, robust=robust)
    result = stl.fit()

    def _restore(component):
        return pd.Series(component.to_numpy(), index=observed.index, name=series.name)

    logger.info(f"✓ STL decomposition done (period={period}, periodic={periodic})")
    return {
        'observed': observed,
        'trend': _restore(result.trend),
        'seasonal': _restore(result.seasonal),
        'resid': _restore(result.resid),
        'period': period,
    }


def deseasonalize(series, period=30, robust=False, periodic=True):
    """
    Remove the STL seasonal component from a series.

    The result is reindexed to the input index, so dropped NaN positions
    stay NaN.
    """
    decomposition = decompose_stl(series, period=period, robust=robust, periodic=periodic)
    return seasonally_adjust(decomposition, index=series.index)


def seasonally_adjust(decomposition, index=None):
    """Observed minus seasonal of a decompose_stl result, optionally reindexed."""
    adjusted = decomposition['observed'] - decomposition['seasonal']
    if index is not None:
        adjusted = adjusted.reindex(index)
    return adjusted


def add_deseasonalized_column(df_input, period=30, robust=False, decomposition=None):
    """
    Add the seasonally adjusted weekly moving average.

    A decompose_stl result of that column can be passed in to skip refitting.
    """
    df = df_input.copy()
    if decomposition is None:
        decomposition = decompose_stl(df[DERIVED_COLUMNS['weekly_ma']], period=period, robust=robust)
    df[DERIVED_COLUMNS['deseasonal']] = seasonally_adjust(decomposition, index=df.index)
    return df
