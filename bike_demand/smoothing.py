import logging

import numpy as np
import pandas as pd
from statsmodels.tsa.filters.filtertools import convolution_filter

from config.settings import DERIVED_COLUMNS

logger = logging.getLogger(__name__)


def moving_average_weights(order):
    """
    Weights of a centred moving average of the given order.

    Odd orders average `order` points with equal weight. Even orders use a
    2 x order MA so the window stays centred on the observation.
    """
    if order < 1:
        raise ValueError(f"Moving average order must be >= 1, got {order}")
    if order % 2 == 1:
        return np.repeat(1.0 / order, order)
    return np.r_[0.5, np.repeat(1.0, order - 1), 0.5] / order


def moving_average(series, order, centre=True):
    """
    Smooth a series with a moving average.

    Parameters:
    -----------
    series : pd.Series
        Series to smooth
    order : int
        Number of observations per window
    centre : bool
        Centred window (default). False gives a trailing mean.

    Returns:
    --------
    pd.Series : Same index as the input; edges without a full window are NaN
    """
    order = int(order)
    if not centre:
        if order < 1:
            raise ValueError(f"Moving average order must be >= 1, got {order}")
        return series.rolling(window=order).mean()

    weights = moving_average_weights(order)
    values = series.to_numpy(dtype=float)
    if len(values) < len(weights):
        return pd.Series(np.nan, index=series.index, name=series.name)

    smoothed = convolution_filter(values, weights, nsides=2)
    return pd.Series(np.asarray(smoothed, dtype=float), index=series.index, name=series.name)


def add_moving_averages(df_input, weekly_order=7, monthly_order=30):
    """
    Add weekly and monthly moving averages of the cleaned count
    """
    df = df_input.copy()
    clean = df[DERIVED_COLUMNS['clean']]

    df[DERIVED_COLUMNS['weekly_ma']] = moving_average(clean, weekly_order)
    df[DERIVED_COLUMNS['monthly_ma']] = moving_average(clean, monthly_order)

    logger.info(f"✓ Added moving averages (orders {weekly_order} and {monthly_order})")
    return df
