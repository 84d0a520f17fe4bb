"""
Outlier cleaning for the daily count series
"""
import logging

import numpy as np
import pandas as pd
from statsmodels.nonparametric.smoothers_lowess import lowess

from config.settings import COUNT_COLUMN, DERIVED_COLUMNS

logger = logging.getLogger(__name__)


def _interpolate(series):
    method = 'time' if isinstance(series.index, pd.DatetimeIndex) else 'linear'
    return series.interpolate(method=method).ffill().bfill()


def detect_outliers(series, iqr_multiplier=3.0, frac=0.1):
    """
    Flag outliers as points far from a robust LOWESS fit of the series.

    Residuals from the smoother outside [Q1 - k*IQR, Q3 + k*IQR] are
    outliers. Missing values are never flagged.

    Parameters:
    -----------
    series : pd.Series
        Series to inspect
    iqr_multiplier : float
        Width k of the accepted residual band, in IQRs
    frac : float
        Fraction of the data used for each local LOWESS fit

    Returns:
    --------
    pd.Series : Boolean mask aligned to series.index
    """
    if iqr_multiplier <= 0:
        raise ValueError(f"iqr_multiplier must be positive, got {iqr_multiplier}")
    if not 0 < frac <= 1:
        raise ValueError(f"frac must be in (0, 1], got {frac}")

    flags = pd.Series(False, index=series.index)
    observed_mask = series.notna().to_numpy()
    if observed_mask.sum() < 3:
        return flags

    positions = np.arange(len(series), dtype=float)[observed_mask]
    values = series.to_numpy(dtype=float)[observed_mask]

    # Each local fit needs at least three neighbours
    frac = max(frac, min(1.0, 3.0 / len(values)))
    fitted = lowess(values, positions, frac=frac, return_sorted=False)
    resid = pd.Series(values - fitted)

    q1, q3 = resid.quantile([0.25, 0.75])
    iqr = q3 - q1
    tolerance = 1e-8 * max(1.0, float(np.abs(values).max()))
    lower = q1 - iqr_multiplier * iqr - tolerance
    upper = q3 + iqr_multiplier * iqr + tolerance

    is_outlier = ((resid < lower) | (resid > upper)).to_numpy()
    flags.iloc[np.flatnonzero(observed_mask)[is_outlier]] = True
    return flags


def clean_outliers(series, iqr_multiplier=3.0, frac=0.1, outliers=None):
    """
    Replace outliers and missing values by interpolation.

    ``outliers`` takes flags already returned by detect_outliers for this
    series; otherwise they are computed here. Returns a new float Series;
    the input is not modified.
    """
    cleaned = series.astype(float).copy()
    if outliers is None:
        outliers = detect_outliers(cleaned, iqr_multiplier=iqr_multiplier, frac=frac)
    else:
        outliers = outliers.reindex(cleaned.index, fill_value=False).astype(bool)

    n_outliers = int(outliers.sum())
    n_missing = int(cleaned.isna().sum())

    cleaned[outliers] = np.nan
    cleaned = _interpolate(cleaned)

    logger.info(f"✓ Cleaned series: {n_outliers} outlier(s) replaced, {n_missing} gap(s) filled")
    return cleaned


def add_clean_column(df_input, iqr_multiplier=3.0, frac=0.1):
    """
    Annotate the frame with the cleaned count and an outlier flag
    """
    df = df_input.copy()
    outliers = detect_outliers(df[COUNT_COLUMN], iqr_multiplier=iqr_multiplier, frac=frac)
    df[DERIVED_COLUMNS['outlier']] = outliers.astype(int)
    df[DERIVED_COLUMNS['clean']] = clean_outliers(df[COUNT_COLUMN], outliers=outliers)
    return df
