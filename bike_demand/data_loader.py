import logging
import os

import pandas as pd

from config.settings import DATE_COLUMN, COUNT_COLUMN

logger = logging.getLogger(__name__)


def load_daily_counts(file_path, date_column=DATE_COLUMN, count_column=COUNT_COLUMN):
    """
    Read a CSV of daily records and return the count series on a daily index.

    Parameters:
    -----------
    file_path : str or Path
        CSV file with at least a date column and a count column
    date_column : str
        Name of the date column (default: 'dteday')
    count_column : str
        Name of the count column (default: 'cnt')

    Returns:
    --------
    pd.DataFrame : Single column 'cnt' indexed by a daily DatetimeIndex.
        Calendar days missing from the file are present as NaN.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Data file not found: {file_path}")

    logger.info(f"Reading file: {file_path}...")
    try:
        df = pd.read_csv(file_path)
    except pd.errors.EmptyDataError:
        raise ValueError(f"Data file is empty: {file_path}")

    # Validation
    missing = [col for col in (date_column, count_column) if col not in df.columns]
    if missing:
        raise ValueError(
            f"Data must have columns '{date_column}' and '{count_column}'. "
            f"Missing: {', '.join(missing)}"
        )
    if df.empty:
        raise ValueError(f"Data file has no rows: {file_path}")

    df = df[[date_column, count_column]].copy()
    df[date_column] = pd.to_datetime(df[date_column])
    df[count_column] = pd.to_numeric(df[count_column], errors='coerce')

    # Sort and keep one record per day
    df = df.sort_values(date_column, kind='stable')
    n_duplicates = df[date_column].duplicated(keep='last').sum()
    if n_duplicates:
        logger.warning(f"⚠️ Dropping {n_duplicates} duplicate date(s), keeping the last record")
        df = df.drop_duplicates(subset=date_column, keep='last')

    df = df.set_index(date_column)
    df.index.name = 'date'

    # Regular daily frequency; gaps become NaN and are handled by cleaning
    df = df.asfreq('D')
    df = df.rename(columns={count_column: COUNT_COLUMN})

    n_missing = int(df[COUNT_COLUMN].isna().sum())
    logger.info(
        f"✓ Loaded {len(df)} days from {df.index.min().date()} to {df.index.max().date()} "
        f"({n_missing} missing)"
    )
    return df
