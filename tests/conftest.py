"""Pytest configuration and shared fixtures."""
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


def make_daily_counts(n_days=400, seed=42, seasonal=True, outliers=None, start='2011-01-01'):
    """
    Synthetic daily rental counts: linear growth, optional monthly and weekly
    cycles and Gaussian noise. ``outliers`` maps position to forced value.
    """
    rng = np.random.default_rng(seed)
    index = pd.date_range(start, periods=n_days, freq='D')
    t = np.arange(n_days)
    values = 3000 + 4.0 * t + rng.normal(0, 150, n_days)
    if seasonal:
        values += 800 * np.sin(2 * np.pi * t / 30) + 300 * np.sin(2 * np.pi * t / 7)
    series = pd.Series(values, index=index, name='cnt')
    for position, value in (outliers or {}).items():
        series.iloc[position] = value
    return series


def make_ar1(phi=0.7, n=500, seed=0, start='2011-01-01'):
    rng = np.random.default_rng(seed)
    noise = rng.normal(0, 1, n)
    values = np.zeros(n)
    for i in range(1, n):
        values[i] = phi * values[i - 1] + noise[i]
    return pd.Series(values, index=pd.date_range(start, periods=n, freq='D'), name='ar1')


@pytest.fixture
def daily_series():
    return make_daily_counts()


@pytest.fixture
def series_with_outliers():
    return make_daily_counts(seasonal=False, outliers={100: 12000, 250: 10})


@pytest.fixture
def ar1_series():
    return make_ar1()


@pytest.fixture
def white_noise():
    rng = np.random.default_rng(7)
    return pd.Series(rng.normal(0, 1, 500),
                     index=pd.date_range('2011-01-01', periods=500, freq='D'))


@pytest.fixture
def integrated_series():
    """I(2) series: cumulative sum of a random walk."""
    rng = np.random.default_rng(3)
    values = np.cumsum(np.cumsum(rng.normal(0, 1, 500)))
    return pd.Series(values, index=pd.date_range('2011-01-01', periods=500, freq='D'))


@pytest.fixture
def daily_csv(tmp_path):
    """CSV laid out like the bike sharing day.csv (instant, dteday, season, cnt)."""
    series = make_daily_counts(n_days=300, outliers={120: 15000})
    df = pd.DataFrame({
        'instant': np.arange(1, len(series) + 1),
        'dteday': series.index.strftime('%Y-%m-%d'),
        'season': ((series.index.month % 12) // 3) + 1,
        'cnt': series.round().astype(int).to_numpy(),
    })
    path = tmp_path / 'day.csv'
    df.to_csv(path, index=False)
    return path
