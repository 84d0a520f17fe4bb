"""
Plots for each stage of the analysis

Every function returns the matplotlib Figure. ``save_path`` writes it to
disk; ``show=True`` displays it, otherwise the figure is closed after saving.
"""
import logging
from pathlib import Path

import matplotlib.pyplot as plt
import matplotlib.dates as mdates
import seaborn as sns
from scipy import stats
from statsmodels.graphics.tsaplots import plot_acf, plot_pacf

from config.settings import PLOT_CONFIG

logger = logging.getLogger(__name__)


def apply_plot_style():
    plt.style.use(PLOT_CONFIG['style'])
    sns.set_palette(PLOT_CONFIG['palette'])


def _finish(fig, save_path=None, show=False):
    fig.tight_layout()
    if save_path is not None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=PLOT_CONFIG['dpi'])
        logger.info(f"✓ Plot saved to: {save_path}")
    if show:
        plt.show()
    else:
        plt.close(fig)
    return fig


def _format_dates(ax):
    ax.xaxis.set_major_formatter(mdates.DateFormatter(PLOT_CONFIG['date_format']))
    plt.setp(ax.xaxis.get_majorticklabels(), rotation=45)


def _max_lags(series, nlags):
    return max(1, min(nlags, len(series.dropna()) // 2 - 1))


def plot_daily_counts(series, title='Daily Bike Rentals', save_path=None, show=False):
    fig, ax = plt.subplots(figsize=PLOT_CONFIG['figsize'])
    ax.plot(series.index, series, color='#1f77b4', linewidth=1)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xlabel('Date', fontsize=12)
    ax.set_ylabel('Bicycle Count', fontsize=12)
    ax.grid(True, alpha=0.3)
    _format_dates(ax)
    return _finish(fig, save_path, show)


def plot_cleaned_vs_raw(raw, cleaned, outliers=None, save_path=None, show=False):
    """Overlay the cleaned series on the raw one and mark replaced outliers."""
    fig, ax = plt.subplots(figsize=PLOT_CONFIG['figsize'])
    ax.plot(raw.index, raw, color='grey', linewidth=0.8, alpha=0.6, label='Raw')
    ax.plot(cleaned.index, cleaned, color='#1f77b4', linewidth=1.2, label='Cleaned')
    if outliers is not None and outliers.any():
        flagged = outliers.astype(bool).to_numpy()
        ax.scatter(raw.index[flagged], raw[flagged], color='red', zorder=3, label='Outliers')
    ax.set_title('Outlier Cleaning', fontsize=14, fontweight='bold')
    ax.set_xlabel('Date', fontsize=12)
    ax.set_ylabel('Bicycle Count', fontsize=12)
    ax.legend(loc='upper left')
    ax.grid(True, alpha=0.3)
    _format_dates(ax)
    return _finish(fig, save_path, show)


def plot_moving_averages(df, count_col, ma_columns, save_path=None, show=False):
    """
    Plot the count with its moving averages.

    ma_columns maps column name to legend label.
    """
    fig, ax = plt.subplots(figsize=PLOT_CONFIG['figsize'])
    ax.plot(df.index, df[count_col], color='grey', linewidth=0.8, alpha=0.6, label='Counts')
    colors = ['orange', 'red', 'green', 'purple']
    for (column, label), color in zip(ma_columns.items(), colors):
        ax.plot(df.index, df[column], color=color, linewidth=2, label=label)
    ax.set_title('Moving Averages', fontsize=14, fontweight='bold')
    ax.set_xlabel('Date', fontsize=12)
    ax.set_ylabel('Bicycle Count', fontsize=12)
    ax.legend(loc='upper left')
    ax.grid(True, alpha=0.3)
    _format_dates(ax)
    return _finish(fig, save_path, show)


def plot_decomposition(decomposition, save_path=None, show=False):
    """Stack observed, trend, seasonal and remainder panels from decompose_stl."""
    components = [
        ('observed', 'Data'),
        ('trend', 'Trend'),
        ('seasonal', 'Seasonal'),
        ('resid', 'Remainder'),
    ]
    fig, axes = plt.subplots(len(components), 1, figsize=PLOT_CONFIG['grid_figsize'], sharex=True)
    for ax, (key, label) in zip(axes, components):
        component = decomposition[key]
        ax.plot(component.index, component, linewidth=1)
        ax.set_ylabel(label, fontsize=10)
        ax.grid(True, alpha=0.3)
    axes[0].set_title(
        f"STL Decomposition (period={decomposition['period']})",
        fontsize=14, fontweight='bold'
    )
    _format_dates(axes[-1])
    return _finish(fig, save_path, show)


def plot_acf_pacf(series, nlags=30, title='', save_path=None, show=False):
    values = series.dropna()
    nlags = _max_lags(values, nlags)
    fig, axes = plt.subplots(1, 2, figsize=(16, 5))

    plot_acf(values, lags=nlags, ax=axes[0], alpha=0.05)
    axes[0].set_title(f'Autocorrelation Function (ACF)\n{title}', fontsize=12, fontweight='bold')
    axes[0].set_xlabel('Lag', fontsize=10)

    plot_pacf(values, lags=nlags, ax=axes[1], alpha=0.05, method='ywm')
    axes[1].set_title(f'Partial Autocorrelation Function (PACF)\n{title}', fontsize=12, fontweight='bold')
    axes[1].set_xlabel('Lag', fontsize=10)

    for ax in axes:
        ax.grid(True, alpha=0.3, linestyle='--')
    return _finish(fig, save_path, show)


def plot_residual_display(residuals, nlags=45, title='Model Residuals', save_path=None, show=False):
    """Residuals over time on top, their ACF and PACF below."""
    values = residuals.dropna()
    nlags = _max_lags(values, nlags)

    fig = plt.figure(figsize=PLOT_CONFIG['grid_figsize'])
    grid = fig.add_gridspec(2, 2)
    ax_line = fig.add_subplot(grid[0, :])
    ax_acf = fig.add_subplot(grid[1, 0])
    ax_pacf = fig.add_subplot(grid[1, 1])

    ax_line.plot(values.index, values, color='#1f77b4', linewidth=0.8)
    ax_line.axhline(y=0, color='red', linestyle='--', linewidth=1)
    ax_line.set_title(title, fontsize=14, fontweight='bold')
    ax_line.grid(True, alpha=0.3)

    plot_acf(values, lags=nlags, ax=ax_acf, alpha=0.05)
    ax_acf.set_title('ACF', fontsize=12)
    plot_pacf(values, lags=nlags, ax=ax_pacf, alpha=0.05, method='ywm')
    ax_pacf.set_title('PACF', fontsize=12)
    return _finish(fig, save_path, show)


def plot_residual_diagnostics(residuals, nlags=45, save_path=None, show=False):
    values = residuals.dropna()
    fig, axes = plt.subplots(2, 2, figsize=PLOT_CONFIG['grid_figsize'])

    # 1. Residuals time series
    axes[0, 0].plot(values.index, values, color='#1f77b4', linewidth=0.8)
    axes[0, 0].axhline(y=0, color='red', linestyle='--', linewidth=1)
    axes[0, 0].set_title('Residuals Over Time', fontsize=12, fontweight='bold')
    axes[0, 0].grid(True, alpha=0.3)

    # 2. Residuals histogram
    sns.histplot(values, bins=50, kde=True, ax=axes[0, 1], color='#1f77b4')
    axes[0, 1].axvline(x=values.mean(), color='red', linestyle='--', linewidth=2,
                       label=f'Mean: {values.mean():.2f}')
    axes[0, 1].set_title('Residuals Distribution', fontsize=12, fontweight='bold')
    axes[0, 1].legend()

    # 3. Q-Q plot for normality
    stats.probplot(values, dist="norm", plot=axes[1, 0])
    axes[1, 0].set_title('Q-Q Plot - Normality Test', fontsize=12, fontweight='bold')
    axes[1, 0].grid(True, alpha=0.3)

    # 4. ACF of residuals
    plot_acf(values, lags=_max_lags(values, nlags), ax=axes[1, 1], alpha=0.05)
    axes[1, 1].set_title('ACF of Residuals', fontsize=12, fontweight='bold')
    axes[1, 1].grid(True, alpha=0.3, linestyle='--')
    return _finish(fig, save_path, show)


def _draw_forecast(ax, history, forecast_frame, title):
    ax.plot(history.index, history, color='#1f77b4', linewidth=1, label='Observed')
    ax.plot(forecast_frame.index, forecast_frame['forecast'], color='orange',
            linewidth=2, label='Forecast')

    levels = sorted(
        (col.split('_', 1)[1] for col in forecast_frame.columns if col.startswith('lower_')),
        key=float, reverse=True,
    )
    for alpha, level in zip((0.15, 0.3, 0.45), levels):
        ax.fill_between(
            forecast_frame.index,
            forecast_frame[f'lower_{level}'],
            forecast_frame[f'upper_{level}'],
            color='orange', alpha=alpha, label=f'{level}% interval'
        )

    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_xlabel('Date', fontsize=12)
    ax.set_ylabel('Bicycle Count', fontsize=12)
    ax.legend(loc='upper left')
    ax.grid(True, alpha=0.3)


def plot_forecast(history, forecast_frame, title='Forecast', save_path=None, show=False):
    """History line, forecast mean and every lower_/upper_ interval band."""
    fig, ax = plt.subplots(figsize=PLOT_CONFIG['figsize'])
    _draw_forecast(ax, history, forecast_frame, title)
    return _finish(fig, save_path, show)


def plot_holdout(train, test, forecast_frame, metrics=None, save_path=None, show=False):
    """Forecast over the holdout window against the held-back actuals."""
    title = 'Holdout Forecast vs Actual'
    if metrics:
        title += f" (RMSE={metrics['rmse']:.1f}, MAPE={metrics['mape']:.1f}%)"
    fig, ax = plt.subplots(figsize=PLOT_CONFIG['figsize'])
    _draw_forecast(ax, train, forecast_frame, title)
    ax.plot(test.index, test, color='black', linewidth=1.5, linestyle='--', label='Actual')
    ax.legend(loc='upper left')
    return _finish(fig, save_path, show)
