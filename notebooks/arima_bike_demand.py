# ---
# jupyter:
#   jupytext:
#     cell_metadata_filter: -all
#     formats: ipynb,py:percent
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.19.1
# ---

# %% [markdown]
# # ARIMA Model for Daily Bike Rental Demand
#
# ## Overview
# This notebook walks through fitting an **ARIMA (AutoRegressive Integrated Moving Average)** model to the daily bike sharing counts (`day.csv`, columns `dteday` and `cnt`) to forecast rental demand.
#
# - **AR (AutoRegressive):** Uses past values to predict future values
# - **I (Integrated):** Applies differencing to make the time series stationary
# - **MA (Moving Average):** Uses past forecast errors to improve predictions
#
# Every step calls a library routine from `bike_demand` and ends with a plot to inspect. The same sequence runs unattended with `python main_analysis.py`.
#
# ---
#
# ## Table of Contents
# 1. **Data Preparation**
#    - Load data, clean outliers, smooth with moving averages
#    - Deseasonalize with STL
# 2. **Model Identification**
#    - Stationarity (ADF test) and differencing
#    - ACF/PACF inspection
# 3. **Fitting and Diagnostics**
#    - auto_arima order selection
#    - Residual diagnostics and a manual refit
# 4. **Forecasting**
#    - 30-day forecast, holdout test, seasonal refit

# %% [markdown]
# ## 1.1 Setup

# %%
import sys
from pathlib import Path
import warnings

import matplotlib.pyplot as plt

PROJECT_ROOT = Path().resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import CONFIG_PATH
from bike_demand import (
    load_config,
    load_daily_counts,
    add_clean_column,
    add_moving_averages,
    decompose_stl,
    add_deseasonalized_column,
    perform_adf_test,
    difference_series,
    find_differencing_order,
    suggest_orders,
    diagnostic_tests,
    burn_in_residuals,
    evaluate_holdout,
)
from bike_demand.diagnostics import significant_residual_lags
from bike_demand.model import fit_arima, forecast, select_order_auto, compare_orders
from bike_demand.utils import resolve_path
from bike_demand import visualization as viz

viz.apply_plot_style()
warnings.filterwarnings('ignore')

config = load_config(CONFIG_PATH)
print("✓ All libraries imported successfully")

# %% [markdown]
# ## 1.2 Load Data
#
# The CSV holds one row per day. Missing calendar days come back as NaN and are filled during cleaning.

# %%
df = load_daily_counts(resolve_path(config['data']['path']))
print(f"✓ Data shape: {df.shape}")
print(f"✓ Date range: {df.index.min().date()} to {df.index.max().date()}")

viz.plot_daily_counts(df['cnt'], show=True)

# %% [markdown]
# **Figure 1: Daily Counts**
#
# Demand grows from the first year to the second and swings with the seasons. A few days drop close to zero (storms, system outages); these are the outliers that would distort the model.

# %% [markdown]
# ## 1.3 Outlier Cleaning
#
# A LOWESS curve follows the local level; days whose distance from it falls outside 3 IQRs of all such distances are replaced by interpolation.

# %%
df = add_clean_column(df, iqr_multiplier=config['cleaning']['iqr_multiplier'],
                      frac=config['cleaning']['smoother_frac'])
print(f"Outliers replaced: {df['is_outlier'].sum()}")

viz.plot_cleaned_vs_raw(df['cnt'], df['clean_cnt'], df['is_outlier'], show=True)

# %% [markdown]
# ## 1.4 Moving Averages
#
# The daily series is still volatile. Weekly (order 7) and monthly (order 30) moving averages show the underlying level; the weekly average is what we model.

# %%
df = add_moving_averages(df, weekly_order=7, monthly_order=30)

viz.plot_moving_averages(
    df, 'clean_cnt',
    {'cnt_ma': 'Weekly Moving Average', 'cnt_ma30': 'Monthly Moving Average'},
    show=True,
)

# %% [markdown]
# ## 1.5 Decomposition and Seasonal Adjustment
#
# STL splits the weekly average into **trend**, **seasonal** and **remainder** components. With a period of 30 days and a fixed (periodic) seasonal pattern, subtracting the seasonal component gives the deseasonalized series used for ARIMA.

# %%
period = config['decomposition']['period']
decomposition = decompose_stl(df['cnt_ma'], period=period)
df = add_deseasonalized_column(df, decomposition=decomposition)
deseasonal_cnt = df['deseasonal_cnt'].dropna()

viz.plot_decomposition(decomposition, show=True)

# %% [markdown]
# # Section 2: Model Identification
#
# ## 2.1 Stationarity - Augmented Dickey-Fuller Test
#
# - **p-value < 0.05:** Reject the unit root null → series is **stationary**
# - **p-value ≥ 0.05:** Fail to reject → **non-stationary**, differencing needed

# %%
adf_ma = perform_adf_test(df['cnt_ma'])
print(f"Weekly MA: ADF={adf_ma['adf_statistic']:.3f}, p-value={adf_ma['p_value']:.4f}, "
      f"stationary={adf_ma['is_stationary']}")

viz.plot_acf_pacf(df['cnt_ma'], nlags=30, title='Weekly Moving Average', show=True)

# %% [markdown]
# The ACF of the smoothed series decays very slowly, the signature of a trend. One difference is usually enough:

# %%
differencing = find_differencing_order(deseasonal_cnt, max_d=2)
d = differencing['d']
for test in differencing['tests']:
    print(f"d={test['d']}: p-value={test['p_value']:.4f}, stationary={test['is_stationary']}")

count_d1 = difference_series(deseasonal_cnt, d)
viz.plot_acf_pacf(count_d1, nlags=30, title=f'Differenced Series (d={d})', show=True)

# %% [markdown]
# ## 2.2 ACF / PACF Order Hints
#
# - Sharp PACF cutoff after lag p → AR(p)
# - Sharp ACF cutoff after lag q → MA(q)

# %%
hints = suggest_orders(count_d1, nlags=30)
print(f"Suggested p={hints['p']}, q={hints['q']}")
print(f"Significant ACF lags:  {hints['acf_lags']}")
print(f"Significant PACF lags: {hints['pacf_lags']}")

# %% [markdown]
# # Section 3: Fitting and Diagnostics
#
# ## 3.1 Automatic Order Selection

# %%
auto_model = select_order_auto(deseasonal_cnt, d=d, seasonal=False, trace=True)
fit = fit_arima(deseasonal_cnt, auto_model['order'])
print(fit.summary())

# %% [markdown]
# ## 3.2 Residual Diagnostics
#
# Residuals of a good model look like white noise. Spikes in the residual ACF point to structure the model misses.

# %%
residuals = burn_in_residuals(fit)
print(diagnostic_tests(residuals, lags=[10]))
print(f"Significant residual lags: {significant_residual_lags(residuals, nlags=45)}")

viz.plot_residual_display(residuals, nlags=45, title=f"Residuals ARIMA{auto_model['order']}", show=True)

# %% [markdown]
# A repeating spike at lag 7 suggests a longer MA component. Compare a few candidates, then refit with q = 7.

# %%
print(compare_orders(deseasonal_cnt, [auto_model['order'], (1, 1, 1), (1, 1, 7), (2, 1, 7)]))

manual_order = tuple(config['model']['manual_order'])
fit2 = fit_arima(deseasonal_cnt, manual_order)
residuals2 = burn_in_residuals(fit2)
print(diagnostic_tests(residuals2, lags=[10]))

viz.plot_residual_display(residuals2, nlags=45, title=f"Residuals ARIMA{manual_order}", show=True)
viz.plot_residual_diagnostics(residuals2, show=True)

# %% [markdown]
# # Section 4: Forecasting
#
# ## 4.1 30-Day Forecast

# %%
fcast = forecast(fit2, steps=30, levels=(80, 95))
print(fcast.head())

viz.plot_forecast(deseasonal_cnt, fcast, title=f"Forecast ARIMA{manual_order}", show=True)

# %% [markdown]
# ## 4.2 Holdout Test
#
# Hold back the last 25 days, refit, and compare the forecast with what actually happened.

# %%
holdout = evaluate_holdout(deseasonal_cnt, manual_order, holdout=25)
print(holdout['metrics'])

viz.plot_holdout(holdout['train'], holdout['test'], holdout['forecast'], holdout['metrics'], show=True)

# %% [markdown]
# The forecast is close to a straight line: without seasonality the model only carries the recent level forward. Bringing the seasonal component back in lets the forecast follow the monthly swing.
#
# ## 4.3 Seasonal Refit

# %%
seasonal_model = select_order_auto(deseasonal_cnt, seasonal=True, m=config['model']['seasonal_period'])
seasonal_fit = fit_arima(deseasonal_cnt, seasonal_model['order'],
                         seasonal_order=seasonal_model['seasonal_order'])
seas_fcast = forecast(seasonal_fit, steps=30)

viz.plot_forecast(deseasonal_cnt, seas_fcast,
                  title=f"Seasonal ARIMA{seasonal_model['order']}{seasonal_model['seasonal_order']}",
                  show=True)
plt.show()
