# Data loading and preprocessing
from bike_demand.data_loader import load_daily_counts
from bike_demand.cleaning import detect_outliers, clean_outliers, add_clean_column
from bike_demand.smoothing import moving_average, add_moving_averages

# Time series analysis
from bike_demand.decomposition import decompose_stl, deseasonalize, seasonally_adjust, add_deseasonalized_column
from bike_demand.stationarity import perform_adf_test, difference_series, find_differencing_order
from bike_demand.correlation import compute_acf_pacf, significant_lags, suggest_orders

# Diagnostics and evaluation
from bike_demand.diagnostics import diagnostic_tests, residual_summary, burn_in_residuals
from bike_demand.evaluation import calculate_metrics, train_holdout_split, evaluate_holdout

# Utilities
from bike_demand.utils import load_config

__all__ = [
    # Data loading
    'load_daily_counts',
    'detect_outliers',
    'clean_outliers',
    'add_clean_column',
    'moving_average',
    'add_moving_averages',
    # Analysis
    'decompose_stl',
    'deseasonalize',
    'seasonally_adjust',
    'add_deseasonalized_column',
    'perform_adf_test',
    'difference_series',
    'find_differencing_order',
    'compute_acf_pacf',
    'significant_lags',
    'suggest_orders',
    # Diagnostics and evaluation
    'diagnostic_tests',
    'residual_summary',
    'burn_in_residuals',
    'calculate_metrics',
    'train_holdout_split',
    'evaluate_holdout',
    # Utilities
    'load_config',
]
